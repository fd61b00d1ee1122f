"""FastAPI main application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from meetroom import __version__
from meetroom.core.config import settings
from meetroom.core.middleware import setup_middleware
from meetroom.core.exceptions import MeetroomError

from meetroom.api.auth import router as auth_router
from meetroom.api.users import router as users_router
from meetroom.api.roles import router as roles_router
from meetroom.api.meeting_rooms import router as meeting_rooms_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("meetroom")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting %s API", settings.APP_NAME)
    yield
    logger.info("Shutting down %s API", settings.APP_NAME)


app = FastAPI(
    title="Meetroom API",
    description="Role-based access control, users, and meeting rooms",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Middleware
setup_middleware(app)


@app.exception_handler(MeetroomError)
async def meetroom_exception_handler(request: Request, exc: MeetroomError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
    )

# Register routers
app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(roles_router, prefix="/api")
app.include_router(meeting_rooms_router)


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": __version__,
        "docs": "/docs",
    }


@app.get("/api/health")
async def health():
    """Quick health check endpoint."""
    return {"status": "ok"}
