"""Auth API router: register, login, me, change password."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from meetroom.db.session import get_db
from meetroom.schemas.schemas import (
    LoginRequest, RegisterRequest, ChangePasswordRequest,
    LoginResponse, UserProfile, MessageResponse,
)
from meetroom.services.user_service import user_service
from meetroom.services.session_service import session_service
from meetroom.core.security import get_current_user_id

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserProfile, status_code=201)
async def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new user. Self-registration always gets the default role."""
    user = user_service.register(db, **body.model_dump())
    return UserProfile.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Check credentials and issue a session token."""
    result = user_service.login(db, body.password, email=body.email, username=body.username)
    user = result["user"]
    return LoginResponse(
        user=UserProfile.model_validate(user),
        message=result["message"],
        session_token=session_service.create_session(user.id),
    )


@router.get("/me", response_model=UserProfile)
async def get_me(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Get current user profile."""
    return UserProfile.model_validate(user_service.get_user_profile(db, user_id))


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Change the current user's password."""
    user_service.change_password(db, user_id, body.current_password, body.new_password)
    return MessageResponse(message="Password changed")
