import os

# Settings are read at import time, so configure before importing meetroom.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEBUG"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SESSION_BACKEND"] = "basic"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import meetroom.models  # noqa: E402,F401
from meetroom.db.base import Base  # noqa: E402
from meetroom.db.session import get_db  # noqa: E402
from meetroom.db.seeds.seed_roles import seed_roles  # noqa: E402
from meetroom.db.seeds.seed_admin import seed_admin  # noqa: E402
from meetroom.core.config import settings  # noqa: E402
from meetroom.models.role import Role  # noqa: E402
from meetroom.services.user_service import user_service  # noqa: E402
from meetroom.main import app  # noqa: E402

# In-memory SQLite shared by every session through StaticPool.
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(name="session")
def session_fixture():
    """Fresh schema with the default roles seeded."""
    Base.metadata.create_all(test_engine)
    db = TestingSessionLocal()
    seed_roles(db)
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def role_id(db, name: str) -> int:
    return db.query(Role).filter(Role.name == name).one().id


def make_user(db, username: str, role: str = "user", password: str = "secret123", **extra):
    """Register a user holding the named role."""
    return user_service.register(
        db,
        email=extra.pop("email", f"{username}@example.com"),
        username=username,
        password=password,
        first_name=extra.pop("first_name", username.capitalize()),
        last_name=extra.pop("last_name", "Tester"),
        role_id=role_id(db, role),
        **extra,
    )


def login_headers(client, username: str, password: str = "secret123") -> dict:
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['session_token']}"}


@pytest.fixture(name="admin_headers")
def admin_headers_fixture(client, session):
    seed_admin(session)
    return login_headers(client, settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)
