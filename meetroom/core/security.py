"""Password hashing, session authentication, and RBAC authorization helpers."""

import bcrypt
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from meetroom.core.config import settings
from meetroom.core.exceptions import ValidationError, forbidden, unauthorized
from meetroom.core.permissions import has_permission
from meetroom.db.session import get_db
from meetroom.models.user import User
from meetroom.services.session_service import session_service

# Session bearer scheme
security_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    pwd_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(pwd_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash. Malformed hashes never match."""
    pwd_bytes = plain_password.encode("utf-8")
    hashed_bytes = hashed_password.encode("utf-8")
    try:
        return bcrypt.checkpw(pwd_bytes, hashed_bytes)
    except ValueError:
        return False


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
    db: Session = Depends(get_db),
) -> int:
    """Extract user_id from the session Bearer token."""
    if credentials is None:
        raise unauthorized()
    session = session_service.validate_session(db, credentials.credentials)
    if session is None:
        raise unauthorized("Invalid or expired session")
    return session["user_id"]


async def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    """Load the authenticated user."""
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise unauthorized("Invalid or expired session")
    return user


class RequirePermission:
    """Dependency that checks the user's role grants ``module.action``."""

    def __init__(self, module: str, action: str):
        self.module = module
        self.action = action

    async def __call__(self, user: User = Depends(get_current_user)) -> User:
        role = user.role
        allowed = (
            role is not None
            and role.is_active
            and has_permission(_safe_permissions(role), self.module, self.action)
        )
        if not allowed:
            raise forbidden(f"Missing permission '{self.module}.{self.action}'")
        return user


def _safe_permissions(role) -> dict:
    # A role with a corrupt stored blob grants nothing.
    try:
        return role.permissions
    except ValidationError:
        return {}


# Convenience dependency factories
can_read_users = RequirePermission("users", "read")
can_update_users = RequirePermission("users", "update")
can_delete_users = RequirePermission("users", "delete")
can_read_roles = RequirePermission("roles", "read")
can_create_roles = RequirePermission("roles", "create")
can_update_roles = RequirePermission("roles", "update")
can_delete_roles = RequirePermission("roles", "delete")
