"""User service: registration, login, profile management."""

import logging
import math
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List

from sqlalchemy import or_
from sqlalchemy.orm import Session

from meetroom.models.user import User
from meetroom.models.role import Role
from meetroom.core.config import settings
from meetroom.core.security import hash_password, verify_password
from meetroom.core.exceptions import (
    AuthenticationError, InternalError, ResourceConflictError,
    ResourceNotFoundError, ValidationError,
)

logger = logging.getLogger("meetroom.users")

_UPDATABLE_FIELDS = (
    "email", "username", "first_name", "last_name", "avatar", "phone_number",
    "is_active", "email_verified", "role_id",
)
_NULLABLE_FIELDS = ("avatar", "phone_number")


class UserService:
    """Handles user accounts and credential checks."""

    @staticmethod
    def is_email_taken(db: Session, email: str, exclude_id: Optional[int] = None) -> bool:
        """True if another user already owns ``email``."""
        user = db.query(User.id).filter(User.email == email).first()
        if not user:
            return False
        return not (exclude_id is not None and user.id == exclude_id)

    @staticmethod
    def is_username_taken(db: Session, username: str, exclude_id: Optional[int] = None) -> bool:
        """True if another user already owns ``username``."""
        user = db.query(User.id).filter(User.username == username).first()
        if not user:
            return False
        return not (exclude_id is not None and user.id == exclude_id)

    @staticmethod
    def _resolve_role(db: Session, role_id: Optional[int]) -> Role:
        if role_id is not None:
            role = db.query(Role).filter(Role.id == role_id).first()
            if not role:
                raise ResourceNotFoundError(f"Role with id '{role_id}' not found")
            return role
        role = db.query(Role).filter(Role.name == settings.DEFAULT_ROLE).first()
        if not role:
            raise ResourceNotFoundError(f"Role '{settings.DEFAULT_ROLE}' not found")
        return role

    @staticmethod
    def register(
        db: Session,
        email: str,
        username: str,
        password: str,
        first_name: str,
        last_name: str,
        avatar: Optional[str] = None,
        phone_number: Optional[str] = None,
        role_id: Optional[int] = None,
        is_active: bool = True,
        email_verified: bool = False,
    ) -> User:
        """Create a new user and return the stored profile.

        Raises:
            ResourceConflictError: If the email or username is taken.
            ResourceNotFoundError: If the requested (or default) role is missing.
            InternalError: If the new user cannot be read back.
        """
        if UserService.is_email_taken(db, email):
            raise ResourceConflictError("Email already exists")
        if UserService.is_username_taken(db, username):
            raise ResourceConflictError("Username already exists")

        role = UserService._resolve_role(db, role_id)

        user = User(
            email=email,
            username=username,
            hashed_password=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            avatar=avatar,
            phone_number=phone_number,
            role_id=role.id,
            is_active=is_active,
            email_verified=email_verified,
        )
        db.add(user)
        db.commit()

        profile = db.query(User).filter(User.id == user.id).first()
        if not profile:
            raise InternalError("User profile not found")
        logger.info("Registered user %s (%s)", profile.id, profile.username)
        return profile

    @staticmethod
    def login(
        db: Session,
        password: str,
        email: Optional[str] = None,
        username: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Check credentials and record the login.

        Raises:
            ValidationError: If neither email nor username is given.
            AuthenticationError: If credentials are invalid or the account is deactivated.
        """
        identifier = email or username
        if not identifier:
            raise ValidationError("Email or username is required")

        user = (
            db.query(User)
            .filter(or_(User.email == identifier, User.username == identifier))
            .first()
        )
        if not user or not verify_password(password, user.hashed_password):
            logger.warning("Rejected login for '%s'", identifier)
            raise AuthenticationError("Invalid credentials")

        if not user.is_active:
            raise AuthenticationError("Account is deactivated")

        user.last_login_at = datetime.now(timezone.utc)
        db.commit()

        return {
            "user": UserService.get_user_profile(db, user.id),
            "message": "Login successful",
        }

    @staticmethod
    def get_user_profile(db: Session, user_id: int) -> User:
        """Get a user by id."""
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ResourceNotFoundError("User not found")
        return user

    @staticmethod
    def update_user(db: Session, user_id: int, **kwargs) -> User:
        """Update profile fields, re-checking uniqueness and re-hashing the password."""
        user = UserService.get_user_profile(db, user_id)

        email = kwargs.get("email")
        if email and UserService.is_email_taken(db, email, user_id):
            raise ResourceConflictError("Email already exists")

        username = kwargs.get("username")
        if username and UserService.is_username_taken(db, username, user_id):
            raise ResourceConflictError("Username already exists")

        if kwargs.get("role_id") is not None:
            UserService._resolve_role(db, kwargs["role_id"])

        password = kwargs.pop("password", None)
        if password:
            user.hashed_password = hash_password(password)

        for key in _UPDATABLE_FIELDS:
            if key not in kwargs:
                continue
            value = kwargs[key]
            if value is None and key not in _NULLABLE_FIELDS:
                continue
            setattr(user, key, value)
        db.commit()

        updated = db.query(User).filter(User.id == user_id).first()
        if not updated:
            raise ResourceNotFoundError("User not found after update")
        return updated

    @staticmethod
    def change_password(db: Session, user_id: int, current_password: str, new_password: str) -> None:
        """Replace the password after verifying the current one."""
        user = UserService.get_user_profile(db, user_id)
        if not verify_password(current_password, user.hashed_password):
            raise AuthenticationError("Current password is incorrect")
        user.hashed_password = hash_password(new_password)
        db.commit()

    @staticmethod
    def delete_user(db: Session, user_id: int) -> None:
        """Soft delete: deactivate the account."""
        user = UserService.get_user_profile(db, user_id)
        user.is_active = False
        db.commit()

    @staticmethod
    def hard_delete_user(db: Session, user_id: int) -> None:
        """Permanently remove the account."""
        user = UserService.get_user_profile(db, user_id)
        db.delete(user)
        db.commit()
        logger.info("Hard-deleted user %s", user_id)

    @staticmethod
    def verify_email(db: Session, user_id: int) -> User:
        """Mark the user's email as verified."""
        user = UserService.get_user_profile(db, user_id)
        user.email_verified = True
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def get_users(
        db: Session,
        page: int = 1,
        limit: int = 10,
        is_active: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """List users with pagination metadata."""
        query = db.query(User)
        if is_active is not None:
            query = query.filter(User.is_active == is_active)

        total = query.count()
        users = (
            query.order_by(User.created_at.desc(), User.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        total_pages = math.ceil(total / limit)

        return {
            "users": users,
            "total_count": total,
            "total_pages": total_pages,
            "current_page": page,
            "has_next_page": page < total_pages,
            "has_previous_page": page > 1,
        }

    @staticmethod
    def search_users(db: Session, query: str, limit: int = 10) -> List[User]:
        """Case-insensitive search over names, email, and username among active users."""
        term = (query or "").strip()
        if len(term) < 2:
            raise ValidationError("Search query must be at least 2 characters")

        pattern = f"%{term}%"
        return (
            db.query(User)
            .filter(
                or_(
                    User.first_name.ilike(pattern),
                    User.last_name.ilike(pattern),
                    User.email.ilike(pattern),
                    User.username.ilike(pattern),
                ),
                User.is_active == True,  # noqa: E712
            )
            .order_by(User.first_name.asc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_users_by_role(db: Session, role_id: int) -> List[User]:
        """Users holding ``role_id``."""
        return db.query(User).filter(User.role_id == role_id).all()

    @staticmethod
    def get_user_stats(db: Session) -> Dict[str, Any]:
        """Counts of users by status."""
        total = db.query(User).count()
        active = db.query(User).filter(User.is_active == True).count()  # noqa: E712
        return {
            "total_users": total,
            "active_users": active,
            "inactive_users": total - active,
            "active_percentage": (active / total) * 100 if total > 0 else 0,
        }


user_service = UserService()
