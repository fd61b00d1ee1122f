"""Seed the admin user from env vars."""

import logging
from sqlalchemy.orm import Session

from meetroom.models.user import User
from meetroom.models.role import Role
from meetroom.core.security import hash_password
from meetroom.core.config import settings
from meetroom.core.permissions import RoleName

logger = logging.getLogger("meetroom.seeds")


def seed_admin(db: Session) -> bool:
    """Create the admin user if not already present. Returns True if created."""
    admin_role = db.query(Role).filter(Role.name == RoleName.admin.value).first()
    if not admin_role:
        logger.warning("admin role not found. Run seed_roles first.")
        return False

    existing = db.query(User).filter(User.email == settings.ADMIN_EMAIL).first()
    if existing:
        logger.info("Admin '%s' already exists, skipping.", settings.ADMIN_EMAIL)
        return False

    admin = User(
        email=settings.ADMIN_EMAIL,
        username=settings.ADMIN_USERNAME,
        hashed_password=hash_password(settings.ADMIN_PASSWORD),
        first_name="System",
        last_name="Admin",
        is_active=True,
        email_verified=True,
        role_id=admin_role.id,
    )
    db.add(admin)
    db.commit()
    logger.info("Created admin: %s", settings.ADMIN_EMAIL)
    return True
