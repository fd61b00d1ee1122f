"""Seed default roles into the database."""

import logging
from sqlalchemy.orm import Session

from meetroom.models.role import Role
from meetroom.core.permissions import RoleName, default_permissions

logger = logging.getLogger("meetroom.seeds")

ROLE_DETAILS = {
    RoleName.admin: ("Admin", "System administrator"),
    RoleName.manager: ("Manager", "Department manager"),
    RoleName.user: ("User", "Standard user"),
    RoleName.guest: ("Guest", "Guest user"),
}


def seed_roles(db: Session) -> int:
    """Insert default roles that don't already exist. Returns how many were added."""
    added = 0
    for role_name, (display_name, description) in ROLE_DETAILS.items():
        existing = db.query(Role).filter(Role.name == role_name.value).first()
        if existing:
            continue
        role = Role(
            name=role_name.value,
            display_name=display_name,
            description=description,
            is_active=True,
        )
        # Each role stores its own copy; later edits never touch the seed table.
        role.permissions = default_permissions(role_name)
        db.add(role)
        added += 1

    db.commit()
    logger.info("Seeded %d roles", added)
    return added
