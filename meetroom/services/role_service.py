"""Role service: role CRUD, permission updates, user assignment."""

import logging
import math
from typing import Optional, List, Dict, Any

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from meetroom.models.role import Role
from meetroom.models.user import User
from meetroom.core.exceptions import (
    ValidationError, ResourceConflictError, ResourceNotFoundError,
)
from meetroom.core.permissions import (
    PermissionRecord, validate_permissions, merge_permissions,
    has_permission as record_has_permission,
)

logger = logging.getLogger("meetroom.roles")

_UPDATABLE_FIELDS = ("name", "display_name", "description", "is_active")


class RoleService:
    """Manages roles and the permission records attached to them."""

    @staticmethod
    def find_all(db: Session) -> List[Role]:
        """All roles, newest first."""
        return db.query(Role).order_by(Role.created_at.desc(), Role.id.desc()).all()

    @staticmethod
    def find_active(db: Session) -> List[Role]:
        """Active roles ordered by name."""
        return db.query(Role).filter(Role.is_active == True).order_by(Role.name.asc()).all()  # noqa: E712

    @staticmethod
    def find_by_id(db: Session, role_id: int) -> Optional[Role]:
        return db.query(Role).filter(Role.id == role_id).first()

    @staticmethod
    def find_by_name(db: Session, name: str) -> Optional[Role]:
        return db.query(Role).filter(Role.name == name).first()

    @staticmethod
    def get(db: Session, role_id: int) -> Role:
        """Get a role by id."""
        role = RoleService.find_by_id(db, role_id)
        if not role:
            raise ResourceNotFoundError(f"Role with id '{role_id}' not found")
        return role

    @staticmethod
    def find_detail(db: Session, role_id: int) -> Dict[str, Any]:
        """Role fields plus the users currently assigned to it."""
        role = RoleService.get(db, role_id)
        return {"role": role, "users": list(role.users)}

    @staticmethod
    def _user_counts(db: Session) -> Dict[int, int]:
        rows = (
            db.query(User.role_id, func.count(User.id))
            .filter(User.role_id.isnot(None))
            .group_by(User.role_id)
            .all()
        )
        return {role_id: count for role_id, count in rows}

    @staticmethod
    def _summaries(db: Session, roles: List[Role]) -> List[Dict[str, Any]]:
        counts = RoleService._user_counts(db)
        return [
            {
                "id": role.id,
                "name": role.name,
                "display_name": role.display_name,
                "description": role.description,
                "is_active": role.is_active,
                "user_count": counts.get(role.id, 0),
                "created_at": role.created_at,
            }
            for role in roles
        ]

    @staticmethod
    def find_summaries(db: Session) -> List[Dict[str, Any]]:
        """Role summaries with assigned-user counts."""
        return RoleService._summaries(db, RoleService.find_all(db))

    @staticmethod
    def create(
        db: Session,
        name: str,
        display_name: str,
        permissions: PermissionRecord,
        description: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Role:
        """Create a new role.

        Raises:
            ValidationError: If the permission record is malformed.
            ResourceConflictError: If the name is taken.
        """
        if not validate_permissions(permissions):
            raise ValidationError("Invalid permissions structure")

        if RoleService.find_by_name(db, name):
            raise ResourceConflictError(f"Role with name '{name}' already exists")

        role = Role(
            name=name,
            display_name=display_name,
            description=description,
            is_active=True if is_active is None else is_active,
        )
        role.permissions = permissions
        db.add(role)
        db.commit()
        db.refresh(role)
        logger.info("Role '%s' created", name)
        return role

    @staticmethod
    def update(db: Session, role_id: int, **kwargs) -> Role:
        """Update a role's fields and, optionally, its permission record."""
        role = RoleService.get(db, role_id)

        new_name = kwargs.get("name")
        if new_name is not None and not new_name.strip():
            raise ValidationError("Role name cannot be empty")
        if new_name is not None and new_name != role.name:
            conflict = RoleService.find_by_name(db, new_name)
            if conflict and conflict.id != role.id:
                raise ResourceConflictError(f"Role with name '{new_name}' already exists")

        permissions = kwargs.pop("permissions", None)
        if permissions is not None and not validate_permissions(permissions):
            raise ValidationError("Invalid permissions structure")

        for key in _UPDATABLE_FIELDS:
            if key in kwargs and kwargs[key] is not None:
                setattr(role, key, kwargs[key])
        if permissions is not None:
            role.permissions = permissions

        db.commit()
        db.refresh(role)
        return role

    @staticmethod
    def delete(db: Session, role_id: int) -> None:
        """Delete a role that no user references."""
        role = RoleService.get(db, role_id)

        users_count = db.query(User).filter(User.role_id == role_id).count()
        if users_count > 0:
            raise ResourceConflictError(
                f"Cannot delete role. {users_count} users are assigned to this role"
            )

        name = role.name
        db.delete(role)
        db.commit()
        logger.info("Role '%s' deleted", name)

    @staticmethod
    def toggle_status(db: Session, role_id: int) -> Role:
        """Flip a role between active and inactive."""
        role = RoleService.get(db, role_id)
        role.is_active = not role.is_active
        db.commit()
        db.refresh(role)
        return role

    @staticmethod
    def bulk_update_status(db: Session, role_ids: List[int], is_active: bool) -> int:
        """Set ``is_active`` on every listed role. Returns the number of rows changed."""
        if not role_ids:
            return 0
        count = (
            db.query(Role)
            .filter(Role.id.in_(role_ids))
            .update({"is_active": is_active}, synchronize_session=False)
        )
        db.commit()
        return count

    @staticmethod
    def assign_users(db: Session, role_id: int, user_ids: List[int]) -> int:
        """Point every listed user at ``role_id``."""
        RoleService.get(db, role_id)
        if not user_ids:
            return 0
        count = (
            db.query(User)
            .filter(User.id.in_(user_ids))
            .update({"role_id": role_id}, synchronize_session=False)
        )
        db.commit()
        return count

    @staticmethod
    def remove_users(db: Session, user_ids: List[int]) -> int:
        """Detach the listed users from whatever role they hold."""
        if not user_ids:
            return 0
        count = (
            db.query(User)
            .filter(User.id.in_(user_ids))
            .update({"role_id": None}, synchronize_session=False)
        )
        db.commit()
        return count

    @staticmethod
    def find_by_permission(db: Session, module: str, action: str) -> List[Role]:
        """Roles whose record grants ``module.action``."""
        matches = []
        for role in RoleService.find_all(db):
            try:
                permissions = role.permissions
            except ValidationError:
                continue
            if record_has_permission(permissions, module, action):
                matches.append(role)
        return matches

    @staticmethod
    def has_permission(db: Session, role_id: int, module: str, action: str) -> bool:
        """Check one permission on a stored role. Unknown roles grant nothing."""
        role = RoleService.find_by_id(db, role_id)
        if not role:
            return False
        try:
            return record_has_permission(role.permissions, module, action)
        except ValidationError:
            return False

    @staticmethod
    def update_permissions(db: Session, role_id: int, permissions: PermissionRecord) -> Role:
        """Replace a role's permission record."""
        if not validate_permissions(permissions):
            raise ValidationError("Invalid permissions structure")
        role = RoleService.get(db, role_id)
        role.permissions = permissions
        db.commit()
        db.refresh(role)
        return role

    @staticmethod
    def merge_permissions(db: Session, role_id: int, additional: PermissionRecord) -> Role:
        """Merge ``additional`` into the role's current record and store it."""
        role = RoleService.get(db, role_id)
        merged = merge_permissions(role.permissions, additional)
        return RoleService.update_permissions(db, role_id, merged)

    @staticmethod
    def search(db: Session, query: str) -> List[Role]:
        """Case-insensitive match on name, display name, or description."""
        pattern = f"%{query}%"
        return (
            db.query(Role)
            .filter(or_(
                Role.name.ilike(pattern),
                Role.display_name.ilike(pattern),
                Role.description.ilike(pattern),
            ))
            .order_by(Role.created_at.desc(), Role.id.desc())
            .all()
        )

    @staticmethod
    def find_paginated(db: Session, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        """A page of role summaries."""
        total = db.query(Role).count()
        roles = (
            db.query(Role)
            .order_by(Role.created_at.desc(), Role.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "roles": RoleService._summaries(db, roles),
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit),
        }

    @staticmethod
    def get_stats(db: Session) -> Dict[str, int]:
        """Counts of roles by status and by whether anyone holds them."""
        total = db.query(Role).count()
        active = db.query(Role).filter(Role.is_active == True).count()  # noqa: E712
        with_users = db.query(Role).filter(Role.users.any()).count()
        return {
            "total": total,
            "active": active,
            "inactive": total - active,
            "with_users": with_users,
            "without_users": total - with_users,
        }

    @staticmethod
    def clone(db: Session, role_id: int, new_name: str, new_display_name: str) -> Role:
        """Copy a role's description, permissions, and status under a new name."""
        source = RoleService.get(db, role_id)
        if RoleService.find_by_name(db, new_name):
            raise ResourceConflictError(f"Role with name '{new_name}' already exists")
        return RoleService.create(
            db,
            name=new_name,
            display_name=new_display_name,
            permissions=source.permissions,
            description=source.description,
            is_active=source.is_active,
        )


role_service = RoleService()
