"""Permission matrix and helpers for role-based access control.

A permission record maps each module name to a mapping of action name to
boolean. Every check here is total: malformed or legacy records fail closed
(``False`` / invalid) instead of raising, because these functions gate every
privileged operation.
"""

import copy
import enum
import json
from typing import Any, Dict, Iterable, Mapping, Tuple

from meetroom.core.exceptions import ValidationError

PermissionRecord = Dict[str, Dict[str, bool]]

MODULE_ACTIONS: Dict[str, Tuple[str, ...]] = {
    "users": ("create", "read", "update", "delete"),
    "meetings": ("create", "read", "update", "delete", "manage"),
    "roles": ("create", "read", "update", "delete"),
    "reports": ("read", "export"),
    "settings": ("read", "update"),
}

REQUIRED_MODULES: Tuple[str, ...] = tuple(MODULE_ACTIONS)


class RoleName(str, enum.Enum):
    admin = "admin"
    manager = "manager"
    user = "user"
    guest = "guest"


# Seed table: the only source of default permission sets.
ROLE_PERMISSIONS: Dict[RoleName, PermissionRecord] = {
    RoleName.admin: {
        "users": {"create": True, "read": True, "update": True, "delete": True},
        "meetings": {"create": True, "read": True, "update": True, "delete": True, "manage": True},
        "roles": {"create": True, "read": True, "update": True, "delete": True},
        "reports": {"read": True, "export": True},
        "settings": {"read": True, "update": True},
    },
    RoleName.manager: {
        "users": {"create": True, "read": True, "update": True, "delete": False},
        "meetings": {"create": True, "read": True, "update": True, "delete": True, "manage": True},
        "roles": {"create": False, "read": True, "update": False, "delete": False},
        "reports": {"read": True, "export": True},
        "settings": {"read": True, "update": False},
    },
    RoleName.user: {
        "users": {"create": False, "read": True, "update": False, "delete": False},
        "meetings": {"create": True, "read": True, "update": False, "delete": False, "manage": False},
        "roles": {"create": False, "read": False, "update": False, "delete": False},
        "reports": {"read": False, "export": False},
        "settings": {"read": False, "update": False},
    },
    RoleName.guest: {
        "users": {"create": False, "read": False, "update": False, "delete": False},
        "meetings": {"create": False, "read": True, "update": False, "delete": False, "manage": False},
        "roles": {"create": False, "read": False, "update": False, "delete": False},
        "reports": {"read": False, "export": False},
        "settings": {"read": False, "update": False},
    },
}

ROLE_HIERARCHY: Dict[RoleName, int] = {
    RoleName.admin: 4,
    RoleName.manager: 3,
    RoleName.user: 2,
    RoleName.guest: 1,
}


def _role_level(role: Any) -> int:
    try:
        return ROLE_HIERARCHY[RoleName(role)]
    except ValueError:
        return 0


def is_higher_role(role1: Any, role2: Any) -> bool:
    """True if ``role1`` ranks strictly above ``role2``. Unknown names rank lowest."""
    return _role_level(role1) > _role_level(role2)


def is_admin(role: Any) -> bool:
    return _role_level(role) == ROLE_HIERARCHY[RoleName.admin]


def is_manager_or_above(role: Any) -> bool:
    return _role_level(role) >= ROLE_HIERARCHY[RoleName.manager]


def empty_permissions() -> PermissionRecord:
    """A record with every known action denied."""
    return {module: {action: False for action in actions} for module, actions in MODULE_ACTIONS.items()}


def default_permissions(role: Any) -> PermissionRecord:
    """Independent copy of the seed record for ``role`` (all-false for unknown roles)."""
    try:
        return copy.deepcopy(ROLE_PERMISSIONS[RoleName(role)])
    except ValueError:
        return empty_permissions()


def has_permission(record: Any, module: str, action: str) -> bool:
    """Return True iff ``record[module][action]`` is exactly ``True``."""
    if not isinstance(record, Mapping):
        return False
    module_permissions = record.get(module)
    if not isinstance(module_permissions, Mapping):
        return False
    return module_permissions.get(action) is True


def has_any(record: Any, checks: Iterable[Tuple[str, str]]) -> bool:
    return any(has_permission(record, module, action) for module, action in checks)


def has_all(record: Any, checks: Iterable[Tuple[str, str]]) -> bool:
    return all(has_permission(record, module, action) for module, action in checks)


def merge_permissions(base: Mapping[str, Any], additional: Mapping[str, Any]) -> PermissionRecord:
    """Union ``additional`` into ``base`` one module at a time.

    The result has exactly ``base``'s module keys. Within a module,
    ``additional`` wins on conflicting actions. Modules that only appear in
    ``additional`` are dropped.
    """
    if not isinstance(additional, Mapping):
        additional = {}
    merged: PermissionRecord = {}
    for module, actions in base.items():
        extra = additional.get(module)
        merged[module] = {
            **(dict(actions) if isinstance(actions, Mapping) else {}),
            **(dict(extra) if isinstance(extra, Mapping) else {}),
        }
    return merged


def validate_permissions(record: Any) -> bool:
    """True iff ``record`` is a mapping holding all five modules, each a mapping."""
    if not isinstance(record, Mapping):
        return False
    return all(isinstance(record.get(module), Mapping) for module in REQUIRED_MODULES)


def parse_permissions(raw: Any) -> PermissionRecord:
    """Turn a stored permissions blob (JSON text or mapping) into a validated record.

    Raises:
        ValidationError: If the blob is not JSON or does not have the required shape.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise ValidationError("Invalid permissions structure")
    if not validate_permissions(raw):
        raise ValidationError("Invalid permissions structure")
    return {module: dict(actions) for module, actions in raw.items() if isinstance(actions, Mapping)}


def dump_permissions(record: Mapping[str, Any]) -> str:
    """Serialize a validated record for storage."""
    if not validate_permissions(record):
        raise ValidationError("Invalid permissions structure")
    return json.dumps(record, sort_keys=True)
