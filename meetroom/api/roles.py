"""Roles API router."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from meetroom.db.session import get_db
from meetroom.schemas.schemas import (
    RoleCreate, RoleUpdate, RoleOut, RoleDetail, RoleSummary, PaginatedRoles,
    RoleStats, PermissionsBody, UserIdsBody, BulkStatusBody, RoleCloneRequest,
    MessageResponse,
)
from meetroom.services.role_service import role_service
from meetroom.core.security import (
    can_read_roles, can_create_roles, can_update_roles, can_delete_roles,
)

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("/", response_model=list[RoleSummary])
async def list_roles(db: Session = Depends(get_db), _=Depends(can_read_roles)):
    """All roles with assigned-user counts."""
    return role_service.find_summaries(db)


@router.get("/paginated", response_model=PaginatedRoles)
async def list_roles_paginated(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    _=Depends(can_read_roles),
):
    return role_service.find_paginated(db, page, limit)


@router.get("/active", response_model=list[RoleOut])
async def list_active_roles(db: Session = Depends(get_db), _=Depends(can_read_roles)):
    return [RoleOut.model_validate(r) for r in role_service.find_active(db)]


@router.get("/search", response_model=list[RoleOut])
async def search_roles(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    _=Depends(can_read_roles),
):
    return [RoleOut.model_validate(r) for r in role_service.search(db, q)]


@router.get("/stats", response_model=RoleStats)
async def role_stats(db: Session = Depends(get_db), _=Depends(can_read_roles)):
    return role_service.get_stats(db)


@router.get("/by-permission", response_model=list[RoleOut])
async def roles_by_permission(
    module: str = Query(...),
    action: str = Query(...),
    db: Session = Depends(get_db),
    _=Depends(can_read_roles),
):
    """Roles granting ``module.action``."""
    return [RoleOut.model_validate(r) for r in role_service.find_by_permission(db, module, action)]


@router.post("/bulk-status")
async def bulk_update_status(
    body: BulkStatusBody,
    db: Session = Depends(get_db),
    _=Depends(can_update_roles),
):
    """Activate or deactivate several roles at once."""
    return {"updated": role_service.bulk_update_status(db, body.role_ids, body.is_active)}


@router.post("/remove-users")
async def remove_users(
    body: UserIdsBody,
    db: Session = Depends(get_db),
    _=Depends(can_update_roles),
):
    """Detach users from their roles."""
    return {"updated": role_service.remove_users(db, body.user_ids)}


@router.post("/", response_model=RoleOut, status_code=201)
async def create_role(body: RoleCreate, db: Session = Depends(get_db), _=Depends(can_create_roles)):
    """Create a role."""
    return RoleOut.model_validate(role_service.create(db, **body.model_dump()))


@router.get("/{role_id}", response_model=RoleDetail)
async def get_role(role_id: int, db: Session = Depends(get_db), _=Depends(can_read_roles)):
    """Role detail including assigned users."""
    return RoleDetail.model_validate(role_service.get(db, role_id))


@router.put("/{role_id}", response_model=RoleOut)
async def update_role(
    role_id: int,
    body: RoleUpdate,
    db: Session = Depends(get_db),
    _=Depends(can_update_roles),
):
    role = role_service.update(db, role_id, **body.model_dump(exclude_unset=True))
    return RoleOut.model_validate(role)


@router.delete("/{role_id}", response_model=MessageResponse)
async def delete_role(role_id: int, db: Session = Depends(get_db), _=Depends(can_delete_roles)):
    """Delete a role nobody holds."""
    role_service.delete(db, role_id)
    return MessageResponse(message="Role deleted")


@router.post("/{role_id}/toggle", response_model=RoleOut)
async def toggle_role(role_id: int, db: Session = Depends(get_db), _=Depends(can_update_roles)):
    return RoleOut.model_validate(role_service.toggle_status(db, role_id))


@router.post("/{role_id}/users")
async def assign_users(
    role_id: int,
    body: UserIdsBody,
    db: Session = Depends(get_db),
    _=Depends(can_update_roles),
):
    """Assign users to a role."""
    return {"updated": role_service.assign_users(db, role_id, body.user_ids)}


@router.put("/{role_id}/permissions", response_model=RoleOut)
async def replace_permissions(
    role_id: int,
    body: PermissionsBody,
    db: Session = Depends(get_db),
    _=Depends(can_update_roles),
):
    return RoleOut.model_validate(role_service.update_permissions(db, role_id, body.permissions))


@router.patch("/{role_id}/permissions", response_model=RoleOut)
async def merge_permissions(
    role_id: int,
    body: PermissionsBody,
    db: Session = Depends(get_db),
    _=Depends(can_update_roles),
):
    """Merge extra grants into the role's permissions."""
    return RoleOut.model_validate(role_service.merge_permissions(db, role_id, body.permissions))


@router.get("/{role_id}/permissions/check")
async def check_permission(
    role_id: int,
    module: str = Query(...),
    action: str = Query(...),
    db: Session = Depends(get_db),
    _=Depends(can_read_roles),
):
    return {"allowed": role_service.has_permission(db, role_id, module, action)}


@router.post("/{role_id}/clone", response_model=RoleOut, status_code=201)
async def clone_role(
    role_id: int,
    body: RoleCloneRequest,
    db: Session = Depends(get_db),
    _=Depends(can_create_roles),
):
    """Copy a role under a new name."""
    return RoleOut.model_validate(role_service.clone(db, role_id, body.name, body.display_name))
