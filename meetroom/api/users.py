"""Users API router (admin)."""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from meetroom.db.session import get_db
from meetroom.schemas.schemas import (
    UserProfile, UserSummary, UserUpdateRequest, PaginatedUsers, MessageResponse,
)
from meetroom.services.user_service import user_service
from meetroom.core.security import can_read_users, can_update_users, can_delete_users

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=PaginatedUsers)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    is_active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    _=Depends(can_read_users),
):
    """List users with pagination."""
    result = user_service.get_users(db, page, limit, is_active)
    result["users"] = [UserSummary.model_validate(u) for u in result["users"]]
    return result


@router.get("/search", response_model=list[UserSummary])
async def search_users(
    q: str = Query(""),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    _=Depends(can_read_users),
):
    """Search active users by name, email, or username."""
    return [UserSummary.model_validate(u) for u in user_service.search_users(db, q, limit)]


@router.get("/stats")
async def user_stats(db: Session = Depends(get_db), _=Depends(can_read_users)):
    """User counts by status."""
    return user_service.get_user_stats(db)


@router.get("/by-role/{role_id}", response_model=list[UserSummary])
async def users_by_role(role_id: int, db: Session = Depends(get_db), _=Depends(can_read_users)):
    """Users holding a role."""
    return [UserSummary.model_validate(u) for u in user_service.get_users_by_role(db, role_id)]


@router.get("/{user_id}", response_model=UserProfile)
async def get_user(user_id: int, db: Session = Depends(get_db), _=Depends(can_read_users)):
    """Get a user's profile."""
    return UserProfile.model_validate(user_service.get_user_profile(db, user_id))


@router.put("/{user_id}", response_model=UserProfile)
async def update_user(
    user_id: int,
    body: UserUpdateRequest,
    db: Session = Depends(get_db),
    _=Depends(can_update_users),
):
    """Update a user's profile, credentials, status, or role."""
    user = user_service.update_user(db, user_id, **body.model_dump(exclude_unset=True))
    return UserProfile.model_validate(user)


@router.post("/{user_id}/verify-email", response_model=UserProfile)
async def verify_email(user_id: int, db: Session = Depends(get_db), _=Depends(can_update_users)):
    """Mark a user's email as verified."""
    return UserProfile.model_validate(user_service.verify_email(db, user_id))


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: int, db: Session = Depends(get_db), _=Depends(can_delete_users)):
    """Deactivate a user."""
    user_service.delete_user(db, user_id)
    return MessageResponse(message="User deactivated")


@router.delete("/{user_id}/permanent", response_model=MessageResponse)
async def hard_delete_user(user_id: int, db: Session = Depends(get_db), _=Depends(can_delete_users)):
    """Permanently remove a user."""
    user_service.hard_delete_user(db, user_id)
    return MessageResponse(message="User permanently deleted")
