"""Pydantic schemas for API request/response serialization."""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


# ---- Auth ----
class LoginRequest(BaseModel):
    email: Optional[str] = None
    username: Optional[str] = None
    password: str = Field(..., min_length=1)

class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=4)
    username: str = Field(..., min_length=2)
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    avatar: Optional[str] = None
    phone_number: Optional[str] = None

class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


# ---- User ----
class RoleRef(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True

class RoleNameRef(BaseModel):
    name: str

    class Config:
        from_attributes = True

class UserProfile(BaseModel):
    id: int
    email: str
    username: str
    first_name: str
    last_name: str
    avatar: Optional[str] = None
    phone_number: Optional[str] = None
    is_active: bool
    email_verified: bool
    created_at: Optional[datetime] = None
    role: Optional[RoleRef] = None

    class Config:
        from_attributes = True

class UserSummary(BaseModel):
    id: int
    email: str
    username: str
    first_name: str
    last_name: str
    avatar: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    role: Optional[RoleNameRef] = None

    class Config:
        from_attributes = True

class LoginResponse(BaseModel):
    user: UserProfile
    message: str
    session_token: str
    token_type: str = "bearer"

class UserUpdateRequest(BaseModel):
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None
    phone_number: Optional[str] = None
    is_active: Optional[bool] = None
    email_verified: Optional[bool] = None
    role_id: Optional[int] = None

class PaginatedUsers(BaseModel):
    users: List[UserSummary]
    total_count: int
    total_pages: int
    current_page: int
    has_next_page: bool
    has_previous_page: bool


# ---- Role ----
class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    display_name: str = Field(..., min_length=1)
    description: Optional[str] = None
    permissions: Dict[str, Any]
    is_active: Optional[bool] = None

class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    display_name: Optional[str] = None
    description: Optional[str] = None
    permissions: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None

class RoleOut(BaseModel):
    id: int
    name: str
    display_name: str
    description: Optional[str] = None
    permissions: Dict[str, Any]
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class RoleUserOut(BaseModel):
    id: int
    email: str
    username: str
    first_name: str
    last_name: str
    is_active: bool

    class Config:
        from_attributes = True

class RoleDetail(RoleOut):
    users: List[RoleUserOut] = []

class RoleSummary(BaseModel):
    id: int
    name: str
    display_name: str
    description: Optional[str] = None
    is_active: bool
    user_count: int
    created_at: Optional[datetime] = None

class PaginatedRoles(BaseModel):
    roles: List[RoleSummary]
    total: int
    page: int
    limit: int
    total_pages: int

class RoleStats(BaseModel):
    total: int
    active: int
    inactive: int
    with_users: int
    without_users: int

class PermissionsBody(BaseModel):
    permissions: Dict[str, Any]

class UserIdsBody(BaseModel):
    user_ids: List[int]

class BulkStatusBody(BaseModel):
    role_ids: List[int]
    is_active: bool

class RoleCloneRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    display_name: str = Field(..., min_length=1)


# ---- Meeting room ----
class MeetingRoomCreate(BaseModel):
    name: str = Field(..., min_length=1)
    location: str
    capacity: int = Field(..., ge=0)

class MeetingRoomUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)

class MeetingRoomOut(BaseModel):
    id: int
    name: str
    location: str
    capacity: int

    class Config:
        from_attributes = True


# ---- Generic ----
class MessageResponse(BaseModel):
    message: str
    detail: Optional[Any] = None

class SuccessResponse(BaseModel):
    success: bool = True
