"""Role model for RBAC."""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, func
from sqlalchemy.orm import relationship
from meetroom.db.base import Base
from meetroom.core.permissions import PermissionRecord, parse_permissions, dump_permissions


class Role(Base):
    """System role carrying its own mutable copy of a permission record."""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False, index=True)
    display_name = Column(String(100), nullable=False)
    description = Column(String(255), nullable=True)
    permissions_json = Column(Text, nullable=False)  # JSON object: module -> action -> bool
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    users = relationship("User", back_populates="role", lazy="select")

    @property
    def permissions(self) -> PermissionRecord:
        return parse_permissions(self.permissions_json)

    @permissions.setter
    def permissions(self, value: PermissionRecord) -> None:
        self.permissions_json = dump_permissions(value)
