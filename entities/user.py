"""
User entity model for the domain layer.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field
from enum import Enum


class UserRole(str, Enum):
    """User roles enumeration."""
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class PermissionType(str, Enum):
    PAGE_ACCESS = "page_access"
    FEATURE_ACCESS = "feature_access"


class UserPermission(BaseModel):
    """An explicit grant or denial for one page or feature."""
    permission_type: str
    permission_key: str
    granted: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserPermission":
        granted = data.get("granted")
        return cls(
            permission_type=data.get("permission_type") or "",
            permission_key=data.get("permission_key") or "",
            granted=True if granted is None else bool(granted),
        )


class User(BaseModel):
    """
    Authenticated user with the role and explicit permissions that gate
    access to the reporting pages.
    """
    id: str
    email: Optional[str] = None
    role: str = UserRole.USER.value
    permissions: List[UserPermission] = Field(default_factory=list)
    is_active: bool = True

    def has_permission(self, permission_type: str, permission_key: str) -> bool:
        """Explicit setting if one exists; access is granted by default."""
        for permission in self.permissions:
            if permission.permission_type == permission_type and permission.permission_key == permission_key:
                return permission.granted
        return True

    def has_page_access(self, page_path: str) -> bool:
        return self.has_permission(PermissionType.PAGE_ACCESS.value, page_path)

    def has_role_access(self, allowed_roles: List[str]) -> bool:
        """Check if user's role is in the list of allowed roles."""
        return self.role in allowed_roles

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
