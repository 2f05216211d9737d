"""
Pydantic schemas for permission checks and activity logs.
"""
from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field, ConfigDict

from app.features.users.models import UserRole


# ============================================================================
# Permission Check Schemas
# ============================================================================

class PermissionCheckRequest(BaseModel):
    """Schema for checking if the current user has a permission."""
    permission: str = Field(..., description="Permission name, e.g. manage_organization")
    resource_organization_id: Optional[str] = Field(None, description="Organization owning the resource, if relevant")


class PermissionCheckResponse(BaseModel):
    """Schema for permission check response."""
    permission: str
    has_permission: bool
    reason: Optional[str] = None


class UserPermissionsResponse(BaseModel):
    """Every permission decision for a user."""
    user_id: str
    role: UserRole
    organization_id: Optional[str] = None
    permissions: Dict[str, bool]


# ============================================================================
# Activity Log Schemas
# ============================================================================

class ActivityLogResponse(BaseModel):
    """Schema for activity log response."""
    id: str
    user_id: Optional[str]
    action: str
    entity_type: str
    entity_id: Optional[str]
    organization_id: Optional[str]
    details: Optional[Dict[str, Any]]
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ActivityLogListResponse(BaseModel):
    """Schema for paginated activity log list."""
    items: List[ActivityLogResponse]
    total: int
    page: int
    page_size: int
    pages: int
