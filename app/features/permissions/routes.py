"""
Permission API routes.

Exposes the role-based permission decisions to the UI and the activity log
to system administrators.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.users.dependencies import get_current_user
from app.features.users.models import User
from app.features.permissions.models import ActivityLog
from app.features.permissions.rules import Permission, has_permission, permission_map
from app.features.permissions.dependencies import require_permission
from app.features.permissions.schemas import (
    PermissionCheckRequest,
    PermissionCheckResponse,
    UserPermissionsResponse,
    ActivityLogResponse,
    ActivityLogListResponse,
)


router = APIRouter()


# ============================================================================
# Permission Check Routes
# ============================================================================

@router.get("/me", response_model=UserPermissionsResponse)
async def get_my_permissions(
    current_user: User = Depends(get_current_user)
):
    """Get every permission decision for the current user."""
    return UserPermissionsResponse(
        user_id=current_user.id,
        role=current_user.role,
        organization_id=current_user.organization_id,
        permissions=permission_map(current_user)
    )


@router.post("/check", response_model=PermissionCheckResponse)
async def check_permission(
    check_request: PermissionCheckRequest,
    current_user: User = Depends(get_current_user)
):
    """Check if the current user has a specific permission."""
    has_perm = has_permission(
        current_user,
        check_request.permission,
        check_request.resource_organization_id
    )
    return PermissionCheckResponse(
        permission=check_request.permission,
        has_permission=has_perm,
        reason=None if has_perm else "Permission denied"
    )


# ============================================================================
# Activity Log Routes
# ============================================================================

@router.get("/activity-logs", response_model=ActivityLogListResponse)
async def list_activity_logs(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    organization_id: Optional[str] = None,
    user_id: Optional[str] = None,
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.SYSTEM_ADMIN))
):
    """List activity logs with optional filtering (system admin only)."""
    stmt = select(ActivityLog)

    if organization_id:
        stmt = stmt.where(ActivityLog.organization_id == organization_id)
    if user_id:
        stmt = stmt.where(ActivityLog.user_id == user_id)
    if action:
        stmt = stmt.where(ActivityLog.action == action)
    if entity_type:
        stmt = stmt.where(ActivityLog.entity_type == entity_type)

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total_result = await db.execute(count_stmt)
    total = total_result.scalar() or 0

    stmt = stmt.order_by(ActivityLog.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(stmt)
    logs = result.scalars().all()

    pages = (total + limit - 1) // limit if limit > 0 else 0
    page = (skip // limit) + 1 if limit > 0 else 1

    return ActivityLogListResponse(
        items=[ActivityLogResponse.model_validate(entry) for entry in logs],
        total=total,
        page=page,
        page_size=limit,
        pages=pages
    )
