"""
Permission dependencies and audit helpers.

Implements:
- FastAPI dependencies for route protection
- Activity logging helpers
"""
from typing import Dict, Any, Optional
from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.users.dependencies import get_current_user
from app.features.users.models import User
from app.features.permissions.models import ActivityLog
from app.features.permissions.rules import Permission, has_permission
from app.utils import get_logger


log = get_logger(__name__)


# ============================================================================
# FastAPI Dependencies
# ============================================================================

def require_permission(permission: Permission):
    """
    FastAPI dependency to require a specific permission.

    Usage:
        @router.post("/")
        async def create_organization(
            user: User = Depends(require_permission(Permission.CREATE_ORGANIZATION))
        ):
            # User has permission to create organizations
            pass

    Args:
        permission: Permission to require

    Returns:
        Dependency function that returns the current user if they have permission

    Raises:
        HTTPException: 403 if user doesn't have permission
    """
    async def permission_dependency(
        current_user: User = Depends(get_current_user)
    ) -> User:
        if not has_permission(current_user, permission):
            log.info(f"User {current_user.id} denied {permission.value}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied: {permission.value}"
            )
        return current_user

    return permission_dependency


# ============================================================================
# Activity Logging
# ============================================================================

async def create_activity_log(
    db: AsyncSession,
    user_id: Optional[str],
    action: str,
    entity_type: str,
    entity_id: Optional[str] = None,
    organization_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None
) -> ActivityLog:
    """
    Create an activity log entry.

    Args:
        db: Database session
        user_id: User performing the action
        action: Action performed (e.g., "create_organization")
        entity_type: Type of entity (e.g., "organization", "user")
        entity_id: ID of the entity
        organization_id: Organization context
        details: Additional details
        ip_address: Client IP address
        user_agent: Client user agent

    Returns:
        Created ActivityLog object
    """
    activity_log = ActivityLog(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        organization_id=organization_id,
        details=details,
        ip_address=ip_address,
        user_agent=user_agent
    )

    db.add(activity_log)
    await db.commit()
    await db.refresh(activity_log)

    log.info(
        f"Activity: user={user_id} action={action} entity={entity_type}:{entity_id} org={organization_id}"
    )

    return activity_log
