"""
Organization-related dependency injection functions.
"""
from typing import Annotated
from fastapi import Depends, HTTPException, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.users.models import User, UserRole
from app.features.users.dependencies import get_current_user
from app.features.organizations.models import Organization
from app.features.permissions.rules import can_access_organization


async def get_organization_by_id(
    organization_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Organization:
    """
    Get organization by ID or raise 404.

    Args:
        organization_id: Organization ULID
        db: Database session

    Returns:
        Organization model

    Raises:
        HTTPException: 404 if organization not found
    """
    result = await db.execute(
        select(Organization).where(Organization.id == organization_id)
    )
    organization = result.scalar_one_or_none()

    if organization is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Organization not found"
        )

    return organization


async def get_accessible_organization(
    organization_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Organization:
    """
    Get organization and verify the user may access it.

    Raises:
        HTTPException: 403 if the user may not access it, 404 if it does not exist
    """
    if not can_access_organization(user, organization_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this organization"
        )

    return await get_organization_by_id(organization_id, db)


async def list_all_organizations(db: AsyncSession) -> list[Organization]:
    """Every organization, oldest first."""
    result = await db.execute(
        select(Organization).order_by(Organization.created_at, Organization.id)
    )
    return list(result.scalars().all())


async def list_visible_organizations(db: AsyncSession, user: User) -> list[Organization]:
    """
    Organizations a user may list.

    System admins see every organization; other users see their own
    organization and its direct subsidiaries.
    """
    if user.role == UserRole.SYSTEM_ADMIN:
        return await list_all_organizations(db)

    if user.organization_id is None:
        return []

    result = await db.execute(
        select(Organization)
        .where(
            or_(
                Organization.id == user.organization_id,
                Organization.parent_id == user.organization_id
            )
        )
        .order_by(Organization.created_at, Organization.id)
    )
    return list(result.scalars().all())
