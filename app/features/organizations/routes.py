"""
Organization feature routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.users.models import User
from app.features.users.dependencies import get_current_user
from app.features.organizations.models import Organization, OrganizationType
from app.features.organizations.schemas import (
    SUBSCRIPTION_FIELDS,
    OrganizationCreate,
    OrganizationUpdate,
    OrganizationResponse,
    OrganizationHierarchyResponse,
    NodeAffordances,
    DescendantsResponse,
)
from app.features.organizations.dependencies import (
    get_accessible_organization,
    list_all_organizations,
    list_visible_organizations,
)
from app.features.organizations.hierarchy import (
    CyclicHierarchyError,
    build_hierarchy,
    descendant_ids,
    walk,
)
from app.features.permissions.rules import (
    Permission,
    has_permission,
    can_access_organization,
    can_create_child_organization,
)
from app.features.permissions.dependencies import require_permission, create_activity_log
from app.utils import get_logger


log = get_logger(__name__)
router = APIRouter(tags=["organizations"])


@router.get("/", response_model=list[OrganizationResponse])
async def list_organizations(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """List organizations visible to the current user."""
    return await list_visible_organizations(db, user)


@router.post("/", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def create_organization(
    org_data: OrganizationCreate,
    request: Request,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """
    Create a new organization.

    System admins may create anywhere. Organization admins may create
    subsidiaries under their own organization.
    """
    if org_data.parent_id is None:
        allowed = has_permission(user, Permission.CREATE_ORGANIZATION)
    else:
        allowed = can_create_child_organization(user, org_data.parent_id)

    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to create organizations here"
        )

    if org_data.type != OrganizationType.SUBSIDIARY and not has_permission(user, Permission.SYSTEM_ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only subsidiaries may be created under your organization"
        )

    if org_data.parent_id is not None:
        parent = await db.get(Organization, org_data.parent_id)
        if parent is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Parent organization not found"
            )

    new_org = Organization(**org_data.model_dump())
    db.add(new_org)
    await db.commit()
    await db.refresh(new_org)
    log.info(f"User {user.id} created organization {new_org.id} under {new_org.parent_id}")

    await create_activity_log(
        db,
        user_id=user.id,
        action="create_organization",
        entity_type="organization",
        entity_id=new_org.id,
        organization_id=new_org.id,
        details={"name": new_org.name, "type": new_org.type.value},
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent")
    )

    return new_org


@router.get("/hierarchy", response_model=OrganizationHierarchyResponse)
async def get_organization_hierarchy(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Get visible organizations as a tree, with the actions allowed on each node."""
    organizations = await list_visible_organizations(db, user)

    try:
        roots = build_hierarchy(organizations)
    except CyclicHierarchyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    can_manage = has_permission(user, Permission.MANAGE_ORGANIZATION)
    can_invite = has_permission(user, Permission.INVITE_USER)
    affordances = {
        node.id: NodeAffordances(
            can_create_child=can_create_child_organization(user, node.id),
            can_manage=can_manage and can_access_organization(user, node.id),
            can_invite=can_invite,
        )
        for node in walk(roots)
    }

    return OrganizationHierarchyResponse(
        roots=roots,
        total=len(affordances),
        can_create_organization=has_permission(user, Permission.CREATE_ORGANIZATION),
        affordances=affordances
    )


@router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization(
    organization: Annotated[Organization, Depends(get_accessible_organization)]
):
    """Get organization by ID."""
    return organization


@router.patch("/{organization_id}", response_model=OrganizationResponse)
async def update_organization(
    update_data: OrganizationUpdate,
    request: Request,
    organization_id: str,
    user: Annotated[User, Depends(require_permission(Permission.MANAGE_ORGANIZATION))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update organization information (organization admins and above)."""
    organization = await get_accessible_organization(organization_id, user, db)

    changes = update_data.model_dump(exclude_unset=True)
    restricted = sorted(SUBSCRIPTION_FIELDS.intersection(changes))
    if restricted and not has_permission(user, Permission.SYSTEM_ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only system admins may change: {', '.join(restricted)}"
        )

    for field, value in changes.items():
        setattr(organization, field, value)

    await db.commit()
    await db.refresh(organization)

    await create_activity_log(
        db,
        user_id=user.id,
        action="update_organization",
        entity_type="organization",
        entity_id=organization.id,
        organization_id=organization.id,
        details={"fields": sorted(changes)},
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent")
    )

    return organization


@router.get("/{organization_id}/descendants", response_model=DescendantsResponse)
async def get_organization_descendants(
    organization: Annotated[Organization, Depends(get_accessible_organization)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Get an organization and every organization below it."""
    organizations = await list_all_organizations(db)

    try:
        ids = descendant_ids(organizations, organization.id)
    except CyclicHierarchyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return DescendantsResponse(organization_id=organization.id, organization_ids=ids)
