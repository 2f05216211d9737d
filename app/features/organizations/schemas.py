"""
Pydantic schemas for organization-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, Field, EmailStr

from app.features.organizations.models import OrganizationType, SubscriptionPlan


# Organization Schemas
class OrganizationBase(BaseModel):
    """Base organization schema."""
    name: str = Field(..., min_length=1, max_length=255)
    type: OrganizationType
    parent_id: str | None = Field(None, description="Parent organization ID, empty for a master organization")
    plan: SubscriptionPlan = SubscriptionPlan.BASIC
    max_users: int = Field(default=10, ge=0)
    max_subsidiaries: int = Field(default=3, ge=0)
    address: str | None = None
    phone: str | None = Field(None, max_length=20)
    email: EmailStr | None = None
    cnpj: str | None = Field(None, max_length=20)


class OrganizationCreate(OrganizationBase):
    """Schema for creating a new organization."""
    pass


# Subscription terms; only system admins may change them
SUBSCRIPTION_FIELDS = frozenset({"plan", "max_users", "max_subsidiaries"})


class OrganizationUpdate(BaseModel):
    """Schema for updating organization information."""
    name: str | None = Field(None, min_length=1, max_length=255)
    plan: SubscriptionPlan | None = None
    max_users: int | None = Field(None, ge=0)
    max_subsidiaries: int | None = Field(None, ge=0)
    is_active: bool | None = None
    address: str | None = None
    phone: str | None = Field(None, max_length=20)
    email: EmailStr | None = None
    cnpj: str | None = Field(None, max_length=20)


class OrganizationResponse(OrganizationBase):
    """Schema for organization responses."""
    id: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# Hierarchy Schemas
class OrganizationRecord(BaseModel):
    """The organization attributes the hierarchy builder reads."""
    id: str
    name: str
    type: OrganizationType
    parent_id: str | None = None
    plan: SubscriptionPlan = SubscriptionPlan.BASIC
    max_users: int = Field(default=10, ge=0)
    max_subsidiaries: int = Field(default=3, ge=0)
    is_active: bool = True

    model_config = {"from_attributes": True}


class OrganizationNode(OrganizationRecord):
    """
    An organization placed in the tree.

    `level` is 0 for roots and parent level + 1 otherwise. `is_orphaned` is
    set on roots whose parent reference did not resolve, so callers can tell
    them apart from organizations that never had a parent.
    """
    children: list["OrganizationNode"] = Field(default_factory=list)
    level: int = 0
    is_orphaned: bool = False


class NodeAffordances(BaseModel):
    """Actions the current user may take on a single node."""
    can_create_child: bool
    can_manage: bool
    can_invite: bool


class OrganizationHierarchyResponse(BaseModel):
    """Organization forest with per-node affordances keyed by organization ID."""
    roots: list[OrganizationNode]
    total: int
    can_create_organization: bool
    affordances: dict[str, NodeAffordances] = Field(default_factory=dict)


class DescendantsResponse(BaseModel):
    """An organization and every organization below it."""
    organization_id: str
    organization_ids: list[str]


OrganizationNode.model_rebuild()
