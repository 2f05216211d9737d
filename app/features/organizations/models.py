"""
Organization models.

Organizations form a tree: a master organization owns enterprises, which in
turn own subsidiaries. The tree is stored as a plain parent reference and
assembled in memory by `app.features.organizations.hierarchy`.
"""
import enum
from sqlalchemy import String, ForeignKey, Boolean, Integer, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, TimestampMixin, generate_ulid


class OrganizationType(str, enum.Enum):
    """Position of an organization in the tenant tree."""
    MASTER = "master"
    ENTERPRISE = "enterprise"
    SUBSIDIARY = "subsidiary"


class SubscriptionPlan(str, enum.Enum):
    """Subscription tier."""
    BASIC = "basic"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class Organization(Base, TimestampMixin):
    """
    Organization model representing a tenant.

    `parent_id` is nullable: master organizations have no parent. A parent
    reference that no longer resolves is tolerated by the hierarchy builder
    and surfaces as an orphaned root.
    """
    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[OrganizationType] = mapped_column(
        SQLEnum(OrganizationType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    parent_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Subscription limits
    plan: Mapped[SubscriptionPlan] = mapped_column(
        SQLEnum(SubscriptionPlan, values_callable=lambda e: [m.value for m in e]),
        default=SubscriptionPlan.BASIC,
        nullable=False,
    )
    max_users: Mapped[int] = mapped_column(Integer, default=10, nullable=False)
    max_subsidiaries: Mapped[int] = mapped_column(Integer, default=3, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Contact details
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cnpj: Mapped[str | None] = mapped_column(String(20), nullable=True)  # Brazilian company registry number

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name!r}, type={self.type}, parent_id={self.parent_id})>"
