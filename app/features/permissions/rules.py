"""
Role-based permission rules.

Every decision is a pure function of the user's role, the permission name and
an optional resource organization ID. Unknown permission names and unknown
roles resolve to deny; nothing here raises for bad input.
"""
import enum
from collections.abc import Callable, Iterable
from typing import Any, Optional

from app.features.organizations.hierarchy import descendant_ids
from app.features.users.models import UserRole
from app.utils import get_logger


log = get_logger(__name__)


class Permission(str, enum.Enum):
    """Closed set of permission names."""
    VIEW_DASHBOARD = "view_dashboard"
    VIEW_REPORTS = "view_reports"
    CREATE_ORGANIZATION = "create_organization"
    MANAGE_ORGANIZATION = "manage_organization"
    INVITE_USER = "invite_user"
    CREATE_INSPECTION = "create_inspection"
    EDIT_INSPECTION = "edit_inspection"
    VIEW_INSPECTION = "view_inspection"
    DELETE_INSPECTION = "delete_inspection"
    MANAGE_ACTION_PLANS = "manage_action_plans"
    EXPORT_DATA = "export_data"
    SYSTEM_ADMIN = "system_admin"


Rule = Callable[[UserRole, Any, Optional[str]], bool]

ADMIN_ROLES = frozenset({UserRole.SYSTEM_ADMIN, UserRole.ORG_ADMIN})

# Granted to every caller, including one whose role is not recognised
ALWAYS_ALLOWED = frozenset({Permission.VIEW_DASHBOARD, Permission.VIEW_REPORTS})


def _always(role: UserRole, user: Any, resource_id: Optional[str]) -> bool:
    return True


def _one_of(*roles: UserRole) -> Rule:
    allowed = frozenset(roles)

    def rule(role: UserRole, user: Any, resource_id: Optional[str]) -> bool:
        return role in allowed
    return rule


def _not_client(role: UserRole, user: Any, resource_id: Optional[str]) -> bool:
    return role != UserRole.CLIENT


def _admin_or_same_organization(role: UserRole, user: Any, resource_id: Optional[str]) -> bool:
    if role in ADMIN_ROLES:
        return True
    return resource_id is not None and getattr(user, "organization_id", None) == resource_id


PERMISSION_RULES: dict[Permission, Rule] = {
    Permission.VIEW_DASHBOARD: _always,
    Permission.VIEW_REPORTS: _always,
    Permission.CREATE_ORGANIZATION: _one_of(UserRole.SYSTEM_ADMIN),
    Permission.MANAGE_ORGANIZATION: _one_of(*ADMIN_ROLES),
    Permission.INVITE_USER: _one_of(*ADMIN_ROLES),
    Permission.CREATE_INSPECTION: _not_client,
    Permission.EDIT_INSPECTION: _one_of(*ADMIN_ROLES, UserRole.INSPECTOR),
    Permission.VIEW_INSPECTION: _admin_or_same_organization,
    Permission.DELETE_INSPECTION: _one_of(*ADMIN_ROLES),
    Permission.MANAGE_ACTION_PLANS: _not_client,
    Permission.EXPORT_DATA: _not_client,
    Permission.SYSTEM_ADMIN: _one_of(UserRole.SYSTEM_ADMIN),
}


def _role_of(user: Any) -> UserRole | None:
    try:
        return UserRole(getattr(user, "role", None))
    except ValueError:
        return None


def _permission_of(name: Any) -> Permission | None:
    try:
        return Permission(name)
    except ValueError:
        return None


def has_permission(user: Any, permission: Permission | str, resource_organization_id: Optional[str] = None) -> bool:
    """
    Check whether a user holds a permission.

    Args:
        user: Anything exposing `role` and `organization_id` (User model, schema)
        permission: Permission enum member or its string name
        resource_organization_id: Organization owning the resource, for
            rules that depend on it

    Returns:
        True if allowed. Unknown permissions and unknown roles are denied,
        except that ALWAYS_ALLOWED permissions hold for any role.
    """
    resolved = _permission_of(permission)
    if resolved is None:
        log.debug(f"Unknown permission {permission!r} denied")
        return False

    role = _role_of(user)
    if role is None:
        allowed = resolved in ALWAYS_ALLOWED
        log.debug(f"Unknown role {getattr(user, 'role', None)!r}: {resolved.value} -> {allowed}")
        return allowed

    allowed = PERMISSION_RULES[resolved](role, user, resource_organization_id)
    log.debug(f"Role {role.value}: {resolved.value} -> {allowed}")
    return allowed


def can_create_child_organization(user: Any, organization_id: str) -> bool:
    """
    Check whether a user may add a subsidiary under a specific organization.

    System admins may always; organization admins only under their own
    organization.
    """
    if has_permission(user, Permission.CREATE_ORGANIZATION):
        return True
    return _role_of(user) == UserRole.ORG_ADMIN and getattr(user, "organization_id", None) == organization_id


def can_access_organization(user: Any, organization_id: str) -> bool:
    """System admins access every organization; others only their own, while active."""
    if _role_of(user) == UserRole.SYSTEM_ADMIN:
        return True
    return getattr(user, "organization_id", None) == organization_id and getattr(user, "is_active", True) is not False


def permission_map(user: Any) -> dict[str, bool]:
    """Every permission name mapped to the user's decision."""
    return {permission.value: has_permission(user, permission) for permission in Permission}


def filter_by_organization_access(user: Any, items: Iterable[Any], organizations: Iterable[Any]) -> list[Any]:
    """
    Keep the items a user may see.

    System admins see everything. Other users see items whose
    `organization_id` is their own organization or one below it in
    `organizations`.
    """
    if _role_of(user) == UserRole.SYSTEM_ADMIN:
        return list(items)

    organization_id = getattr(user, "organization_id", None)
    if organization_id is None:
        return []

    accessible = set(descendant_ids(organizations, organization_id))
    return [item for item in items if getattr(item, "organization_id", None) in accessible]
