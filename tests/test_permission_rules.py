"""
Tests for role-based permission rules.
"""
from types import SimpleNamespace

import pytest

from app.features.permissions.rules import (
    Permission,
    can_access_organization,
    can_create_child_organization,
    filter_by_organization_access,
    has_permission,
    permission_map,
)
from app.features.users.models import User, UserRole


ROLES = [role.value for role in UserRole]
UNKNOWN_ROLES = ["auditor", "", None, "SYSTEM_ADMIN"]


def make_user(role, organization_id="org-1", is_active=True):
    return SimpleNamespace(role=role, organization_id=organization_id, is_active=is_active)


# Expected decisions without a resource organization
EXPECTED = {
    "view_dashboard": {"system_admin", "org_admin", "manager", "inspector", "client"},
    "view_reports": {"system_admin", "org_admin", "manager", "inspector", "client"},
    "create_organization": {"system_admin"},
    "manage_organization": {"system_admin", "org_admin"},
    "invite_user": {"system_admin", "org_admin"},
    "create_inspection": {"system_admin", "org_admin", "manager", "inspector"},
    "edit_inspection": {"system_admin", "org_admin", "inspector"},
    "view_inspection": {"system_admin", "org_admin"},
    "delete_inspection": {"system_admin", "org_admin"},
    "manage_action_plans": {"system_admin", "org_admin", "manager", "inspector"},
    "export_data": {"system_admin", "org_admin", "manager", "inspector"},
    "system_admin": {"system_admin"},
}


def test_rule_table_covers_every_permission():
    assert set(EXPECTED) == {permission.value for permission in Permission}


@pytest.mark.parametrize("permission", sorted(EXPECTED))
@pytest.mark.parametrize("role", ROLES)
def test_rule_table(permission, role):
    assert has_permission(make_user(role), permission) is (role in EXPECTED[permission])


@pytest.mark.parametrize("role", ROLES + UNKNOWN_ROLES)
def test_everyone_views_dashboard_and_reports(role):
    user = make_user(role)

    assert has_permission(user, "view_dashboard") is True
    assert has_permission(user, "view_reports") is True


@pytest.mark.parametrize("role", ROLES + UNKNOWN_ROLES)
def test_unknown_permission_denied(role):
    user = make_user(role)

    assert has_permission(user, "nonexistent_permission") is False
    assert has_permission(user, "") is False
    assert has_permission(user, "VIEW_DASHBOARD") is False


@pytest.mark.parametrize("role", UNKNOWN_ROLES)
def test_unknown_role_denied_everything_else(role):
    user = make_user(role)

    for permission in Permission:
        expected = permission in (Permission.VIEW_DASHBOARD, Permission.VIEW_REPORTS)
        assert has_permission(user, permission, "org-1") is expected


def test_user_without_role_attribute():
    assert has_permission(object(), "view_dashboard") is True
    assert has_permission(object(), "create_inspection") is False


def test_org_admin_scenario():
    user = make_user("org_admin")

    assert has_permission(user, "manage_organization") is True
    assert has_permission(user, "create_organization") is False
    assert has_permission(user, "system_admin") is False


def test_client_scenario():
    user = make_user("client")

    assert has_permission(user, "create_inspection") is False
    assert has_permission(user, "view_reports") is True


def test_accepts_enum_members_and_model_instances():
    user = User(email="a@b.com", name="A", role=UserRole.SYSTEM_ADMIN, organization_id="org-1")

    assert has_permission(user, Permission.CREATE_ORGANIZATION) is True
    assert has_permission(user, "create_organization") is True


def test_view_inspection_for_own_organization():
    inspector = make_user("inspector", organization_id="org-1")

    assert has_permission(inspector, "view_inspection") is False
    assert has_permission(inspector, "view_inspection", "org-1") is True
    assert has_permission(inspector, "view_inspection", "org-2") is False


def test_resource_organization_ignored_by_role_only_rules():
    client = make_user("client", organization_id="org-1")

    assert has_permission(client, "create_inspection", "org-1") is False


@pytest.mark.parametrize("organization_id", ["org-1", "org-2", "anything"])
def test_system_admin_creates_children_anywhere(organization_id):
    assert can_create_child_organization(make_user("system_admin"), organization_id) is True


def test_org_admin_creates_children_only_under_own_organization():
    user = make_user("org_admin", organization_id="org-1")

    assert can_create_child_organization(user, "org-1") is True
    assert can_create_child_organization(user, "org-2") is False


@pytest.mark.parametrize("role", ["manager", "inspector", "client", "auditor"])
def test_other_roles_never_create_children(role):
    assert can_create_child_organization(make_user(role, organization_id="org-1"), "org-1") is False


def test_can_access_organization():
    assert can_access_organization(make_user("system_admin", organization_id="org-1"), "org-9") is True
    assert can_access_organization(make_user("manager", organization_id="org-1"), "org-1") is True
    assert can_access_organization(make_user("manager", organization_id="org-1"), "org-2") is False
    assert can_access_organization(make_user("manager", organization_id="org-1", is_active=False), "org-1") is False


def test_permission_map():
    decisions = permission_map(make_user("manager"))

    assert set(decisions) == {permission.value for permission in Permission}
    assert decisions["create_inspection"] is True
    assert decisions["invite_user"] is False


class TestFilterByOrganizationAccess:
    organizations = [
        {"id": "M", "name": "M", "type": "master", "parent_id": None},
        {"id": "E1", "name": "E1", "type": "enterprise", "parent_id": "M"},
        {"id": "S1", "name": "S1", "type": "subsidiary", "parent_id": "E1"},
        {"id": "E2", "name": "E2", "type": "enterprise", "parent_id": "M"},
    ]
    items = [SimpleNamespace(id=i, organization_id=org_id) for i, org_id in enumerate(["M", "E1", "S1", "E2"])]

    def test_system_admin_sees_everything(self):
        visible = filter_by_organization_access(make_user("system_admin", "M"), self.items, self.organizations)
        assert [item.id for item in visible] == [0, 1, 2, 3]

    def test_user_sees_own_subtree(self):
        visible = filter_by_organization_access(make_user("manager", "E1"), self.items, self.organizations)
        assert [item.organization_id for item in visible] == ["E1", "S1"]

    def test_user_without_organization_sees_nothing(self):
        assert filter_by_organization_access(make_user("manager", None), self.items, self.organizations) == []
