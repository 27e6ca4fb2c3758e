"""Tests for role-based submission permissions."""

import pytest

from erp_assistant.models.draft import Intent
from erp_assistant.models.session import Actor
from erp_assistant.permissions import (
    can_submit,
    default_permissions_for_business_role,
    effective_permissions,
    has_permission,
    requirement_for_intent,
)


class TestRequirements:
    """Tests for the intent to permission map."""

    @pytest.mark.parametrize("intent,expected", [
        (Intent.CREATE_JOURNAL, "journal:create"),
        (Intent.CREATE_INVOICE, "sales:create"),
        (Intent.CREATE_BILL, "purchase:create"),
        (Intent.CREATE_PURCHASE_ORDER, "purchase_order:create"),
        (Intent.CONVERT_PO_TO_BILL, "purchase_order:approve"),
        (Intent.RUN_PAYROLL, "payroll:create"),
        (Intent.RECORD_SALARY_PAYMENT, "payroll:create"),
        (Intent.CREATE_EMPLOYEE, "hr:create"),
        (Intent.CREATE_LEAD, "crm:create"),
        (Intent.FOLLOW_UP_CLIENT, "crm:create"),
        (Intent.RECEIVE_PAYMENT, "banking:create"),
        (Intent.PAY_BILL, "banking:create"),
    ])
    def test_requirement(self, intent, expected):
        """Test each intent's module and action."""
        assert str(requirement_for_intent(intent)) == expected

    def test_general_chat_needs_nothing(self):
        """Test chat has no requirement."""
        assert requirement_for_intent(Intent.GENERAL_CHAT) is None
        assert can_submit(None, Intent.GENERAL_CHAT)


class TestHasPermission:
    """Tests for permission checks."""

    def test_super_admin(self):
        """Test super admins may do everything."""
        actor = Actor(role="super_admin", permissions=["reports:view"])
        assert has_permission(actor, "journal", "create")

    def test_admin_without_permissions(self):
        """Test an admin with no explicit permissions may do everything."""
        assert has_permission(Actor(role="admin"), "payroll", "create")

    def test_admin_with_permissions_is_restricted(self):
        """Test explicit permissions restrict an admin."""
        actor = Actor(role="admin", permissions=["sales:create"])
        assert has_permission(actor, "sales", "create")
        assert not has_permission(actor, "payroll", "create")

    def test_exact_and_wildcards(self):
        """Test module:*, *:action and *:* wildcards."""
        assert has_permission(Actor(permissions=["sales:create"]), "sales", "create")
        assert has_permission(Actor(permissions=["purchase_order:*"]), "purchase_order", "approve")
        assert has_permission(Actor(permissions=["*:create"]), "crm", "create")
        assert has_permission(Actor(permissions=["*:*"]), "hr", "create")
        assert not has_permission(Actor(permissions=["*:view"]), "hr", "create")

    def test_no_actor(self):
        """Test anonymous callers have no permissions."""
        assert not has_permission(None, "journal", "create")


class TestBusinessRoles:
    """Tests for default permissions per business role."""

    def test_accountant_defaults(self):
        """Test the accountant role."""
        actor = Actor(business_role="Accountant")
        assert "journal:create" in effective_permissions(actor)
        assert can_submit(actor, Intent.CREATE_INVOICE)
        assert not can_submit(actor, Intent.RUN_PAYROLL)

    def test_hr_defaults(self):
        """Test the HR role."""
        actor = Actor(business_role="HR")
        assert can_submit(actor, Intent.RECORD_SALARY_PAYMENT)
        assert not can_submit(actor, Intent.CREATE_JOURNAL)

    def test_explicit_permissions_override_defaults(self):
        """Test explicit permissions replace the role defaults."""
        actor = Actor(business_role="Accountant", permissions=["banking:create"])
        assert effective_permissions(actor) == ["banking:create"]
        assert not can_submit(actor, Intent.CREATE_JOURNAL)

    def test_unknown_and_custom_roles(self):
        """Test roles without defaults."""
        assert default_permissions_for_business_role("Custom Role") == []
        assert default_permissions_for_business_role(None) == []
        assert default_permissions_for_business_role("Cashier") == ["banking:create"]

    def test_defaults_are_copies(self):
        """Test callers cannot mutate the role table."""
        permissions = default_permissions_for_business_role("Auditor")
        permissions.append("*:*")
        assert default_permissions_for_business_role("Auditor") == ["reports:view", "audit:view"]
