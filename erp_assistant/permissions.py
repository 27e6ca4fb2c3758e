"""
Role-Based Permissions for Draft Submission

Each intent requires one (module, action) permission before its draft may
be handed to the poster. Permissions are "module:action" strings with
`module:*`, `*:action` and `*:*` wildcards.

Bypass rules:
- super_admin may do everything
- an admin with no explicit permissions may do everything
"""

from typing import NamedTuple, Optional

from erp_assistant.models.draft import Intent
from erp_assistant.models.session import Actor


class PermissionRequirement(NamedTuple):
    module: str
    action: str

    def __str__(self) -> str:
        return f"{self.module}:{self.action}"


INTENT_PERMISSIONS: dict[Intent, PermissionRequirement] = {
    Intent.CREATE_JOURNAL: PermissionRequirement("journal", "create"),
    Intent.CREATE_INVOICE: PermissionRequirement("sales", "create"),
    Intent.CREATE_BILL: PermissionRequirement("purchase", "create"),
    Intent.CREATE_PURCHASE_ORDER: PermissionRequirement("purchase_order", "create"),
    Intent.CONVERT_PO_TO_BILL: PermissionRequirement("purchase_order", "approve"),
    Intent.RUN_PAYROLL: PermissionRequirement("payroll", "create"),
    Intent.RECORD_SALARY_PAYMENT: PermissionRequirement("payroll", "create"),
    Intent.CREATE_EMPLOYEE: PermissionRequirement("hr", "create"),
    Intent.CREATE_LEAD: PermissionRequirement("crm", "create"),
    Intent.FOLLOW_UP_CLIENT: PermissionRequirement("crm", "create"),
    Intent.RECEIVE_PAYMENT: PermissionRequirement("banking", "create"),
    Intent.PAY_BILL: PermissionRequirement("banking", "create"),
}

BUSINESS_ROLE_PERMISSIONS: dict[str, list[str]] = {
    "Organization Admin": [],
    "Accountant": [
        "journal:create",
        "sales:create",
        "purchase:create",
        "banking:create",
        "reports:view",
    ],
    "HR": ["hr:create", "payroll:create", "reports:view"],
    "Inventory Manager": ["inventory:create", "purchase:create", "reports:view"],
    "Auditor": ["reports:view", "audit:view"],
    "Cashier": ["banking:create"],
}


def requirement_for_intent(intent: Intent) -> Optional[PermissionRequirement]:
    """None for intents that need no permission (general chat)."""
    return INTENT_PERMISSIONS.get(intent)


def default_permissions_for_business_role(business_role: Optional[str]) -> list[str]:
    return list(BUSINESS_ROLE_PERMISSIONS.get(business_role or "", []))


def effective_permissions(actor: Actor) -> list[str]:
    """Explicit permissions, else the defaults of the actor's business role."""
    if actor.permissions:
        return list(actor.permissions)
    return default_permissions_for_business_role(actor.business_role)


def has_permission(actor: Optional[Actor], module: str, action: str) -> bool:
    if actor is None:
        return False
    if actor.role == "super_admin":
        return True
    if actor.role == "admin" and not actor.permissions:
        return True

    granted = set(effective_permissions(actor))
    return bool(granted & {f"{module}:{action}", f"{module}:*", f"*:{action}", "*:*"})


def can_submit(actor: Optional[Actor], intent: Intent) -> bool:
    requirement = requirement_for_intent(intent)
    if requirement is None:
        return True
    return has_permission(actor, requirement.module, requirement.action)
