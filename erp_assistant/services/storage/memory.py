"""
In-Memory Storage Implementations

Used by tests and by deployments that run without Google Sheets. The
directory is seeded per tenant; the audit store keeps events in a list.
"""

from collections import defaultdict
from typing import Any, Optional
from uuid import UUID, uuid4

from erp_assistant.models.audit import AuditEvent
from erp_assistant.models.directory import (
    AccountRecord,
    EmployeeRecord,
    LeadRecord,
    PartnerRecord,
    ProductRecord,
)
from erp_assistant.models.draft import Draft, PostingReceipt
from erp_assistant.services.storage.interface import (
    AuditStorageInterface,
    DraftPosterInterface,
    TenantDirectoryInterface,
)


class InMemoryTenantDirectory(TenantDirectoryInterface):
    """Tenant directory backed by plain dicts keyed by tenant id."""

    def __init__(self):
        self.accounts: dict[str, list[AccountRecord]] = defaultdict(list)
        self.partners: dict[str, list[PartnerRecord]] = defaultdict(list)
        self.products: dict[str, list[ProductRecord]] = defaultdict(list)
        self.employees: dict[str, list[EmployeeRecord]] = defaultdict(list)
        self.leads: dict[str, list[LeadRecord]] = defaultdict(list)

    async def list_accounts(self, tenant_id: str, limit: int = 50) -> list[AccountRecord]:
        return list(self.accounts[tenant_id][:limit])

    async def list_partners(self, tenant_id: str, limit: int = 50) -> list[PartnerRecord]:
        return list(self.partners[tenant_id][:limit])

    async def list_products(self, tenant_id: str, limit: int = 50) -> list[ProductRecord]:
        return list(self.products[tenant_id][:limit])

    async def list_employees(self, tenant_id: str, limit: int = 50) -> list[EmployeeRecord]:
        return list(self.employees[tenant_id][:limit])

    async def list_leads(self, tenant_id: str, limit: int = 50) -> list[LeadRecord]:
        return list(self.leads[tenant_id][:limit])


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return sorted(
            (e for e in self.events if e.correlation_id == correlation_id),
            key=lambda e: e.timestamp,
        )

    async def get_events_by_session(
        self,
        session: str,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = sorted(
            (e for e in self.events if e.session == session),
            key=lambda e: e.timestamp,
        )
        return events[-limit:]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return sorted(self.events, key=lambda e: e.timestamp, reverse=True)[:limit]


class InMemoryDraftPoster(DraftPosterInterface):
    """Records every posted draft and hands back a generated reference."""

    def __init__(self, reference_prefix: str = "DRAFT"):
        self.posted: list[tuple[Draft, dict[str, Any]]] = []
        self._prefix = reference_prefix

    async def post(self, draft: Draft, context: dict[str, Any]) -> PostingReceipt:
        self.posted.append((draft, dict(context)))
        return PostingReceipt(
            reference=f"{self._prefix}-{uuid4().hex[:8].upper()}",
            details={"intent": draft.intent.value},
        )

    @property
    def last(self) -> Optional[Draft]:
        return self.posted[-1][0] if self.posted else None
