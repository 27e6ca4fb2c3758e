"""
Abstract Storage Interfaces

DESIGN DECISION: The drafting engine talks to three external collaborators
through abstract interfaces:
1. A tenant directory, consulted READ-ONLY for hint text
2. An append-only audit store
3. A draft poster that creates the real ledger records

Keeping these abstract lets us:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep the drafting logic decoupled from any storage implementation
"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

from erp_assistant.models.audit import AuditEvent
from erp_assistant.models.directory import (
    AccountRecord,
    EmployeeRecord,
    LeadRecord,
    PartnerRecord,
    ProductRecord,
)
from erp_assistant.models.draft import Draft, PostingReceipt


class TenantDirectoryInterface(ABC):
    """
    Read-only lookup of a tenant's master data.

    Results are only used to build hints for the language model, so an
    implementation may return partial or stale data. Failures raise
    StorageError; the caller degrades to empty hint lists.
    """

    @abstractmethod
    async def list_accounts(self, tenant_id: str, limit: int = 50) -> list[AccountRecord]:
        """
        List the tenant's chart of accounts.

        Raises:
            StorageError: If the lookup fails
        """
        pass

    @abstractmethod
    async def list_partners(self, tenant_id: str, limit: int = 50) -> list[PartnerRecord]:
        """List customers and vendors."""
        pass

    @abstractmethod
    async def list_products(self, tenant_id: str, limit: int = 50) -> list[ProductRecord]:
        pass

    @abstractmethod
    async def list_employees(self, tenant_id: str, limit: int = 50) -> list[EmployeeRecord]:
        pass

    @abstractmethod
    async def list_leads(self, tenant_id: str, limit: int = 50) -> list[LeadRecord]:
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (one incoming message).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_events_by_session(
        self,
        session: str,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the events of one "tenant:user" session.

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class DraftPosterInterface(ABC):
    """
    Creates the actual ledger records for a ready draft.

    The poster owns posting-time rules (balance enforcement, numbering,
    inventory movements). The drafting engine never posts by itself.
    """

    @abstractmethod
    async def post(self, draft: Draft, context: dict[str, Any]) -> PostingReceipt:
        """
        Post a ready draft.

        Args:
            draft: A draft with ready_to_execute=True
            context: Caller context (tenant_id, user_id, ...)

        Returns:
            A receipt naming the created record

        Raises:
            SubmissionError: If the records could not be created
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


class SubmissionError(Exception):
    """The poster refused or failed to create records for a draft."""

    def __init__(self, message: str, reference: Optional[str] = None):
        super().__init__(message)
        self.reference = reference
