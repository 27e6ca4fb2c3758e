"""
Data Models Package

This package contains all Pydantic models used by the drafting engine.
All data flowing through the engine must conform to these schemas.
"""

from erp_assistant.models.draft import (
    Draft,
    DraftSummary,
    FieldLabel,
    Intent,
    JournalLine,
    LineItem,
    MissingFieldStatus,
    PendingDraft,
    PostingReceipt,
    SubmissionResult,
)
from erp_assistant.models.directory import (
    AccountRecord,
    ContextHints,
    EmployeeRecord,
    LeadRecord,
    PartnerRecord,
    ProductRecord,
)
from erp_assistant.models.session import (
    NO_TENANT,
    NO_USER,
    Actor,
    SessionContext,
    SessionKey,
)
from erp_assistant.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Draft models
    "Draft",
    "DraftSummary",
    "FieldLabel",
    "Intent",
    "JournalLine",
    "LineItem",
    "MissingFieldStatus",
    "PendingDraft",
    "PostingReceipt",
    "SubmissionResult",
    # Directory projections
    "AccountRecord",
    "ContextHints",
    "EmployeeRecord",
    "LeadRecord",
    "PartnerRecord",
    "ProductRecord",
    # Session models
    "NO_TENANT",
    "NO_USER",
    "Actor",
    "SessionContext",
    "SessionKey",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
