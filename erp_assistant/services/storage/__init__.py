"""
Storage Services Package

Provides abstract interfaces and concrete implementations for the drafting
engine's external collaborators: tenant directory, audit log and poster.
Google Sheets is the default backend; in-memory versions serve tests.
"""

from erp_assistant.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DraftPosterInterface,
    NotFoundError,
    StorageError,
    SubmissionError,
    TenantDirectoryInterface,
)
from erp_assistant.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsTenantDirectory,
)
from erp_assistant.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryDraftPoster,
    InMemoryTenantDirectory,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "DraftPosterInterface",
    "TenantDirectoryInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    "SubmissionError",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsTenantDirectory",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryDraftPoster",
    "InMemoryTenantDirectory",
]
