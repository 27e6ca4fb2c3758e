"""Services package."""

from erp_assistant.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    DraftPosterInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsTenantDirectory,
    InMemoryAuditStorage,
    InMemoryDraftPoster,
    InMemoryTenantDirectory,
    NotFoundError,
    StorageError,
    SubmissionError,
    TenantDirectoryInterface,
)

__all__ = [
    "AuditStorageInterface",
    "ConnectionError",
    "DraftPosterInterface",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsTenantDirectory",
    "InMemoryAuditStorage",
    "InMemoryDraftPoster",
    "InMemoryTenantDirectory",
    "NotFoundError",
    "StorageError",
    "SubmissionError",
    "TenantDirectoryInterface",
]
