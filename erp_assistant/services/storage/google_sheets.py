"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets backs the tenant directory and the audit log
because:
1. Tenant master data can be maintained by non-technical staff
2. No database setup required
3. The audit trail is directly viewable by the business

TRADEOFFS:
- Not suitable for high-volume data (hint lookups are capped per list)
- No server-side filtering (we filter rows by tenant in Python)

Every directory worksheet has a header row with a `tenant_id` column;
each row belongs to exactly one tenant.
"""

import json
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from uuid import UUID

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from erp_assistant.config import GoogleSheetsSettings, get_settings
from erp_assistant.models.audit import AuditEvent, AuditEventType, AuditSeverity
from erp_assistant.models.directory import (
    AccountRecord,
    EmployeeRecord,
    LeadRecord,
    PartnerRecord,
    ProductRecord,
)
from erp_assistant.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    NotFoundError,
    StorageError,
    TenantDirectoryInterface,
)


# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "session",
    "intent",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]

TENANT_COLUMN = "tenant_id"


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @property
    def settings(self) -> GoogleSheetsSettings:
        return self._settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_sheet(self, name: str) -> gspread.Worksheet:
        """Get an existing directory worksheet."""
        try:
            return self.get_spreadsheet().worksheet(name)
        except gspread.WorksheetNotFound:
            raise NotFoundError(f"Worksheet not found: {name}")

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.audit_sheet_name)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=self._settings.audit_sheet_name,
                rows=5000,
                cols=len(AUDIT_COLUMNS),
            )
            sheet.append_row(AUDIT_COLUMNS)
        return sheet


def _decimal_or_none(value: Any) -> Optional[Decimal]:
    if value in (None, ""):
        return None
    try:
        return Decimal(str(value).replace(",", ""))
    except InvalidOperation:
        return None


def _text(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


class GoogleSheetsTenantDirectory(TenantDirectoryInterface):
    """
    Google Sheets implementation of the tenant directory.

    One worksheet per record kind. Rows of other tenants are skipped, as
    are rows without a name.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _tenant_rows(self, sheet_name: str, tenant_id: str, limit: int) -> list[dict]:
        try:
            records = self._client.get_sheet(sheet_name).get_all_records()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {sheet_name}: {e}")

        rows = [
            row for row in records
            if str(row.get(TENANT_COLUMN, "")).strip() == str(tenant_id)
        ]
        return rows[:limit]

    async def list_accounts(self, tenant_id: str, limit: int = 50) -> list[AccountRecord]:
        rows = self._tenant_rows(self._client.settings.accounts_sheet_name, tenant_id, limit)
        return [
            AccountRecord(
                code=str(row["code"]),
                name=str(row["name"]),
                type=_text(row.get("type")),
                category=_text(row.get("category")),
                balance=_decimal_or_none(row.get("balance")),
            )
            for row in rows
            if _text(row.get("code")) and _text(row.get("name"))
        ]

    async def list_partners(self, tenant_id: str, limit: int = 50) -> list[PartnerRecord]:
        rows = self._tenant_rows(self._client.settings.partners_sheet_name, tenant_id, limit)
        return [
            PartnerRecord(
                name=str(row["name"]),
                type=_text(row.get("type")),
                email=_text(row.get("email")),
            )
            for row in rows
            if _text(row.get("name"))
        ]

    async def list_products(self, tenant_id: str, limit: int = 50) -> list[ProductRecord]:
        rows = self._tenant_rows(self._client.settings.products_sheet_name, tenant_id, limit)
        return [
            ProductRecord(
                name=str(row["name"]),
                price=_decimal_or_none(row.get("price")),
                type=_text(row.get("type")),
            )
            for row in rows
            if _text(row.get("name"))
        ]

    async def list_employees(self, tenant_id: str, limit: int = 50) -> list[EmployeeRecord]:
        rows = self._tenant_rows(self._client.settings.employees_sheet_name, tenant_id, limit)
        return [
            EmployeeRecord(
                first_name=str(row["first_name"]),
                last_name=_text(row.get("last_name")) or "",
                department=_text(row.get("department")),
                position=_text(row.get("position")),
            )
            for row in rows
            if _text(row.get("first_name"))
        ]

    async def list_leads(self, tenant_id: str, limit: int = 50) -> list[LeadRecord]:
        rows = self._tenant_rows(self._client.settings.leads_sheet_name, tenant_id, limit)
        return [
            LeadRecord(name=str(row["name"]), status=_text(row.get("status")))
            for row in rows
            if _text(row.get("name"))
        ]


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            session=safe_get(4) or None,
            intent=safe_get(5) or None,
            correlation_id=UUID(safe_get(6)) if safe_get(6) else None,
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_message=safe_get(9) or None,
            is_user_action=safe_get(10).lower() == "true",
        )

    def _load_events(self) -> list[AuditEvent]:
        try:
            all_rows = self._client.get_audit_sheet().get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events = []
        for row in all_rows:
            if not row or not row[0]:
                continue
            try:
                events.append(self._row_to_event(row))
            except (ValueError, json.JSONDecodeError):
                continue  # Skip malformed rows
        return events

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._load_events() if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_events_by_session(
        self,
        session: str,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = [e for e in self._load_events() if e.session == session]
        events.sort(key=lambda e: e.timestamp)
        return events[-limit:]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = self._load_events()
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
