"""
Audit Models for the Transaction Drafting Engine

Every turn of a drafting conversation leaves a trail:
1. What the user said and how it was classified
2. Which field the engine parked a draft on
3. Whether the language model was used, absent, or failed
4. What was finally handed to the poster

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
Provider "unconfigured" and provider "failed" are separate event types even
though the user sees the same fallback draft for both.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Conversation
    MESSAGE_RECEIVED = "message_received"
    INTENT_CLASSIFIED = "intent_classified"

    # Pending drafts
    DRAFT_PARKED = "draft_parked"
    DRAFT_RESUMED = "draft_resumed"
    DRAFT_CANCELLED = "draft_cancelled"
    DRAFT_DISCARDED = "draft_discarded"
    DRAFT_READY = "draft_ready"

    # Language model
    PROVIDER_UNCONFIGURED = "provider_unconfigured"
    PROVIDER_FAILED = "provider_failed"
    HINT_LOOKUP_FAILED = "hint_lookup_failed"

    # Hand-off
    DRAFT_SUBMITTED = "draft_submitted"
    DRAFT_REJECTED = "draft_rejected"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    `session` is the "tenant:user" session key; `correlation_id` ties
    together every event produced while handling one message.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    session: Optional[str] = Field(
        default=None,
        description="Session key the event belongs to"
    )
    intent: Optional[str] = Field(
        default=None,
        description="Intent of the draft involved, if any"
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by all events of one message"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None
    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "session": self.session,
            "intent": self.intent,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Columns: [event_id, timestamp, event_type, severity, session, intent,
        correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.session or "",
            self.intent or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.draft_parked(session, intent, status, missing, cid)
    """

    @staticmethod
    def message_received(
        session: str,
        text: str,
        has_pending: bool,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MESSAGE_RECEIVED,
            session=session,
            correlation_id=correlation_id,
            description="User message received",
            details={"text": text[:300], "has_pending": has_pending},
            is_user_action=True,
        )

    @staticmethod
    def intent_classified(
        session: str,
        intent: str,
        source: str,
        ready: bool,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INTENT_CLASSIFIED,
            session=session,
            intent=intent,
            correlation_id=correlation_id,
            description=f"Classified as {intent} by {source}",
            details={"source": source, "ready_to_execute": ready},
        )

    @staticmethod
    def draft_parked(
        session: str,
        intent: str,
        status: str,
        missing: list[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DRAFT_PARKED,
            session=session,
            intent=intent,
            correlation_id=correlation_id,
            description=f"Draft parked waiting for {missing[0] if missing else status}",
            details={"status": status, "missing": missing},
        )

    @staticmethod
    def draft_resumed(
        session: str,
        intent: str,
        status: str,
        resolved: bool,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DRAFT_RESUMED,
            severity=AuditSeverity.INFO if resolved else AuditSeverity.WARNING,
            session=session,
            intent=intent,
            correlation_id=correlation_id,
            description=(
                f"Pending draft answered for {status}"
                if resolved
                else f"Pending draft dropped: unrecognized status {status}"
            ),
            details={"status": status, "resolved": resolved},
            is_user_action=True,
        )

    @staticmethod
    def draft_cancelled(
        session: str,
        intent: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DRAFT_CANCELLED,
            session=session,
            intent=intent,
            correlation_id=correlation_id,
            description="User cancelled the pending draft",
            is_user_action=True,
        )

    @staticmethod
    def draft_discarded(
        session: str,
        intent: str,
        missing: list[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DRAFT_DISCARDED,
            severity=AuditSeverity.WARNING,
            session=session,
            intent=intent,
            correlation_id=correlation_id,
            description="Draft discarded: no question mapped for the missing field",
            details={"missing": missing},
        )

    @staticmethod
    def draft_ready(
        session: str,
        intent: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DRAFT_READY,
            session=session,
            intent=intent,
            correlation_id=correlation_id,
            description=f"Draft ready to execute: {intent}",
        )

    @staticmethod
    def provider_unconfigured(
        session: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROVIDER_UNCONFIGURED,
            severity=AuditSeverity.DEBUG,
            session=session,
            correlation_id=correlation_id,
            description="Language model not configured; using rule-based drafting",
        )

    @staticmethod
    def provider_failed(
        session: str,
        failure: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROVIDER_FAILED,
            severity=AuditSeverity.WARNING,
            session=session,
            correlation_id=correlation_id,
            description=f"Language model failed ({failure}); using rule-based drafting",
            error_message=error_message,
            details={"failure": failure},
        )

    @staticmethod
    def hint_lookup_failed(
        session: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HINT_LOOKUP_FAILED,
            severity=AuditSeverity.WARNING,
            session=session,
            correlation_id=correlation_id,
            description="Tenant directory unavailable; continuing without hints",
            error_message=error_message,
        )

    @staticmethod
    def draft_submitted(
        session: str,
        intent: str,
        reference: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DRAFT_SUBMITTED,
            session=session,
            intent=intent,
            correlation_id=correlation_id,
            description=f"Draft handed to poster: {reference}",
            details={"reference": reference},
            is_user_action=True,
        )

    @staticmethod
    def draft_rejected(
        session: str,
        intent: str,
        reasons: list[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DRAFT_REJECTED,
            severity=AuditSeverity.WARNING,
            session=session,
            intent=intent,
            correlation_id=correlation_id,
            description=f"Draft submission rejected with {len(reasons)} reasons",
            details={"reasons": reasons},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        session: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            session=session,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
