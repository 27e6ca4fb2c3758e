"""
Audit Logger

DESIGN DECISION: Every drafting turn leaves a structured trail:
1. Which message arrived and for which session
2. How it was classified, and by which path (model or rules)
3. Which field a draft was parked on, resumed with, or dropped for
4. What was handed to the poster

The audit logger:
- Is async so it composes with the async drafting flow
- Never lets a storage failure break a conversation turn
- Supports correlation IDs to tie the events of one message together
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from erp_assistant.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from erp_assistant.models.session import SessionKey
from erp_assistant.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service for the drafting engine.

    Logs events both to:
    1. Structured local log (always)
    2. An audit store such as Google Sheets (when one is configured)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("erp_assistant.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # A lost audit row must not lose the user's draft
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_message_received(
        self,
        session: SessionKey,
        text: str,
        has_pending: bool,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.message_received(
            session=str(session),
            text=text,
            has_pending=has_pending,
            correlation_id=correlation_id,
        ))

    async def log_intent_classified(
        self,
        session: SessionKey,
        intent: str,
        source: str,
        ready: bool,
        correlation_id: UUID,
    ) -> None:
        """Log which path (model or rules) produced the candidate draft."""
        await self.log(AuditEventBuilder.intent_classified(
            session=str(session),
            intent=intent,
            source=source,
            ready=ready,
            correlation_id=correlation_id,
        ))

    async def log_draft_parked(
        self,
        session: SessionKey,
        intent: str,
        status: str,
        missing: list[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.draft_parked(
            session=str(session),
            intent=intent,
            status=status,
            missing=missing,
            correlation_id=correlation_id,
        ))

    async def log_draft_resumed(
        self,
        session: SessionKey,
        intent: str,
        status: str,
        resolved: bool,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.draft_resumed(
            session=str(session),
            intent=intent,
            status=status,
            resolved=resolved,
            correlation_id=correlation_id,
        ))

    async def log_draft_cancelled(
        self,
        session: SessionKey,
        intent: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.draft_cancelled(
            session=str(session),
            intent=intent,
            correlation_id=correlation_id,
        ))

    async def log_draft_discarded(
        self,
        session: SessionKey,
        intent: str,
        missing: list[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.draft_discarded(
            session=str(session),
            intent=intent,
            missing=missing,
            correlation_id=correlation_id,
        ))

    async def log_draft_ready(
        self,
        session: SessionKey,
        intent: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.draft_ready(
            session=str(session),
            intent=intent,
            correlation_id=correlation_id,
        ))

    async def log_provider_unconfigured(
        self,
        session: SessionKey,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.provider_unconfigured(
            session=str(session),
            correlation_id=correlation_id,
        ))

    async def log_provider_failed(
        self,
        session: SessionKey,
        failure: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a model failure (request error or unusable output)."""
        await self.log(AuditEventBuilder.provider_failed(
            session=str(session),
            failure=failure,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_hint_lookup_failed(
        self,
        session: SessionKey,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.hint_lookup_failed(
            session=str(session),
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_draft_submitted(
        self,
        session: SessionKey,
        intent: str,
        reference: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.draft_submitted(
            session=str(session),
            intent=intent,
            reference=reference,
            correlation_id=correlation_id,
        ))

    async def log_draft_rejected(
        self,
        session: SessionKey,
        intent: str,
        reasons: list[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.draft_rejected(
            session=str(session),
            intent=intent,
            reasons=reasons,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        session: Optional[SessionKey] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            session=str(session) if session else None,
            correlation_id=correlation_id,
        ))

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        await self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Created once per incoming message and passed through every
    operation performed for it.
    """
    return uuid4()
