"""
Main Orchestrator for the ERP Assistant

This module ties together all the components and defines the
end-to-end flows for:
1. Drafting (message → pending check → classify → validate → question or draft)
2. Submission (ready draft → re-check → permission → external poster)

DESIGN DECISION: The orchestrator enforces the boundaries:
- The drafting flow has NO side effects beyond the pending-draft store
- A language model may propose, but only the validator decides readiness
- Nothing is posted here; the poster is an injected collaborator
- Every step is audited

This is the "glue" that ensures the system works correctly
even when individual components might behave unexpectedly.
"""

import asyncio
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from uuid import UUID

import structlog

from erp_assistant.agents import DraftingAgent
from erp_assistant.audit import AuditLogger, create_correlation_id
from erp_assistant.config import get_settings
from erp_assistant.extraction import GREETING_MESSAGE, IntentClassifier, is_greeting
from erp_assistant.models.directory import ContextHints
from erp_assistant.models.draft import Draft, Intent, SubmissionResult
from erp_assistant.models.session import Actor, SessionContext, SessionKey
from erp_assistant.permissions import has_permission, requirement_for_intent
from erp_assistant.services.storage import (
    AuditStorageInterface,
    DraftPosterInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsTenantDirectory,
    InMemoryTenantDirectory,
    TenantDirectoryInterface,
)
from erp_assistant.sessions import (
    InMemoryPendingDraftStore,
    PendingDraftStore,
    TurnResolver,
    cancellation_message,
    is_cancellation,
)
from erp_assistant.validation import RequirementValidator, ValidationOutcome, missing_fields


RETRY_MESSAGE = "Something went wrong while reading that. Please try again."

logger = structlog.get_logger("erp_assistant.orchestrator")


class TransactionDraftingFlow:
    """
    Orchestrates one conversational drafting turn.

    Flow:
    1. Pending draft? → cancel it, or merge the answer into it
    2. Greeting / help → fixed prompt
    3. Classify → language model when configured, rules otherwise
    4. Validate → ready draft, or ONE question with the draft parked

    The returned Draft is always well-formed. Failures anywhere in the
    turn become a general_chat reply, never an exception.
    """

    def __init__(
        self,
        store: Optional[PendingDraftStore] = None,
        classifier: Optional[IntentClassifier] = None,
        validator: Optional[RequirementValidator] = None,
        resolver: Optional[TurnResolver] = None,
        agent: Optional[DraftingAgent] = None,
        directory: Optional[TenantDirectoryInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        hint_limit: int = 50,
    ):
        self._store = store if store is not None else InMemoryPendingDraftStore()
        self._classifier = classifier or IntentClassifier()
        self._validator = validator or RequirementValidator()
        self._resolver = resolver or TurnResolver()
        self._agent = agent
        self._directory = directory
        self._audit_logger = audit_logger
        self._hint_limit = hint_limit

    @property
    def store(self) -> PendingDraftStore:
        return self._store

    async def resolve(self, text: Optional[str], context: SessionContext) -> Draft:
        """
        Produce the engine's answer to one user message.

        Args:
            text: The raw message (may be empty)
            context: Tenant, user and whether the tenant directory may be used

        Returns:
            A ready Draft, a clarifying question, or a chat reply
        """
        correlation_id = create_correlation_id()
        session = context.session_key
        try:
            return await self._resolve(text or "", context, session, correlation_id)
        except Exception as e:
            logger.error("drafting_failed", session=str(session), error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    session=session,
                    correlation_id=correlation_id,
                )
            return Draft.chat(RETRY_MESSAGE, confidence=None)

    async def _resolve(
        self,
        text: str,
        context: SessionContext,
        session: SessionKey,
        correlation_id: UUID,
    ) -> Draft:
        # Read-once: the parked draft leaves the store before any await
        pending = self._store.get(session)
        if pending is not None:
            self._store.delete(session)

        if self._audit_logger:
            await self._audit_logger.log_message_received(
                session=session,
                text=text,
                has_pending=pending is not None,
                correlation_id=correlation_id,
            )

        # Step 1: A parked draft consumes this message first
        if pending is not None:
            if is_cancellation(text):
                if self._audit_logger:
                    await self._audit_logger.log_draft_cancelled(
                        session=session,
                        intent=pending.intent.value,
                        correlation_id=correlation_id,
                    )
                return Draft.chat(cancellation_message(pending))

            merged = self._resolver.resolve(pending, text)
            if self._audit_logger:
                await self._audit_logger.log_draft_resumed(
                    session=session,
                    intent=pending.intent.value,
                    status=pending.status,
                    resolved=merged is not None,
                    correlation_id=correlation_id,
                )
            if merged is not None:
                if merged.intent == Intent.GENERAL_CHAT:
                    # Empty answer: nothing to merge, the draft stays dropped
                    return merged
                return await self._finalize(merged, session, correlation_id)
            # Unknown status: the parked draft is dropped and the message
            # is treated as a fresh request

        # Step 2: Greetings never reach the classifier
        if not text.strip() or is_greeting(text):
            return Draft.chat(GREETING_MESSAGE)

        # Step 3: Candidate draft
        candidate, source = await self._propose(text, context, session, correlation_id)

        if self._audit_logger:
            await self._audit_logger.log_intent_classified(
                session=session,
                intent=candidate.intent.value,
                source=source,
                ready=candidate.ready_to_execute,
                correlation_id=correlation_id,
            )

        # Step 4: Requirements
        return await self._finalize(candidate, session, correlation_id)

    async def _propose(
        self,
        text: str,
        context: SessionContext,
        session: SessionKey,
        correlation_id: UUID,
    ) -> tuple[Draft, str]:
        """
        Ask the language model first, fall back to the rules.

        Returns:
            (candidate, source) where source is "model" or "rules"
        """
        if self._agent is not None and self._agent.is_configured:
            hints = await self._load_hints(context, session, correlation_id)
            result = await self._agent.propose_draft(text, hints)
            if result.ok:
                return result.draft, "model"
            if self._audit_logger:
                await self._audit_logger.log_provider_failed(
                    session=session,
                    failure=result.failure.value,
                    error_message=str(result.error),
                    correlation_id=correlation_id,
                )
        elif self._audit_logger:
            await self._audit_logger.log_provider_unconfigured(
                session=session,
                correlation_id=correlation_id,
            )

        return self._classifier.classify(text), "rules"

    async def _load_hints(
        self,
        context: SessionContext,
        session: SessionKey,
        correlation_id: UUID,
    ) -> ContextHints:
        """Tenant master data for the prompt. Lookup failure means empty hints."""
        if not context.db_available or self._directory is None:
            return ContextHints()

        tenant = session.tenant
        limit = self._hint_limit
        try:
            accounts, partners, products, employees, leads = await asyncio.gather(
                self._directory.list_accounts(tenant, limit),
                self._directory.list_partners(tenant, limit),
                self._directory.list_products(tenant, limit),
                self._directory.list_employees(tenant, limit),
                self._directory.list_leads(tenant, limit),
            )
            return ContextHints(
                accounts=accounts,
                partners=partners,
                products=products,
                employees=employees,
                leads=leads,
            )
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_hint_lookup_failed(
                    session=session,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return ContextHints()

    async def _finalize(
        self,
        draft: Draft,
        session: SessionKey,
        correlation_id: UUID,
    ) -> Draft:
        outcome: ValidationOutcome = self._validator.enforce(draft)

        if outcome.pending is not None:
            self._store.set(session, outcome.pending)
            if self._audit_logger:
                await self._audit_logger.log_draft_parked(
                    session=session,
                    intent=outcome.pending.intent.value,
                    status=outcome.pending.status,
                    missing=outcome.missing,
                    correlation_id=correlation_id,
                )
        elif outcome.discarded:
            if self._audit_logger:
                await self._audit_logger.log_draft_discarded(
                    session=session,
                    intent=draft.intent.value,
                    missing=outcome.missing,
                    correlation_id=correlation_id,
                )
        elif outcome.is_ready and self._audit_logger:
            await self._audit_logger.log_draft_ready(
                session=session,
                intent=outcome.draft.intent.value,
                correlation_id=correlation_id,
            )

        return outcome.draft


def journal_imbalance(data: dict[str, Any]) -> Optional[str]:
    """
    Check the entries of a journal payload.

    Returns:
        None when balanced, otherwise the reason it cannot be posted
    """
    entries = data.get("entries")
    if not isinstance(entries, list) or not entries:
        return "Journal entry has no lines"

    debit = Decimal("0")
    credit = Decimal("0")
    try:
        for line in entries:
            debit += Decimal(str(line.get("debit") or 0))
            credit += Decimal(str(line.get("credit") or 0))
    except (InvalidOperation, AttributeError):
        return "Journal entry has a non-numeric line"

    if debit != credit:
        return f"Journal entry is unbalanced (debit {debit}, credit {credit})"
    if debit <= 0:
        return "Journal entry has no amount"
    return None


class DraftSubmissionFlow:
    """
    Hands a ready draft to the external poster.

    CRITICAL: The drafting engine never posts. This flow only re-checks a
    draft and passes it on; rejected drafts are audited and returned with
    their reasons.
    """

    def __init__(
        self,
        poster: DraftPosterInterface,
        validator: Optional[RequirementValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._poster = poster
        self._validator = validator or RequirementValidator()
        self._audit_logger = audit_logger

    def check(self, draft: Draft, actor: Optional[Actor]) -> list[str]:
        """All reasons the draft may not be posted (empty when it may)."""
        reasons: list[str] = []

        if draft.intent == Intent.GENERAL_CHAT:
            return ["Nothing to submit"]
        if not draft.ready_to_execute:
            reasons.append("Draft is not ready to execute")

        missing = missing_fields(draft.intent, draft.data)
        if missing:
            reasons.append("Missing: " + ", ".join(missing))

        if draft.intent == Intent.CREATE_JOURNAL:
            imbalance = journal_imbalance(draft.data)
            if imbalance:
                reasons.append(imbalance)

        requirement = requirement_for_intent(draft.intent)
        if requirement and not has_permission(actor, requirement.module, requirement.action):
            reasons.append(f"Permission denied: {requirement} required")

        return reasons

    async def submit(
        self,
        draft: Draft,
        context: SessionContext,
        actor: Optional[Actor],
    ) -> SubmissionResult:
        """
        Re-check and post a draft.

        Raises:
            SubmissionError: (or any poster exception) after it is audited
        """
        correlation_id = create_correlation_id()
        session = context.session_key

        reasons = self.check(draft, actor)
        if reasons:
            if self._audit_logger:
                await self._audit_logger.log_draft_rejected(
                    session=session,
                    intent=draft.intent.value,
                    reasons=reasons,
                    correlation_id=correlation_id,
                )
            return SubmissionResult(
                accepted=False,
                intent=draft.intent,
                reasons=reasons,
                message="Draft was not submitted: " + "; ".join(reasons),
            )

        poster_context = {
            "tenantId": session.tenant,
            "userId": session.user,
            "role": actor.role if actor else None,
            "correlationId": str(correlation_id),
        }
        try:
            receipt = await self._poster.post(draft, poster_context)
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_external_service_error(
                    service="poster",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_draft_submitted(
                session=session,
                intent=draft.intent.value,
                reference=receipt.reference,
                correlation_id=correlation_id,
            )

        return SubmissionResult(
            accepted=True,
            intent=draft.intent,
            receipt=receipt,
            message=f"Submitted as {receipt.reference}",
        )


def create_app_components(
    use_storage: bool = True,
    poster: Optional[DraftPosterInterface] = None,
) -> tuple[TransactionDraftingFlow, Optional[DraftSubmissionFlow], Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False for testing without storage.
        poster: The external poster; without one no submission flow is built.

    Returns:
        (drafting_flow, submission_flow, sheets_client)
    """
    settings = get_settings()
    sheets_client = None
    directory: TenantDirectoryInterface = InMemoryTenantDirectory()
    audit_storage: Optional[AuditStorageInterface] = None

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient(settings.google_sheets)
            directory = GoogleSheetsTenantDirectory(sheets_client)
            audit_storage = GoogleSheetsAuditStorage(sheets_client)
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None
            directory = InMemoryTenantDirectory()
            audit_storage = None

    audit_logger = AuditLogger(audit_storage)
    app = settings.app

    drafting_flow = TransactionDraftingFlow(
        store=InMemoryPendingDraftStore(),
        classifier=IntentClassifier(currency=app.currency),
        validator=RequirementValidator(),
        resolver=TurnResolver(sku_prefix=app.sku_prefix, currency=app.currency),
        agent=DraftingAgent(settings.gemini),
        directory=directory,
        audit_logger=audit_logger,
        hint_limit=app.hint_limit,
    )

    submission_flow = None
    if poster is not None:
        submission_flow = DraftSubmissionFlow(
            poster=poster,
            audit_logger=audit_logger,
        )

    return drafting_flow, submission_flow, sheets_client
