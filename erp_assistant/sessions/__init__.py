"""
Sessions Package

Per-session conversation state: the pending-draft store and the resolver
that merges follow-up answers into a parked draft.
"""

from erp_assistant.sessions.resolver import (
    EMPTY_ANSWER_MESSAGE,
    TurnResolver,
    cancellation_message,
    format_number,
    is_cancellation,
)
from erp_assistant.sessions.store import InMemoryPendingDraftStore, PendingDraftStore

__all__ = [
    "EMPTY_ANSWER_MESSAGE",
    "InMemoryPendingDraftStore",
    "PendingDraftStore",
    "TurnResolver",
    "cancellation_message",
    "format_number",
    "is_cancellation",
]
