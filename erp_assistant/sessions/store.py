"""
Pending-Draft Store

DESIGN DECISION: The store is an injected abstraction with exactly three
operations (get / set / delete by session key) so a cache with expiry and
per-key locking can replace the in-memory map without touching the flow.

Baseline behavior of the in-memory store:
- at most ONE pending draft per session key; `set` overwrites
- no expiry: a stale draft waits until the next message of that session
- no locking: two concurrent messages of the same session race and the
  last writer wins
- process restart loses every pending draft
"""

from abc import ABC, abstractmethod
from typing import Optional

from erp_assistant.models.draft import PendingDraft
from erp_assistant.models.session import SessionKey


class PendingDraftStore(ABC):
    """Session-scoped storage of the single in-flight draft."""

    @abstractmethod
    def get(self, key: SessionKey) -> Optional[PendingDraft]:
        pass

    @abstractmethod
    def set(self, key: SessionKey, pending: PendingDraft) -> None:
        pass

    @abstractmethod
    def delete(self, key: SessionKey) -> None:
        """Remove the entry if present; deleting a missing key is a no-op."""
        pass


class InMemoryPendingDraftStore(PendingDraftStore):
    """Process-wide dict keyed by session."""

    def __init__(self):
        self._drafts: dict[SessionKey, PendingDraft] = {}

    def get(self, key: SessionKey) -> Optional[PendingDraft]:
        return self._drafts.get(key)

    def set(self, key: SessionKey, pending: PendingDraft) -> None:
        self._drafts[key] = pending

    def delete(self, key: SessionKey) -> None:
        self._drafts.pop(key, None)

    def __len__(self) -> int:
        return len(self._drafts)

    def __contains__(self, key: SessionKey) -> bool:
        return key in self._drafts
