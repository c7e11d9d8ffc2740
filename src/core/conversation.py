"""Per-user state for the two-step "tag this sticker" dialogue.

State lives in process memory only; a restart drops every in-flight session.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, Optional

from core.models import ConversationState


@dataclass
class _Session:
    state: ConversationState = ConversationState.IDLE
    pending_sticker: Optional[str] = None


class ConversationStateMachine:
    """Tracks IDLE / AWAITING_TAG per user behind a single lock.

    Users without an entry are IDLE. Sessions are dropped as soon as they go
    back to IDLE, so the map only holds users with a pending sticker.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: Dict[int, _Session] = {}

    def state_of(self, user_id: int) -> ConversationState:
        with self._lock:
            session = self._sessions.get(user_id)
            return session.state if session else ConversationState.IDLE

    def pending_sticker(self, user_id: int) -> Optional[str]:
        with self._lock:
            session = self._sessions.get(user_id)
            return session.pending_sticker if session else None

    def begin_tagging(self, user_id: int, sticker_ref: str) -> None:
        """Move the user to AWAITING_TAG holding the given sticker."""

        with self._lock:
            self._sessions[user_id] = _Session(
                state=ConversationState.AWAITING_TAG,
                pending_sticker=sticker_ref,
            )

    def take_pending(self, user_id: int) -> Optional[str]:
        """Return the pending sticker and reset the user to IDLE atomically.

        Returns None if the user was not awaiting a tag, so two concurrent
        commits can never claim the same sticker.
        """

        with self._lock:
            session = self._sessions.pop(user_id, None)
        if session is None or session.state is not ConversationState.AWAITING_TAG:
            return None
        return session.pending_sticker

    def abort(self, user_id: int) -> bool:
        """Drop any pending sticker; returns True if one was pending."""

        with self._lock:
            session = self._sessions.pop(user_id, None)
        return session is not None and session.pending_sticker is not None

    def active_sessions(self) -> int:
        with self._lock:
            return len(self._sessions)
