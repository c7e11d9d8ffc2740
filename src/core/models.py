"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ConversationState(str, Enum):
    """Where a user is in the tagging dialogue."""

    IDLE = "idle"
    AWAITING_TAG = "awaiting_tag"


@dataclass(frozen=True)
class IncomingMessage:
    """Minimal private message context consumed by the dialogue controller."""

    user_id: int
    chat_id: int
    text: str
    sticker_ref: Optional[str] = None
    sender_name: Optional[str] = None


@dataclass(frozen=True)
class InlineQuery:
    """Inline search request; the query text is the tag to look up."""

    query_id: int
    user_id: int
    text: str


@dataclass(frozen=True)
class TextReply:
    """A plain text message to send back to a chat."""

    chat_id: int
    text: str


@dataclass(frozen=True)
class InlineResult:
    """One sticker in an inline answer, with its positional result id."""

    result_id: str
    sticker_ref: str


@dataclass(frozen=True)
class InlineAnswer:
    """Ordered inline results for one query."""

    query_id: int
    results: Tuple[InlineResult, ...]
