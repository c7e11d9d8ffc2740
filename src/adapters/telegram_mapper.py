"""Telegram-to-core event mapping adapter.

This keeps Telethon-specific details out of the core dialogue.
"""

from __future__ import annotations

from typing import Any, Optional

from telethon import utils

from core.models import IncomingMessage, InlineQuery


def sticker_ref_from_message(message: Any) -> Optional[str]:
    """Return the packed bot file id of an attached sticker, if any."""

    sticker = getattr(message, "sticker", None)
    if sticker is None:
        return None
    return utils.pack_bot_file_id(sticker)


def _display_name(sender: Any) -> Optional[str]:
    if sender is None:
        return None
    username = getattr(sender, "username", None)
    if isinstance(username, str) and username:
        return f"@{username}"
    first = getattr(sender, "first_name", None)
    last = getattr(sender, "last_name", None)
    if first or last:
        return " ".join(part for part in [first, last] if part)
    return None


def build_message(message: Any) -> IncomingMessage:
    """Build a core IncomingMessage from a Telethon Message."""

    return IncomingMessage(
        user_id=message.sender_id,
        chat_id=message.chat_id,
        # Stickers carry no text; raw_text is None or "" for them.
        text=message.raw_text or "",
        sticker_ref=sticker_ref_from_message(message),
        sender_name=_display_name(getattr(message, "sender", None)),
    )


def build_inline_query(event: Any) -> InlineQuery:
    """Build a core InlineQuery from a Telethon InlineQuery event."""

    return InlineQuery(
        query_id=event.query.query_id,
        user_id=event.sender_id,
        text=event.text or "",
    )
