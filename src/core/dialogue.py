"""Dialogue controller: one inbound event in, at most one outbound action out.

This module is integration-agnostic. Commands are handled here; everything
else is routed through the per-user conversation state machine, and all
index mutations go through TagIndex.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Optional

from core.config import DialogueConfig
from core.conversation import ConversationStateMachine
from core.errors import StoreError
from core.models import (
    ConversationState,
    IncomingMessage,
    InlineAnswer,
    InlineQuery,
    InlineResult,
    TextReply,
)
from core.tag_index import TagIndex, normalize_tag

LOGGER = logging.getLogger(__name__)

ABORT_COMMAND = "/abort"
DELETE_COMMAND = "/delete"
HELP_COMMANDS = {"/help", "/start"}

PROMPT_IDLE = "Send me a sticker to tag or a tag to search."
PROMPT_TAG = "Send me a tag for this sticker or use /abort to cancel."
PROMPT_EMPTY_TAG = "A tag cannot be empty or blank. " + PROMPT_TAG
MSG_ABORTED = "Current operation aborted."
MSG_ADD_FAILED = "Sorry but it failed to add the tag. Please try again."
MSG_DELETE_USAGE = "Delete a tag with /delete <tag>"
MSG_DELETE_FAILED = "Sorry but it failed to delete the tag. Please try again."
HELP_TEXT = "\n".join(
    [
        "Tag your stickers and find them again from any chat.",
        "",
        "1. Send me a sticker.",
        "2. Send me a tag for it (or /abort to cancel); tags cannot be empty or blank.",
        "3. Type @<this bot> <tag> in any chat to get the stickers back.",
        "",
        "/delete <tag> - remove a tag and all its stickers",
        "/abort - cancel tagging the current sticker",
        "/help - show this message",
    ]
)

_ARGUMENT_SPLIT = re.compile(r"\s")


def _sender_label(message: IncomingMessage) -> str:
    if message.sender_name:
        return f"{message.sender_name} ({message.user_id})"
    return str(message.user_id)


def command_of(text: str) -> Optional[str]:
    """Return the lowercased leading /command of a message, without any @bot suffix."""

    if not text.startswith("/"):
        return None
    token = text.split(maxsplit=1)[0]
    return token.split("@", 1)[0].lower()


def command_argument(text: str) -> str:
    """Return everything after the first whitespace character, verbatim."""

    parts = _ARGUMENT_SPLIT.split(text, maxsplit=1)
    return parts[1] if len(parts) == 2 else ""


class DialogueController:
    """Turns messages and inline queries into replies and tag index calls."""

    def __init__(
        self,
        index: TagIndex,
        conversation: ConversationStateMachine,
        config: Optional[DialogueConfig] = None,
    ) -> None:
        self._index = index
        self._conversation = conversation
        self._config = config or DialogueConfig()

    async def handle_message(self, message: IncomingMessage) -> Optional[TextReply]:
        """Process one private message and return the reply to send."""

        command = command_of(message.text)
        if command == DELETE_COMMAND:
            return await self._delete_tag(message)
        if command in HELP_COMMANDS:
            return TextReply(chat_id=message.chat_id, text=HELP_TEXT)
        return await self._converse(message, command)

    async def handle_inline_query(self, query: InlineQuery) -> Optional[InlineAnswer]:
        """Look up the query text as a tag; None means nothing to answer."""

        try:
            stickers = await asyncio.to_thread(self._index.lookup, query.text)
        except StoreError as exc:
            LOGGER.error("Failed to search stickers for %r: %s", query.text, exc)
            return None

        if not stickers:
            return None

        # Result ids are positional so Telegram keeps the stored order.
        limit = self._config.max_inline_results
        results = tuple(
            InlineResult(result_id=str(position), sticker_ref=sticker_ref)
            for position, sticker_ref in enumerate(stickers[:limit], start=1)
        )
        return InlineAnswer(query_id=query.query_id, results=results)

    async def _converse(self, message: IncomingMessage, command: Optional[str]) -> TextReply:
        user_id = message.user_id
        state = self._conversation.state_of(user_id)

        if state is ConversationState.IDLE:
            if message.sticker_ref:
                self._conversation.begin_tagging(user_id, message.sticker_ref)
                return TextReply(chat_id=message.chat_id, text=PROMPT_TAG)
            return TextReply(chat_id=message.chat_id, text=PROMPT_IDLE)

        if command == ABORT_COMMAND:
            self._conversation.abort(user_id)
            return TextReply(chat_id=message.chat_id, text=MSG_ABORTED)

        # A second sticker without a caption would otherwise be stored under "".
        tag = message.text
        if not tag.strip():
            return TextReply(chat_id=message.chat_id, text=PROMPT_EMPTY_TAG)

        return await self._commit_tag(message, tag)

    async def _commit_tag(self, message: IncomingMessage, tag: str) -> TextReply:
        sticker_ref = self._conversation.take_pending(message.user_id)
        if sticker_ref is None:
            # Another event for this user already finished the session.
            return TextReply(chat_id=message.chat_id, text=PROMPT_IDLE)

        try:
            await asyncio.to_thread(self._index.add_sticker, tag, sticker_ref)
        except StoreError as exc:
            LOGGER.error("Failed to add tag %r for %s: %s", tag, _sender_label(message), exc)
            return TextReply(chat_id=message.chat_id, text=MSG_ADD_FAILED)

        LOGGER.info("%s tagged a sticker with %r", _sender_label(message), tag)
        return TextReply(chat_id=message.chat_id, text=f"Added tag {normalize_tag(tag)}")

    async def _delete_tag(self, message: IncomingMessage) -> TextReply:
        tag = command_argument(message.text)
        if not tag.strip():
            return TextReply(chat_id=message.chat_id, text=MSG_DELETE_USAGE)

        try:
            await asyncio.to_thread(self._index.delete_tag, tag)
        except StoreError as exc:
            LOGGER.error("Failed to delete tag %r for %s: %s", tag, _sender_label(message), exc)
            return TextReply(chat_id=message.chat_id, text=MSG_DELETE_FAILED)

        LOGGER.info("%s deleted tag %r", _sender_label(message), tag)
        return TextReply(chat_id=message.chat_id, text=f"Successfully deleted tag: {tag}")
