"""Telegram delivery adapter for dialogue replies and inline answers."""

from __future__ import annotations

import logging
from typing import Any

from telethon import utils

from core.models import InlineAnswer, TextReply

LOGGER = logging.getLogger(__name__)


class TelegramResponder:
    """Sends core outbound actions through a Telethon client."""

    def __init__(self, client, cache_time: int = 0) -> None:
        self._client = client
        self._cache_time = cache_time

    async def send_reply(self, reply: TextReply) -> None:
        await self._client.send_message(reply.chat_id, reply.text)

    async def answer_inline(self, event: Any, answer: InlineAnswer) -> None:
        """Answer an inline query with cached sticker results in order."""

        builder = event.builder
        results = []
        for result in answer.results:
            document = utils.resolve_bot_file_id(result.sticker_ref)
            if document is None:
                # Refs are opaque to the core; skip anything we cannot decode.
                LOGGER.warning("Skipping undecodable sticker ref %r", result.sticker_ref)
                continue
            results.append(await builder.document(document, type="sticker", id=result.result_id))

        if not results:
            return
        await event.answer(results, cache_time=self._cache_time)
