from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from telethon import utils
from telethon.tl.types import Document, DocumentAttributeSticker, InputStickerSetEmpty

from adapters.telegram_mapper import build_inline_query, build_message
from adapters.telegram_responder import TelegramResponder
from core.models import InlineAnswer, InlineResult, TextReply


def _sticker_document() -> Document:
    return Document(
        id=1234567890,
        access_hash=987654321,
        file_reference=b"",
        date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        mime_type="image/webp",
        size=1024,
        dc_id=2,
        attributes=[DocumentAttributeSticker(alt="cat", stickerset=InputStickerSetEmpty())],
    )


class DummySender:
    def __init__(self, username: "str | None" = None, first_name: "str | None" = None) -> None:
        self.username = username
        self.first_name = first_name
        self.last_name = None


class DummyMessage:
    def __init__(self, *, text: "str | None", sticker=None, sender=None) -> None:
        self.sender_id = 42
        self.chat_id = 4242
        self.raw_text = text
        self.sticker = sticker
        self.sender = sender


class DummyQuery:
    def __init__(self, query_id: int) -> None:
        self.query_id = query_id


class DummyBuilder:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    async def document(self, file, *, type: str, id: str):
        self.calls.append((file, type, id))
        return ("result", id)


class DummyInlineEvent:
    def __init__(self, text: str) -> None:
        self.query = DummyQuery(99)
        self.sender_id = 42
        self.text = text
        self.builder = DummyBuilder()
        self.answered: "list | None" = None
        self.cache_time: "int | None" = None

    async def answer(self, results, cache_time: int = 0) -> None:
        self.answered = results
        self.cache_time = cache_time


class DummyClient:
    def __init__(self) -> None:
        self.sent: list[tuple[int, str]] = []

    async def send_message(self, entity, message) -> None:
        self.sent.append((entity, message))


def test_build_message_text_only() -> None:
    message = build_message(DummyMessage(text="cat", sender=DummySender(username="alice")))
    assert message.user_id == 42
    assert message.chat_id == 4242
    assert message.text == "cat"
    assert message.sticker_ref is None
    assert message.sender_name == "@alice"


def test_build_message_sticker_has_packed_ref() -> None:
    document = _sticker_document()
    message = build_message(DummyMessage(text=None, sticker=document, sender=DummySender(first_name="Bob")))

    assert message.text == ""
    assert message.sticker_ref == utils.pack_bot_file_id(document)
    assert message.sender_name == "Bob"

    resolved = utils.resolve_bot_file_id(message.sticker_ref)
    assert resolved.id == document.id
    assert resolved.access_hash == document.access_hash


def test_build_inline_query() -> None:
    query = build_inline_query(DummyInlineEvent("cat"))
    assert query.query_id == 99
    assert query.user_id == 42
    assert query.text == "cat"


def test_send_reply_uses_chat_id() -> None:
    client = DummyClient()
    asyncio.run(TelegramResponder(client).send_reply(TextReply(chat_id=4242, text="Added tag cat")))
    assert client.sent == [(4242, "Added tag cat")]


def test_answer_inline_keeps_order_and_ids() -> None:
    ref = utils.pack_bot_file_id(_sticker_document())
    event = DummyInlineEvent("cat")
    answer = InlineAnswer(
        query_id=99,
        results=(InlineResult(result_id="1", sticker_ref=ref), InlineResult(result_id="2", sticker_ref=ref)),
    )

    asyncio.run(TelegramResponder(DummyClient(), cache_time=30).answer_inline(event, answer))

    assert event.answered == [("result", "1"), ("result", "2")]
    assert event.cache_time == 30
    assert [call[1] for call in event.builder.calls] == ["sticker", "sticker"]
    assert event.builder.calls[0][0].id == 1234567890


def test_answer_inline_skips_undecodable_refs() -> None:
    ref = utils.pack_bot_file_id(_sticker_document())
    event = DummyInlineEvent("cat")
    answer = InlineAnswer(
        query_id=99,
        results=(InlineResult(result_id="1", sticker_ref="%%%%"), InlineResult(result_id="2", sticker_ref=ref)),
    )

    asyncio.run(TelegramResponder(DummyClient()).answer_inline(event, answer))

    assert event.answered == [("result", "2")]


def test_answer_inline_sends_nothing_when_no_ref_decodes() -> None:
    event = DummyInlineEvent("cat")
    answer = InlineAnswer(query_id=99, results=(InlineResult(result_id="1", sticker_ref="%%%%"),))

    asyncio.run(TelegramResponder(DummyClient()).answer_inline(event, answer))

    assert event.answered is None
    assert event.builder.calls == []
