"""Application entry point for the stickertag bot."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from telethon import events
import settings
from adapters.authorization import AllowList
from adapters.sqlite_store import SQLiteTagStore
from adapters.telegram_mapper import build_inline_query, build_message
from adapters.telegram_responder import TelegramResponder
from client import bot_token, build_client
from core.config import TELEGRAM_INLINE_LIMIT, DialogueConfig
from core.conversation import ConversationStateMachine
from core.dialogue import DialogueController
from core.errors import StoreError
from core.ports import AuthorizerPort
from core.tag_index import TagIndex

NAME = "STICKERTAG"
FONT = "tarty-1"

LOGGER = logging.getLogger(__name__)


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/stickertag.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _is_authorized(authorizer: AuthorizerPort, user_id: Optional[int], kind: str) -> bool:
    if authorizer.is_authorized(user_id):
        return True
    LOGGER.debug("Dropping %s from unauthorized user %s", kind, user_id)
    return False


def _dialogue_config(max_inline_results: int) -> DialogueConfig:
    # Telegram rejects the whole answer when it carries too many results.
    return DialogueConfig(max_inline_results=max(1, min(max_inline_results, TELEGRAM_INLINE_LIMIT)))


async def _handle_message(
    authorizer: AuthorizerPort,
    controller: DialogueController,
    responder: TelegramResponder,
    event,
) -> None:
    """Gate, process and answer one private message event."""

    if not _is_authorized(authorizer, event.sender_id, "message"):
        return
    reply = await controller.handle_message(build_message(event.message))
    if reply is not None:
        await responder.send_reply(reply)


async def _handle_inline_query(
    authorizer: AuthorizerPort,
    controller: DialogueController,
    responder: TelegramResponder,
    event,
) -> None:
    """Gate, look up and answer one inline query event."""

    if not _is_authorized(authorizer, event.sender_id, "inline query"):
        return
    answer = await controller.handle_inline_query(build_inline_query(event))
    if answer is not None:
        await responder.answer_inline(event, answer)


def _run() -> None:
    _print_banner()
    load_dotenv()
    _configure_logging()

    LOGGER.info("Starting stickertag")

    # The store is opened once for the whole process and closed on shutdown.
    store = SQLiteTagStore(settings.DB_PATH)
    store.open()

    controller = DialogueController(
        index=TagIndex(store),
        conversation=ConversationStateMachine(),
        config=_dialogue_config(settings.INLINE_MAX_RESULTS),
    )

    allow_list = AllowList.from_env_value(os.getenv("AUTHORIZED_USERS"))
    if allow_list.restricted:
        LOGGER.info("Access restricted to AUTHORIZED_USERS")
    else:
        LOGGER.info("AUTHORIZED_USERS is empty, authorizing all users")

    client = build_client()
    responder = TelegramResponder(client, cache_time=settings.INLINE_CACHE_TIME)

    # Tagging is a private conversation; group chatter never reaches the core.
    @client.on(events.NewMessage(incoming=True, func=lambda e: e.is_private))
    async def message_handler(event) -> None:
        try:
            await _handle_message(allow_list, controller, responder, event)
        except Exception:
            LOGGER.exception("Error while handling message")

    @client.on(events.InlineQuery)
    async def inline_handler(event) -> None:
        try:
            await _handle_inline_query(allow_list, controller, responder, event)
        except Exception:
            LOGGER.exception("Error while answering inline query")

    # Explicit lifecycle management makes start/shutdown behavior obvious.
    try:
        client.start(bot_token=bot_token())
        LOGGER.info("Bot connected. Listening for messages and inline queries...")
        client.run_until_disconnected()
    finally:
        store.close()


def _show_tags(db_path: str, tag: Optional[str]) -> int:
    """Print the tag index (or one tag's stickers); returns the exit code."""

    store = SQLiteTagStore(db_path)
    try:
        store.open()
        index = TagIndex(store)
        if tag is None:
            entries = index.list_tags()
            if not entries:
                print("No tags stored.")
                return 0
            for index_tag, count in entries:
                print(f"{index_tag} | {count} sticker(s)")
            return 0

        stickers = index.lookup(tag)
        if not stickers:
            print(f"No stickers tagged with {tag!r}.")
            return 0
        for position, sticker_ref in enumerate(stickers, start=1):
            print(f"{position}. {sticker_ref}")
        return 0
    except StoreError as exc:
        print(f"Failed to read the tag index: {exc}", file=sys.stderr)
        return 1
    finally:
        store.close()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="stickertag")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the bot")
    tags_parser = subparsers.add_parser(
        "tags",
        help="List stored tags, or the stickers under one tag.",
    )
    tags_parser.add_argument("tag", nargs="?", help="Show the stickers for this tag")

    args = parser.parse_args(argv)
    if args.command == "tags":
        raise SystemExit(_show_tags(settings.DB_PATH, args.tag))
    _run()


if __name__ == "__main__":
    main()
