"""Serialization of a tag entry (ordered sticker refs) for the tag store."""

from __future__ import annotations

import json
from typing import Iterable, List

from core.errors import StoreError


def encode_entry(sticker_refs: Iterable[str]) -> bytes:
    """Encode sticker refs as a UTF-8 JSON array.

    JSON escaping keeps separators and quotes inside a ref intact.
    """

    return json.dumps(list(sticker_refs), ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def decode_entry(payload: bytes) -> List[str]:
    """Decode a stored entry, raising StoreError if it is not a list of strings."""

    try:
        value = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise StoreError(f"Corrupt tag entry: {exc}") from exc

    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise StoreError("Corrupt tag entry: expected a JSON array of strings")
    return value
