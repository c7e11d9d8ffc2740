"""Tag index: normalized tag -> ordered, deduplicated sticker refs (core domain).

The index is the only component that opens transactions on the tag store.
Every read and write normalizes the tag first so visually identical tags typed
with different Unicode representations land on the same key.
"""

from __future__ import annotations

import logging
import unicodedata
from typing import List, Tuple

from core.ports import TagStorePort
from core.tag_codec import decode_entry, encode_entry

LOGGER = logging.getLogger(__name__)


def normalize_tag(tag: str) -> str:
    """Return the canonical (NFC) form of a tag.

    Case and surrounding whitespace are preserved on purpose; only the Unicode
    composition is unified.
    """

    return unicodedata.normalize("NFC", tag)


class TagIndex:
    """Add, delete and look up stickers by tag on top of a TagStorePort."""

    def __init__(self, store: TagStorePort) -> None:
        self._store = store

    def add_sticker(self, tag: str, sticker_ref: str) -> bool:
        """Append a sticker to a tag in one transaction.

        Returns False when the sticker was already stored under the tag (the
        entry is left unchanged). Raises StoreError if the transaction fails.
        """

        key = normalize_tag(tag)
        with self._store.transaction() as txn:
            payload = txn.get(key)
            stickers = decode_entry(payload) if payload is not None else []
            if sticker_ref in stickers:
                LOGGER.debug("Sticker already tagged with %r", key)
                return False
            stickers.append(sticker_ref)
            txn.set(key, encode_entry(stickers))
        LOGGER.info("Tagged sticker with %r (%s total)", key, len(stickers))
        return True

    def delete_tag(self, tag: str) -> None:
        """Remove a tag and all its stickers; deleting an absent tag is a no-op."""

        key = normalize_tag(tag)
        with self._store.transaction() as txn:
            txn.delete(key)
        LOGGER.info("Deleted tag %r", key)

    def lookup(self, tag: str) -> List[str]:
        """Return the stickers for a tag in insertion order ([] when absent)."""

        key = normalize_tag(tag)
        with self._store.transaction() as txn:
            payload = txn.get(key)
        if payload is None:
            return []
        return decode_entry(payload)

    def list_tags(self) -> List[Tuple[str, int]]:
        """Return every stored tag with its sticker count, sorted by tag."""

        return sorted(
            (key, len(decode_entry(payload))) for key, payload in self._store.iter_entries()
        )
