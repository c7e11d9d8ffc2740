"""Ports (interfaces) used by the core.

Ports define the minimal contracts for storage and authorization adapters so
that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import ContextManager, List, Optional, Protocol, Tuple


class TagTransactionPort(Protocol):
    """Key-value operations available inside one atomic transaction."""

    def get(self, key: str) -> Optional[bytes]:
        ...

    def set(self, key: str, value: bytes) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class TagStorePort(Protocol):
    """Transactional key-value store backing the tag index.

    Every method raises core.errors.StoreError on failure. A transaction that
    exits with an exception is rolled back.
    """

    def transaction(self) -> ContextManager[TagTransactionPort]:
        ...

    def iter_entries(self) -> List[Tuple[str, bytes]]:
        ...


class AuthorizerPort(Protocol):
    """Decides whether a Telegram user may use the bot."""

    def is_authorized(self, user_id: Optional[int]) -> bool:
        ...
