"""Allow-list authorization adapter.

Satisfies the core AuthorizerPort from a comma-separated list of user ids.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, Optional

LOGGER = logging.getLogger(__name__)


def parse_user_ids(raw: Optional[str]) -> FrozenSet[int]:
    """Parse "123,456" into user ids, skipping entries that are not integers."""

    user_ids: set[int] = set()
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        try:
            user_ids.add(int(part))
        except ValueError:
            LOGGER.warning("Ignoring invalid user id in AUTHORIZED_USERS: %r", part)
    return frozenset(user_ids)


class AllowList:
    """Authorize the listed users; an empty list authorizes everyone."""

    def __init__(self, user_ids: Iterable[int]) -> None:
        self._user_ids = frozenset(user_ids)

    @classmethod
    def from_env_value(cls, raw: Optional[str]) -> "AllowList":
        return cls(parse_user_ids(raw))

    @property
    def restricted(self) -> bool:
        return bool(self._user_ids)

    def is_authorized(self, user_id: Optional[int]) -> bool:
        if not self._user_ids:
            return True
        return user_id in self._user_ids
