"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

# Telegram rejects inline answers with more than 50 results.
TELEGRAM_INLINE_LIMIT = 50


@dataclass(frozen=True)
class DialogueConfig:
    """Dialogue settings consumed by the controller."""

    max_inline_results: int = TELEGRAM_INLINE_LIMIT
