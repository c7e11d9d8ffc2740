"""Static configuration for stickertag.

Non-secret settings (storage, inline answers, logging) live in a single JSON
file for quick edits without touching Python. Secrets come from the
environment (see client.py and app.py).
"""

import json
import os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where to store the SQLite tag index.
_storage = _CONFIG.get("storage", {})
DB_PATH = _resolve_path(_storage.get("path", "stickertag.db"))

# Inline answers: Telegram caps results at 50; cache_time is in seconds.
_inline = _CONFIG.get("inline", {})
INLINE_MAX_RESULTS = int(_inline.get("max_results", 50))
INLINE_CACHE_TIME = int(_inline.get("cache_time", 0))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
