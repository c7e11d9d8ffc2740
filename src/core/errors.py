"""Typed failures shared by the core and its adapters."""

from __future__ import annotations


class StoreError(Exception):
    """The tag store could not complete an operation (I/O, corruption)."""
