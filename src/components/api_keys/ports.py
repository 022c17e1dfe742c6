"""
API key registry ports.
"""

from __future__ import annotations

from typing import Protocol


class KeyValueStorePort(Protocol):
    """String key-value store (one namespace per store instance)."""

    def get(self, key: str) -> str | None:
        """Get value by key, None if absent."""
        ...

    def put(self, key: str, value: str) -> None:
        """Create or overwrite a value."""
        ...

    def delete(self, key: str) -> None:
        """Delete a key (no-op if absent)."""
        ...
