"""
Storage error types shared by repository adapters.

Repositories raise these instead of driver-specific exceptions so the
functional core can recognise the one failure it reconciles (a duplicate
unique key on insert) without importing a database driver.
"""

from __future__ import annotations


class StorageError(Exception):
    """Base class for recognised storage failures."""


class UniqueConstraintError(StorageError):
    """An insert collided with an existing row on a unique key."""

    def __init__(self, table: str, detail: str = "") -> None:
        self.table = table
        self.detail = detail
        super().__init__(f"UNIQUE constraint failed on {table}: {detail}".rstrip(": "))
