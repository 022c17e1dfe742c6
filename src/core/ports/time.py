"""
Clock interface.

All stored timestamps are timezone-aware UTC. Components never call
``datetime.now`` directly; a clock is injected so tests can pin time.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class ClockPort(Protocol):
    """Source of the current time."""

    def now_utc(self) -> datetime:
        """Get current UTC time (timezone-aware)."""
        ...


class IdGeneratorPort(Protocol):
    """Source of random opaque identifiers."""

    def generate(self, length: int) -> str:
        """Return a random identifier of exactly ``length`` characters."""
        ...
