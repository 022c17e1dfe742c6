"""
In-process response cache for the static site server.

Entries expire after the max-age in their own Cache-Control header and
the cache holds at most ``max_entries`` responses, evicting the least
recently used. Responses without a max-age are not stored. PURGE drops an
entry early.
"""

from __future__ import annotations

import re
from collections import OrderedDict
from datetime import datetime, timedelta

from src.adapters.clock import SystemClock
from src.components.static_sites.models import SiteResponse
from src.core.ports.time import ClockPort

MAX_AGE_REGEX = re.compile(r"max-age=(\d+)")

DEFAULT_MAX_ENTRIES = 1024


def get_max_age(response: SiteResponse) -> int | None:
    """Seconds from the response's Cache-Control max-age, None if absent."""
    for name, value in response.headers.items():
        if name.lower() == "cache-control":
            match = MAX_AGE_REGEX.search(value)
            return int(match.group(1)) if match else None
    return None


class InMemoryResponseCache:
    """ResponseCachePort backed by a bounded, expiring LRU dict."""

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: ClockPort | None = None,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._clock = clock or SystemClock()
        self._entries: OrderedDict[str, tuple[datetime, SiteResponse]] = OrderedDict()

    def match(self, key: str) -> SiteResponse | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, response = entry
        if self._clock.now_utc() >= expires_at:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return response

    def put(self, key: str, response: SiteResponse) -> None:
        max_age = get_max_age(response)
        if not max_age:
            self._entries.pop(key, None)
            return

        self._entries[key] = (self._clock.now_utc() + timedelta(seconds=max_age), response)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
