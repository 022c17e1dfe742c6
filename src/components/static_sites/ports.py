"""
Static site server ports.
"""

from __future__ import annotations

from typing import Protocol

from src.components.static_sites.models import SiteResponse, StoredObject


class ObjectStorePort(Protocol):
    """Site files keyed by ``<hostname><pathname>``."""

    def get(self, key: str) -> StoredObject | None:
        """Get an object, None if absent."""
        ...


class RedirectLookupPort(Protocol):
    """Permanent redirects keyed like objects."""

    def get(self, source: str) -> str | None:
        """Get redirect target for a source key, None if absent."""
        ...


class ResponseCachePort(Protocol):
    """Cache of produced responses keyed by normalized URL."""

    def match(self, key: str) -> SiteResponse | None:
        ...

    def put(self, key: str, response: SiteResponse) -> None:
        ...

    def delete(self, key: str) -> bool:
        """Remove an entry. Returns True if one existed."""
        ...
