"""
Static site server models.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class StaticSitesConfig:
    """Index document and cache lifetimes (seconds)."""

    index_name: str = "index.html"
    # HTML files are content, anything else is an asset of content
    content_extensions: tuple[str, ...] = (".html",)
    cache_content: int = 3600
    # Assets outlive the content that references them
    cache_assets: int = 7200
    cache_not_found: int = 3600
    hostname_cookie: str = "__Host-hostname"


@dataclass(frozen=True)
class StoredObject:
    """Object bytes plus the HTTP metadata stored with them."""

    body: bytes
    content_type: str
    etag: str


@dataclass(frozen=True)
class SiteResponse:
    """Transport-neutral response produced by the site server."""

    status_code: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
