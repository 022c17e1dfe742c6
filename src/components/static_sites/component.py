"""
Static site server component.

Serves files for many hostnames out of one object store, falls back to
permanent redirects, and caches every produced response (404s included)
under the normalized URL.

Lookup order for GET:
1. Response cache
2. Object ``<hostname><normalized pathname>``
3. Redirect with the same key (301)
4. 404
"""

from __future__ import annotations

import hmac
import logging
from urllib.parse import unquote, urlsplit

from src.components.static_sites.models import SiteResponse, StaticSitesConfig
from src.components.static_sites.ports import (
    ObjectStorePort,
    RedirectLookupPort,
    ResponseCachePort,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = StaticSitesConfig()


# --- Pure Functions ---


def get_extension(path: str) -> str:
    """
    Everything from the first dot on.

    >>> get_extension("index.html")
    '.html'
    >>> get_extension("/")
    ''
    >>> get_extension(".")
    '.'
    """
    dot_index = path.find(".")
    if dot_index == -1:
        return ""
    return path[dot_index:]


def normalize_pathname(pathname: str, config: StaticSitesConfig = DEFAULT_CONFIG) -> str:
    """
    Map a request path onto an object path.

    - "" -> "/index.html"
    - "/docs/" -> "/docs/index.html"
    - "/docs" -> "/docs/index.html"
    - "/app.js" -> "/app.js"
    - "a.css" -> "/a.css"
    """
    index_name = config.index_name

    if pathname == "":
        return f"/{index_name}"

    has_leading_slash = pathname.startswith("/")
    has_trailing_slash = pathname.endswith("/")
    has_extension = not has_trailing_slash and get_extension(pathname) != ""

    tail = ""
    if has_trailing_slash:
        tail = index_name
    elif not has_extension:
        tail = f"/{index_name}"

    return f"{'' if has_leading_slash else '/'}{pathname}{tail}"


def get_cache_control(pathname: str, config: StaticSitesConfig = DEFAULT_CONFIG) -> str:
    """Cache-Control for a served path: content is cached shorter than assets."""
    if get_extension(pathname) in config.content_extensions:
        return f"public, max-age={config.cache_content}"
    return f"public, max-age={config.cache_assets}"


def resolve_origin(
    request_origin: str,
    cookie_value: str | None,
) -> str:
    """
    Origin to serve for.

    A ``__Host-hostname`` cookie overrides the request host; a malformed
    cookie value is ignored.
    """
    if cookie_value:
        try:
            parts = urlsplit(f"https://{unquote(cookie_value)}")
        except ValueError:
            return request_origin
        if parts.hostname and not parts.path and not parts.query:
            return f"https://{parts.netloc}"
    return request_origin


def get_cache_key(origin: str, pathname: str, config: StaticSitesConfig = DEFAULT_CONFIG) -> str:
    return f"{origin}{normalize_pathname(pathname, config)}"


def not_found_response(config: StaticSitesConfig = DEFAULT_CONFIG) -> SiteResponse:
    return SiteResponse(
        status_code=404,
        body=b"Not found",
        headers={
            "Content-Type": "text/plain; charset=utf-8",
            "Cache-Control": f"public, max-age={config.cache_not_found}",
        },
    )


def redirect_response(target: str, config: StaticSitesConfig = DEFAULT_CONFIG) -> SiteResponse:
    return SiteResponse(
        status_code=301,
        headers={
            "Location": target,
            "Cache-Control": get_cache_control(target, config),
        },
    )


def is_purge_authorized(purge_token: str | None, authorization: str | None) -> bool:
    """PURGE requires a configured token presented as ``Bearer <token>``."""
    if not purge_token or not authorization:
        return False
    return hmac.compare_digest(authorization, f"Bearer {purge_token}")


# --- Operations ---


def serve(
    origin: str,
    pathname: str,
    *,
    objects: ObjectStorePort,
    redirects: RedirectLookupPort,
    cache: ResponseCachePort,
    config: StaticSitesConfig = DEFAULT_CONFIG,
) -> SiteResponse:
    """
    Serve a GET for ``pathname`` on ``origin``.

    Args:
        origin: ``scheme://host[:port]`` the request is served for
        pathname: Raw request path
        objects: Site file store
        redirects: Redirect table
        cache: Response cache

    Returns:
        SiteResponse (cached for subsequent requests)
    """
    cache_key = get_cache_key(origin, pathname, config)
    cached = cache.match(cache_key)
    if cached is not None:
        return cached

    normalized = normalize_pathname(pathname, config)
    hostname = urlsplit(origin).hostname or ""
    filepath = f"{hostname}{normalized}"

    obj = objects.get(filepath)
    if obj is not None:
        response = SiteResponse(
            status_code=200,
            body=obj.body,
            headers={
                "Content-Type": obj.content_type,
                "ETag": obj.etag,
                "Cache-Control": get_cache_control(normalized, config),
            },
        )
    else:
        target = redirects.get(filepath)
        if target:
            response = redirect_response(target, config)
        else:
            response = not_found_response(config)

    cache.put(cache_key, response)
    return response


def purge(
    origin: str,
    pathname: str,
    *,
    cache: ResponseCachePort,
    config: StaticSitesConfig = DEFAULT_CONFIG,
) -> SiteResponse:
    """Drop the cached response for a URL."""
    cache_key = get_cache_key(origin, pathname, config)
    existed = cache.delete(cache_key)
    logger.info("Purged %s (cached=%s)", cache_key, existed)
    return SiteResponse(
        status_code=200,
        body=b"Purged",
        headers={"Content-Type": "text/plain; charset=utf-8"},
    )
