"""
Static site server component.

Multi-tenant static file serving with redirects and cache purge.
"""

from src.components.static_sites.component import (
    get_cache_control,
    get_cache_key,
    get_extension,
    is_purge_authorized,
    normalize_pathname,
    not_found_response,
    purge,
    redirect_response,
    resolve_origin,
    serve,
)
from src.components.static_sites.models import SiteResponse, StaticSitesConfig, StoredObject
from src.components.static_sites.ports import (
    ObjectStorePort,
    RedirectLookupPort,
    ResponseCachePort,
)

__all__ = [
    # Operations
    "serve",
    "purge",
    # Pure functions
    "get_extension",
    "normalize_pathname",
    "get_cache_control",
    "get_cache_key",
    "resolve_origin",
    "is_purge_authorized",
    "not_found_response",
    "redirect_response",
    # Models
    "SiteResponse",
    "StaticSitesConfig",
    "StoredObject",
    # Ports
    "ObjectStorePort",
    "RedirectLookupPort",
    "ResponseCachePort",
]
