"""
Static site endpoints.

Catch-all for every path not claimed by another router:
- GET - Serve the site file, a redirect or 404 (all cached)
- PURGE - Drop the cached response (Bearer token required)
"""

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse

from src.adapters.fs.filestore import FileSystemStore
from src.adapters.response_cache import InMemoryResponseCache
from src.adapters.sqlite_db import SQLiteSiteRedirectRepo
from src.api.deps import (
    get_object_store,
    get_purge_token,
    get_response_cache,
    get_site_redirects,
    get_static_sites_config,
)
from src.components.static_sites import (
    SiteResponse,
    StaticSitesConfig,
    is_purge_authorized,
    purge,
    resolve_origin,
    serve,
)

router = APIRouter()


def to_response(site_response: SiteResponse) -> Response:
    return Response(
        content=site_response.body,
        status_code=site_response.status_code,
        headers=site_response.headers,
    )


@router.api_route(
    "/{path:path}",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "PURGE"],
    include_in_schema=False,
)
async def static_site_endpoint(
    request: Request,
    objects: FileSystemStore = Depends(get_object_store),
    redirects: SQLiteSiteRedirectRepo = Depends(get_site_redirects),
    cache: InMemoryResponseCache = Depends(get_response_cache),
    config: StaticSitesConfig = Depends(get_static_sites_config),
    purge_token: str | None = Depends(get_purge_token),
) -> Response:
    """Serve a file of the site addressed by the request host."""
    request_origin = f"{request.url.scheme}://{request.url.netloc}"
    origin = resolve_origin(request_origin, request.cookies.get(config.hostname_cookie))
    pathname = request.url.path

    if request.method == "PURGE" and is_purge_authorized(
        purge_token, request.headers.get("authorization")
    ):
        return to_response(purge(origin, pathname, cache=cache, config=config))

    if request.method != "GET":
        return PlainTextResponse("Method not allowed", status_code=405)

    return to_response(
        serve(origin, pathname, objects=objects, redirects=redirects, cache=cache, config=config)
    )
