"""
API key registry endpoints.

Endpoints under /api-keys/{key}:
- OPTIONS - CORS preflight
- GET - Stored record (public, cacheable)
- PUT - Create or overwrite a record (origin + auth key required)
- DELETE - Remove a record (origin + auth key required)

Browsers may omit Origin on GET, so only modifying methods are checked.
"""

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse

from src.adapters.sqlite_db import SQLiteKeyValueStore
from src.api.deps import get_access_policy, get_api_keys_config, get_kv_store
from src.components.api_keys import (
    ERROR_MESSAGES,
    AccessPolicy,
    ApiKeysConfig,
    check_write_access,
    delete_api_key,
    get_api_key,
    is_valid_key,
    put_api_key,
)
from src.core.result import Err

router = APIRouter()

WRITE_METHODS = ("PUT", "POST", "DELETE")

# Preflight answers are cached by browsers for one day
PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "same-site",
    "Access-Control-Allow-Methods": "GET, PUT, POST, DELETE",
    "Access-Control-Allow-Headers": "Authorization, Content-Type",
    "Access-Control-Max-Age": "86400",
}


def error_response(code: str, status_code: int = 400) -> PlainTextResponse:
    return PlainTextResponse(ERROR_MESSAGES[code], status_code=status_code)


@router.api_route(
    "/api-keys/{key:path}",
    methods=["GET", "PUT", "POST", "DELETE", "PATCH", "OPTIONS"],
)
async def api_key_endpoint(
    key: str,
    request: Request,
    store: SQLiteKeyValueStore = Depends(get_kv_store),
    policy: AccessPolicy = Depends(get_access_policy),
    config: ApiKeysConfig = Depends(get_api_keys_config),
) -> Response:
    method = request.method

    if method == "OPTIONS":
        return Response(headers=PREFLIGHT_HEADERS)

    if method in WRITE_METHODS:
        access = check_write_access(
            policy,
            request.headers.get("origin"),
            request.headers.get("authorization"),
        )
        if isinstance(access, Err):
            return error_response(access.error)

    if not is_valid_key(key, config):
        return error_response("INVALID_KEY")

    if method == "GET":
        got = get_api_key(key, store=store, config=config)
        cache_headers = {"Cache-Control": f"max-age={config.cache_max_age}"}
        if isinstance(got, Err):
            status_code = 404 if got.error == "NOT_FOUND" else 400
            response: Response = error_response(got.error, status_code)
            response.headers.update(cache_headers)
            return response
        return Response(got.value, media_type="application/json", headers=cache_headers)

    if method == "PUT":
        body = (await request.body()).decode("utf-8", errors="replace")
        put = put_api_key(
            key,
            request.headers.get("content-type"),
            body,
            store=store,
            config=config,
        )
        if isinstance(put, Err):
            return error_response(put.error)
        return PlainTextResponse("OK")

    if method == "DELETE":
        deleted = delete_api_key(key, store=store, config=config)
        if isinstance(deleted, Err):
            return error_response(deleted.error)
        return PlainTextResponse("OK")

    return PlainTextResponse("Invalid method", status_code=405)
