"""
API key registry component.

Validation predicates and get / put / delete over a key-value store.
Writes are gated by an Origin allow-list and a shared auth key; reads
are public and cacheable.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from src.components.api_keys.models import (
    KEY_REGEX,
    ORIGIN_REGEX,
    SECRET_AUTH_KEY_PREFIX,
    AccessError,
    AccessPolicy,
    ApiKeyInfo,
    ApiKeyPolicy,
    ApiKeysConfig,
    DeleteApiKeyError,
    GetApiKeyError,
    PutApiKeyError,
)
from src.components.api_keys.ports import KeyValueStorePort
from src.core.result import Err, Ok, Result

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = ApiKeysConfig()


# --- Predicates ---


def is_alphanumeric(value: str) -> bool:
    return KEY_REGEX.fullmatch(value) is not None


def is_valid_key(value: str, config: ApiKeysConfig = DEFAULT_CONFIG) -> bool:
    """Key length within limits and only ASCII letters and digits."""
    return config.key_min_size <= len(value) <= config.key_max_size and is_alphanumeric(value)


def is_origin(value: str) -> bool:
    """``scheme://host[:port]`` with no path."""
    return ORIGIN_REGEX.fullmatch(value) is not None


def _validates(model: type[BaseModel], value: Any, config: ApiKeysConfig) -> bool:
    try:
        model.model_validate(value, context={"config": config})
    except ValidationError:
        return False
    return True


def is_api_key_policy(value: Any, config: ApiKeysConfig = DEFAULT_CONFIG) -> bool:
    """A policy has a bounded ``name`` and a ``config`` object (null allowed)."""
    return _validates(ApiKeyPolicy, value, config)


def is_api_key_info(value: Any, config: ApiKeysConfig = DEFAULT_CONFIG) -> bool:
    """Validate a full API key record."""
    return _validates(ApiKeyInfo, value, config)


# --- Access ---


def get_auth_keys(env: Mapping[str, str]) -> list[str]:
    """
    Auth keys allowed to modify the registry.

    ``ALLOWED_AUTH_KEYS`` (comma separated, non-production only) plus the
    value of every ``SECRET_AUTH_KEY_*`` variable. Without
    ``ALLOWED_AUTH_KEYS`` no key is accepted.
    """
    allowed = env.get("ALLOWED_AUTH_KEYS")
    if allowed is None:
        return []

    auth_keys = allowed.split(",")
    for name, value in env.items():
        if name.startswith(SECRET_AUTH_KEY_PREFIX):
            auth_keys.append(value)

    return [k for k in auth_keys if is_alphanumeric(k)]


def get_allowed_origins(env: Mapping[str, str]) -> list[str]:
    """Origins from ``ALLOWED_ORIGINS`` (comma separated), malformed ones dropped."""
    allowed = env.get("ALLOWED_ORIGINS")
    if allowed is None:
        return []
    return [o for o in allowed.split(",") if is_origin(o)]


def load_access_policy(env: Mapping[str, str]) -> AccessPolicy:
    return AccessPolicy(
        allowed_origins=tuple(get_allowed_origins(env)),
        auth_keys=tuple(get_auth_keys(env)),
    )


def check_write_access(
    policy: AccessPolicy,
    origin: str | None,
    authorization: str | None,
) -> Result[None, AccessError]:
    """Origin must be allow-listed and Authorization must be a known auth key."""
    if not origin or origin not in policy.allowed_origins:
        return Err("INVALID_ORIGIN")
    if not authorization or authorization not in policy.auth_keys:
        return Err("INVALID_AUTH_KEY")
    return Ok(None)


# --- Operations ---


def get_api_key(
    key: str,
    *,
    store: KeyValueStorePort,
    config: ApiKeysConfig = DEFAULT_CONFIG,
) -> Result[str, GetApiKeyError]:
    """Return the stored JSON for ``key``."""
    if not is_valid_key(key, config):
        return Err("INVALID_KEY")

    value = store.get(key)
    if not value:
        return Err("NOT_FOUND")
    return Ok(value)


def put_api_key(
    key: str,
    content_type: str | None,
    body: str,
    *,
    store: KeyValueStorePort,
    config: ApiKeysConfig = DEFAULT_CONFIG,
) -> Result[None, PutApiKeyError]:
    """
    Create or overwrite the record for ``key``.

    The ``key`` field of the body is always replaced by the path key.
    """
    if not is_valid_key(key, config):
        return Err("INVALID_KEY")

    if content_type != "application/json":
        return Err("INVALID_CONTENT_TYPE")

    if len(body) > config.value_max_size:
        return Err("BODY_TOO_LARGE")

    try:
        value = json.loads(body)
    except json.JSONDecodeError:
        return Err("INVALID_JSON")

    if not isinstance(value, dict):
        return Err("INVALID_OBJECT")

    value["key"] = key

    if not is_api_key_info(value, config):
        return Err("INVALID_API_KEY_INFO")

    store.put(key, json.dumps(value, separators=(",", ":")))
    logger.info("API key stored: tenant=%s", value["tenantId"])
    return Ok(None)


def delete_api_key(
    key: str,
    *,
    store: KeyValueStorePort,
    config: ApiKeysConfig = DEFAULT_CONFIG,
) -> Result[None, DeleteApiKeyError]:
    if not is_valid_key(key, config):
        return Err("INVALID_KEY")

    store.delete(key)
    logger.info("API key deleted")
    return Ok(None)
