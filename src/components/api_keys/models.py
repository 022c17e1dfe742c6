"""
API key registry models.

An API key record is a JSON object stored under its own key:

    {"key": str, "tenantId": str, "expires": <unix seconds>,
     "policies": [{"name": str, "config": object | null}, ...]}

Expired records are still served so clients can cache key information.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, StrictFloat, StrictInt, StrictStr, ValidationInfo, field_validator

AccessError = Literal["INVALID_ORIGIN", "INVALID_AUTH_KEY"]

GetApiKeyError = Literal["INVALID_KEY", "NOT_FOUND"]

PutApiKeyError = Literal[
    "INVALID_KEY",
    "INVALID_CONTENT_TYPE",
    "BODY_TOO_LARGE",
    "INVALID_JSON",
    "INVALID_OBJECT",
    "INVALID_API_KEY_INFO",
]

DeleteApiKeyError = Literal["INVALID_KEY"]

# Plain-text response body for each error code
ERROR_MESSAGES: dict[str, str] = {
    "INVALID_ORIGIN": "Invalid origin",
    "INVALID_AUTH_KEY": "Invalid auth key",
    "INVALID_KEY": "Invalid key",
    "NOT_FOUND": "Not found",
    "INVALID_CONTENT_TYPE": "Invalid content type",
    "BODY_TOO_LARGE": "Request body too large",
    "INVALID_JSON": "Invalid JSON",
    "INVALID_OBJECT": "Invalid Object",
    "INVALID_API_KEY_INFO": "Invalid ApiKeyInfo",
}

KEY_REGEX = re.compile(r"[a-zA-Z0-9]+")
ORIGIN_REGEX = re.compile(r"https?://[a-zA-Z0-9-]+(\.[a-zA-Z0-9-]+)*(:[0-9]+)?")

# Environment variable prefix for rotated secret auth keys
SECRET_AUTH_KEY_PREFIX = "SECRET_AUTH_KEY_"


@dataclass(frozen=True)
class ApiKeysConfig:
    """Size limits for keys, values and records."""

    key_min_size: int = 10
    key_max_size: int = 500
    value_max_size: int = 500
    id_min_size: int = 10
    id_max_size: int = 500
    policies_num_max: int = 1000
    cache_max_age: int = 3600


@dataclass(frozen=True)
class AccessPolicy:
    """Origins and auth keys allowed to modify the registry."""

    allowed_origins: tuple[str, ...] = ()
    auth_keys: tuple[str, ...] = ()


def _limits(info: ValidationInfo) -> ApiKeysConfig:
    return (info.context or {}).get("config") or ApiKeysConfig()


def _check_bounded_id(value: str, info: ValidationInfo) -> str:
    limits = _limits(info)
    if not limits.id_min_size < len(value) < limits.id_max_size:
        raise ValueError(
            f"length must be between {limits.id_min_size} and {limits.id_max_size} (exclusive)"
        )
    return value


class ApiKeyPolicy(BaseModel):
    """A named policy; ``config`` must be present but may be null."""

    name: StrictStr
    config: dict[str, Any] | list[Any] | None

    @field_validator("name")
    @classmethod
    def name_within_limits(cls, v: str, info: ValidationInfo) -> str:
        return _check_bounded_id(v, info)


class ApiKeyInfo(BaseModel):
    """A stored API key record. Unknown fields are kept as-is in storage."""

    key: StrictStr
    tenantId: StrictStr
    expires: StrictInt | StrictFloat
    policies: list[ApiKeyPolicy]

    @field_validator("key", "tenantId")
    @classmethod
    def id_within_limits(cls, v: str, info: ValidationInfo) -> str:
        return _check_bounded_id(v, info)

    @field_validator("policies")
    @classmethod
    def policy_count_within_limits(
        cls, v: list[ApiKeyPolicy], info: ValidationInfo
    ) -> list[ApiKeyPolicy]:
        if len(v) >= _limits(info).policies_num_max:
            raise ValueError("too many policies")
        return v
