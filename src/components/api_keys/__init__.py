"""
API key registry component.

Origin- and auth-key-gated CRUD over client-defined API key records.
"""

from src.components.api_keys.component import (
    check_write_access,
    delete_api_key,
    get_allowed_origins,
    get_api_key,
    get_auth_keys,
    is_api_key_info,
    is_api_key_policy,
    is_origin,
    is_valid_key,
    load_access_policy,
    put_api_key,
)
from src.components.api_keys.models import (
    ERROR_MESSAGES,
    AccessError,
    AccessPolicy,
    ApiKeysConfig,
    DeleteApiKeyError,
    GetApiKeyError,
    PutApiKeyError,
)
from src.components.api_keys.ports import KeyValueStorePort

__all__ = [
    # Operations
    "get_api_key",
    "put_api_key",
    "delete_api_key",
    "check_write_access",
    "load_access_policy",
    # Predicates
    "is_valid_key",
    "is_origin",
    "is_api_key_policy",
    "is_api_key_info",
    "get_auth_keys",
    "get_allowed_origins",
    # Models
    "ERROR_MESSAGES",
    "AccessError",
    "AccessPolicy",
    "ApiKeysConfig",
    "GetApiKeyError",
    "PutApiKeyError",
    "DeleteApiKeyError",
    # Ports
    "KeyValueStorePort",
]
