"""
Token lifecycle component.

Single-use, expiring tokens per (subscription, purpose).
"""

from src.components.tokens.component import consume_token, is_reusable, issue_token
from src.components.tokens.models import (
    DEFAULT_TOKEN_EXPIRES_IN,
    ConsumeTokenError,
    IssueTokenError,
    TokenConfig,
)
from src.components.tokens.ports import TokenRepoPort

__all__ = [
    # Operations
    "issue_token",
    "consume_token",
    "is_reusable",
    # Models
    "DEFAULT_TOKEN_EXPIRES_IN",
    "ConsumeTokenError",
    "IssueTokenError",
    "TokenConfig",
    # Ports
    "TokenRepoPort",
]
