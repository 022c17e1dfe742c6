"""
Token lifecycle models.

Error codes are closed string sets; callers match on them exhaustively.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Literal

from src.core.ids import TOKEN_ID_LENGTH

IssueTokenError = Literal["EXISTING_UNEXPIRED_TOKEN"]

ConsumeTokenError = Literal["TOKEN_NOT_FOUND", "TOKEN_EXPIRED"]

# Validity window of a freshly issued token
DEFAULT_TOKEN_EXPIRES_IN = timedelta(hours=2)


@dataclass(frozen=True)
class TokenConfig:
    """Token issuance configuration."""

    expires_in: timedelta = DEFAULT_TOKEN_EXPIRES_IN
    id_length: int = TOKEN_ID_LENGTH

    @property
    def reuse_threshold(self) -> timedelta:
        """Remaining lifetime above which an existing token blocks reissue."""
        return self.expires_in / 2
