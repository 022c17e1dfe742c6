"""
Token component ports.
"""

from __future__ import annotations

from typing import Protocol

from src.core.entities import SubscriptionToken, TokenType


class TokenRepoPort(Protocol):
    """Durable store of subscription tokens keyed by token id."""

    def get(self, token_id: str) -> SubscriptionToken | None:
        """Get token by id."""
        ...

    def list_for_subscription(
        self,
        subscription_id: str,
        token_type: TokenType,
    ) -> list[SubscriptionToken]:
        """All tokens of one purpose belonging to one subscription."""
        ...

    def insert(self, token: SubscriptionToken) -> None:
        """Insert a new token record."""
        ...

    def delete(self, token_id: str) -> None:
        """Delete a token by id (no-op if absent)."""
        ...
