"""
Newsletter component ports.

Protocol interfaces for the stores the subscription state machine uses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.core.entities import HostnameConfig, ListConfig, Subscription


class SubscriptionRepoPort(Protocol):
    """
    Subscription repository interface.

    The (email, hostname, list_name) triple is unique; ``insert`` raises
    ``UniqueConstraintError`` when it is already taken.
    """

    def insert(self, subscription: Subscription) -> None:
        """Insert a new subscription row."""
        ...

    def get_by_id(self, subscription_id: str) -> Subscription | None:
        """Get subscription by id."""
        ...

    def get_by_unique_values(
        self,
        email: str,
        hostname: str,
        list_name: str,
    ) -> Subscription | None:
        """Get subscription by its unique triple."""
        ...

    def set_unsubscribed_at(self, subscription_id: str, unsubscribed_at: datetime | None) -> None:
        """Set or clear the unsubscribe timestamp."""
        ...

    def set_email_confirmed_at(self, subscription_id: str, email_confirmed_at: datetime) -> None:
        """Stamp the email confirmation time."""
        ...


class HostnameConfigRepoPort(Protocol):
    """Registered tenant hostnames."""

    def get(self, hostname: str) -> HostnameConfig | None:
        """Get configuration for a hostname, None if unknown."""
        ...


class ListConfigRepoPort(Protocol):
    """Per-list configuration."""

    def get_by_unique_values(self, hostname: str, list_name: str) -> ListConfig | None:
        """Get configuration for one list on one hostname."""
        ...
