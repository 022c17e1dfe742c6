"""
Domain entities for the edge services.

- Subscription: one person's opt-in state for one list on one hostname
- SubscriptionToken: single-use expiring capability tied to a subscription
- HostnameConfig: tenant registration gating which hostnames may use the service
- ListConfig: per-list options (how email addresses are confirmed)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

__all__ = [
    "EmailConfirm",
    "HostnameConfig",
    "ListConfig",
    "Subscription",
    "SubscriptionToken",
    "TokenType",
]


class TokenType(str, Enum):
    """Purpose of a subscription token. One live token per (subscription, purpose)."""

    VERIFY_EMAIL = "verify_email"


class EmailConfirm(str, Enum):
    """How a list confirms new subscribers' email addresses."""

    LINK = "link"
    CODE = "code"


@dataclass(frozen=True)
class SubscriptionToken:
    """
    Single-use bearer credential for one privileged action.

    ``id`` is the credential itself. Records are deleted when superseded
    by a new issuance or when a consumption is attempted.
    """

    id: str
    expires_at: datetime
    subscription_id: str
    token_type: TokenType

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class Subscription:
    """
    Opt-in record, unique on (email, hostname, list_name).

    ``unsubscribed_at`` set means soft-deleted; re-subscribing clears it in
    place so the unique triple keeps pointing at the same row.
    """

    id: str
    email: str
    hostname: str
    list_name: str
    person_name: str | None = None
    email_confirmed_at: datetime | None = None
    unsubscribed_at: datetime | None = None

    @property
    def is_subscribed(self) -> bool:
        return self.unsubscribed_at is None

    @property
    def is_email_confirmed(self) -> bool:
        return self.email_confirmed_at is not None


@dataclass(frozen=True)
class HostnameConfig:
    hostname: str
    google_recaptcha_secret: str | None = None


@dataclass(frozen=True)
class ListConfig:
    id: str
    hostname: str
    list_name: str
    email_confirm: EmailConfirm | None = None
