"""
Newsletter component models.

Inputs, success values and error codes for subscribe / unsubscribe /
confirm, plus the explicit dependency bundle the operations run against.

State machine (per email + hostname + list_name):
    NonExistent -> Subscribed <-> Unsubscribed
with an orthogonal ``email_confirmed`` flag on the subscription.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from src.components.tokens.models import TokenConfig
from src.core.ids import SUBSCRIPTION_ID_LENGTH

if TYPE_CHECKING:
    from src.components.newsletter.ports import (
        HostnameConfigRepoPort,
        ListConfigRepoPort,
        SubscriptionRepoPort,
    )
    from src.components.tokens.ports import TokenRepoPort
    from src.core.ports.email import EmailPort
    from src.core.ports.time import ClockPort, IdGeneratorPort


# --- Error codes ---

# RESUBSCRIBED is a soft success carried on the error channel
SubscribeError = Literal["RESUBSCRIBED", "ALREADY_SUBSCRIBED", "UNKNOWN_HOSTNAME"]

UnsubscribeError = Literal["ALREADY_UNSUBSCRIBED", "UNKNOWN_HOSTNAME", "NOT_FOUND"]

# ALREADY_CONFIRMED is reserved; a second confirmation fails at token
# consumption with TOKEN_NOT_FOUND instead
ConfirmError = Literal[
    "TOKEN_NOT_FOUND",
    "TOKEN_EXPIRED",
    "ALREADY_CONFIRMED",
    "UNKNOWN_HOSTNAME",
]


# --- Input Models ---


@dataclass(frozen=True)
class SubscribeInput:
    """Input for a new subscription."""

    email: str
    hostname: str
    list_name: str
    person_name: str | None = None


@dataclass(frozen=True)
class UnsubscribeInput:
    """Input for unsubscribing."""

    email: str
    hostname: str
    list_name: str


@dataclass(frozen=True)
class ConfirmInput:
    """Input for confirming an email address with a token."""

    token: str
    hostname: str


# --- Output Models ---


@dataclass(frozen=True)
class SubscribeSuccess:
    """Value of a fresh subscription."""

    subscription_id: str
    confirmation_sent: bool = False


# --- Configuration ---


@dataclass(frozen=True)
class NewsletterConfig:
    """Newsletter service configuration."""

    token: TokenConfig = field(default_factory=TokenConfig)
    subscription_id_length: int = SUBSCRIPTION_ID_LENGTH
    confirmation_base_url: str = "http://localhost:8000"
    confirmation_path: str = "/newsletters/confirm"


@dataclass
class NewsletterContext:
    """
    Everything a newsletter operation touches.

    Passed explicitly into each operation instead of module-level globals
    so tests can substitute in-memory stores and a fixed clock.
    """

    subscriptions: SubscriptionRepoPort
    tokens: TokenRepoPort
    hostnames: HostnameConfigRepoPort
    lists: ListConfigRepoPort
    clock: ClockPort
    ids: IdGeneratorPort
    email_sender: EmailPort | None = None
    config: NewsletterConfig = field(default_factory=NewsletterConfig)
