"""
Newsletter component.

Subscribe / unsubscribe / confirm-email across tenant hostnames and lists.
"""

from src.components.newsletter.component import (
    CONFIRMATION_SUBJECT,
    EMAIL_REGEX,
    build_confirmation_url,
    confirm_email,
    is_valid_email,
    render_confirmation_email,
    run,
    send_confirmation,
    subscribe,
    unsubscribe,
)
from src.components.newsletter.models import (
    ConfirmError,
    ConfirmInput,
    NewsletterConfig,
    NewsletterContext,
    SubscribeError,
    SubscribeInput,
    SubscribeSuccess,
    UnsubscribeError,
    UnsubscribeInput,
)
from src.components.newsletter.ports import (
    HostnameConfigRepoPort,
    ListConfigRepoPort,
    SubscriptionRepoPort,
)

__all__ = [
    # Component
    "run",
    "subscribe",
    "unsubscribe",
    "confirm_email",
    "send_confirmation",
    # Pure functions
    "is_valid_email",
    "build_confirmation_url",
    "render_confirmation_email",
    # Constants
    "CONFIRMATION_SUBJECT",
    "EMAIL_REGEX",
    # Input/Output
    "SubscribeInput",
    "UnsubscribeInput",
    "ConfirmInput",
    "SubscribeSuccess",
    "NewsletterConfig",
    "NewsletterContext",
    # Errors
    "SubscribeError",
    "UnsubscribeError",
    "ConfirmError",
    # Ports
    "SubscriptionRepoPort",
    "HostnameConfigRepoPort",
    "ListConfigRepoPort",
]
