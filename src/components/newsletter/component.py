"""
Newsletter subscription component.

Functional core for subscribe / unsubscribe / confirm-email across
tenant hostnames and lists.

Key behaviors:
- Unknown hostnames are rejected before any state mutation
- The (email, hostname, list_name) unique key arbitrates concurrent
  subscribes: the loser of the insert race takes the reconciliation path
- Re-subscribing after an unsubscribe reactivates the existing row in
  place (same id)
- Unsubscribe is a soft delete via ``unsubscribed_at``
- Email confirmation consumes a single-use VERIFY_EMAIL token

Storage failures other than the unique-key collision propagate.
"""

from __future__ import annotations

import html
import logging
import re
from urllib.parse import urlencode

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
from src.components.tokens import consume_token, issue_token
from src.core.entities import EmailConfirm, Subscription, TokenType
from src.core.ports.db import UniqueConstraintError
from src.core.result import Err, InvariantViolation, Ok, Result

logger = logging.getLogger(__name__)

# --- Email Validation Regex (RFC 5322 simplified) ---

EMAIL_REGEX = re.compile(
    r"[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+"
)

CONFIRMATION_SUBJECT = "Confirm your subscription to {site_name}"


# --- Pure Functions ---


def is_valid_email(email: str) -> bool:
    """Check email address format (max 254 chars)."""
    return 0 < len(email) <= 254 and EMAIL_REGEX.fullmatch(email) is not None


def build_confirmation_url(config: NewsletterConfig, token: str, hostname: str) -> str:
    """
    Build the confirmation link sent to a new subscriber.

    Args:
        config: Newsletter configuration (base URL and path)
        token: VERIFY_EMAIL token id
        hostname: Tenant hostname the subscription belongs to

    Returns:
        Full confirmation URL
    """
    base = config.confirmation_base_url.rstrip("/")
    query = urlencode({"token": token, "hostname": hostname})
    return f"{base}{config.confirmation_path}?{query}"


def render_confirmation_email(
    subscription: Subscription,
    confirmation_url: str,
) -> tuple[str, str, str]:
    """Return (subject, html body, text body) for a confirmation email."""
    site_name = subscription.hostname
    greeting = f"Hi {subscription.person_name}," if subscription.person_name else "Hi,"
    subject = CONFIRMATION_SUBJECT.format(site_name=site_name)
    body_text = (
        f"{greeting}\n\n"
        f"Please confirm your subscription to the {subscription.list_name} list "
        f"on {site_name} by opening this link:\n\n{confirmation_url}\n\n"
        "If you did not subscribe, you can ignore this email."
    )
    body_html = (
        f"<p>{html.escape(greeting)}</p>"
        f"<p>Please confirm your subscription to the "
        f"<strong>{html.escape(subscription.list_name)}</strong> list on "
        f"{html.escape(site_name)}.</p>"
        f'<p><a href="{html.escape(confirmation_url, quote=True)}">Confirm subscription</a></p>'
        "<p>If you did not subscribe, you can ignore this email.</p>"
    )
    return subject, body_html, body_text


# --- Operations ---


def send_confirmation(ctx: NewsletterContext, subscription: Subscription) -> bool:
    """
    Issue a VERIFY_EMAIL token and email the confirmation link.

    Returns:
        True if an email was handed to the sender. False when no sender is
        configured or a recent token already exists (debounced resend).
    """
    if ctx.email_sender is None:
        return False

    issued = issue_token(
        TokenType.VERIFY_EMAIL,
        subscription.id,
        repo=ctx.tokens,
        clock=ctx.clock,
        ids=ctx.ids,
        config=ctx.config.token,
    )
    if isinstance(issued, Err):
        return False

    url = build_confirmation_url(ctx.config, issued.value, subscription.hostname)
    subject, body_html, body_text = render_confirmation_email(subscription, url)
    result = ctx.email_sender.send_email(
        recipient=subscription.email,
        subject=subject,
        body_html=body_html,
        body_text=body_text,
    )
    logger.info(
        "Confirmation email for subscription=%s: %s",
        subscription.id,
        result.status.value,
    )
    return True


def subscribe(
    ctx: NewsletterContext,
    inp: SubscribeInput,
) -> Result[SubscribeSuccess, SubscribeError]:
    """
    Subscribe an email address to a list on a hostname.

    Returns:
        Ok(SubscribeSuccess) for a new row,
        Err("RESUBSCRIBED") when a previously unsubscribed row was reactivated,
        Err("ALREADY_SUBSCRIBED") when an active row exists,
        Err("UNKNOWN_HOSTNAME") when the hostname is not registered

    Raises:
        InvariantViolation: the unique key collided but the row is gone
    """
    if ctx.hostnames.get(inp.hostname) is None:
        return Err("UNKNOWN_HOSTNAME")

    subscription = Subscription(
        id=ctx.ids.generate(ctx.config.subscription_id_length),
        email=inp.email,
        hostname=inp.hostname,
        list_name=inp.list_name,
        person_name=inp.person_name,
    )

    try:
        ctx.subscriptions.insert(subscription)
    except UniqueConstraintError:
        existing = ctx.subscriptions.get_by_unique_values(
            inp.email, inp.hostname, inp.list_name
        )
        if existing is None:
            raise InvariantViolation(
                f"subscription for {inp.hostname}/{inp.list_name} conflicted but is missing"
            ) from None

        if not existing.is_subscribed:
            ctx.subscriptions.set_unsubscribed_at(existing.id, None)
            logger.info("Resubscribed subscription=%s", existing.id)
            return Err("RESUBSCRIBED")

        logger.info("Already subscribed subscription=%s", existing.id)
        return Err("ALREADY_SUBSCRIBED")

    confirmation_sent = False
    list_config = ctx.lists.get_by_unique_values(inp.hostname, inp.list_name)
    if list_config is not None and list_config.email_confirm == EmailConfirm.LINK:
        confirmation_sent = send_confirmation(ctx, subscription)

    return Ok(
        SubscribeSuccess(
            subscription_id=subscription.id,
            confirmation_sent=confirmation_sent,
        )
    )


def unsubscribe(
    ctx: NewsletterContext,
    inp: UnsubscribeInput,
) -> Result[None, UnsubscribeError]:
    """
    Unsubscribe an email address from a list (soft delete).

    Returns:
        Ok(None), or Err with NOT_FOUND / ALREADY_UNSUBSCRIBED / UNKNOWN_HOSTNAME
    """
    if ctx.hostnames.get(inp.hostname) is None:
        return Err("UNKNOWN_HOSTNAME")

    existing = ctx.subscriptions.get_by_unique_values(inp.email, inp.hostname, inp.list_name)
    if existing is None:
        return Err("NOT_FOUND")

    if not existing.is_subscribed:
        return Err("ALREADY_UNSUBSCRIBED")

    ctx.subscriptions.set_unsubscribed_at(existing.id, ctx.clock.now_utc())
    return Ok(None)


def confirm_email(
    ctx: NewsletterContext,
    inp: ConfirmInput,
) -> Result[None, ConfirmError]:
    """
    Confirm a subscriber's email address with a VERIFY_EMAIL token.

    Confirming an already confirmed subscription with a fresh token
    re-stamps ``email_confirmed_at``.
    """
    if ctx.hostnames.get(inp.hostname) is None:
        return Err("UNKNOWN_HOSTNAME")

    consumed = consume_token(inp.token, repo=ctx.tokens, clock=ctx.clock)
    if isinstance(consumed, Err):
        return Err(consumed.error)

    ctx.subscriptions.set_email_confirmed_at(
        consumed.value.subscription_id,
        ctx.clock.now_utc(),
    )
    return Ok(None)


def run(
    inp: SubscribeInput | UnsubscribeInput | ConfirmInput,
    *,
    ctx: NewsletterContext,
) -> (
    Result[SubscribeSuccess, SubscribeError]
    | Result[None, UnsubscribeError]
    | Result[None, ConfirmError]
):
    """
    Main component entry point.

    Args:
        inp: Input command
        ctx: Stores, clock, id source and configuration

    Returns:
        Operation result
    """
    if isinstance(inp, SubscribeInput):
        return subscribe(ctx, inp)
    elif isinstance(inp, UnsubscribeInput):
        return unsubscribe(ctx, inp)
    elif isinstance(inp, ConfirmInput):
        return confirm_email(ctx, inp)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
