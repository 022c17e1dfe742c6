"""
Token lifecycle component.

Issues and consumes single-use, expiring tokens scoped to a
(subscription, purpose) pair.

Key behaviors:
- Issuance is debounced: while an existing token still has more than half
  of its validity window left, reissue is refused instead of extending it
- A successful issuance deletes every older token for the same pair
- Consumption deletes the record before checking expiry, so a token id
  can be presented at most once whatever the outcome

Concurrency: issue() reads then writes without a lock. Two concurrent
calls for the same pair can both pass the freshness check and leave two
live tokens; both remain single-use and expire on schedule.
"""

from __future__ import annotations

import logging
from datetime import datetime

from src.components.tokens.models import (
    ConsumeTokenError,
    IssueTokenError,
    TokenConfig,
)
from src.components.tokens.ports import TokenRepoPort
from src.core.entities import SubscriptionToken, TokenType
from src.core.ports.time import ClockPort, IdGeneratorPort
from src.core.result import Err, Ok, Result

logger = logging.getLogger(__name__)


def is_reusable(token: SubscriptionToken, config: TokenConfig, now: datetime) -> bool:
    """True while the token has more than half its validity window remaining."""
    return now < token.expires_at - config.reuse_threshold


def issue_token(
    token_type: TokenType,
    subscription_id: str,
    *,
    repo: TokenRepoPort,
    clock: ClockPort,
    ids: IdGeneratorPort,
    config: TokenConfig | None = None,
) -> Result[str, IssueTokenError]:
    """
    Issue a new token for (subscription_id, token_type).

    Args:
        token_type: Purpose of the token
        subscription_id: Owning subscription (not validated here)
        repo: Token store
        clock: Time source
        ids: Random id source
        config: Validity window and id length

    Returns:
        Ok(token_id), or Err("EXISTING_UNEXPIRED_TOKEN") without mutation
    """
    cfg = config or TokenConfig()
    now = clock.now_utc()

    existing = repo.list_for_subscription(subscription_id, token_type)
    if any(is_reusable(token, cfg, now) for token in existing):
        logger.info(
            "Token issue debounced: subscription=%s type=%s",
            subscription_id,
            token_type.value,
        )
        return Err("EXISTING_UNEXPIRED_TOKEN")

    for token in existing:
        repo.delete(token.id)

    token = SubscriptionToken(
        id=ids.generate(cfg.id_length),
        expires_at=now + cfg.expires_in,
        subscription_id=subscription_id,
        token_type=token_type,
    )
    repo.insert(token)
    return Ok(token.id)


def consume_token(
    token_id: str,
    *,
    repo: TokenRepoPort,
    clock: ClockPort,
) -> Result[SubscriptionToken, ConsumeTokenError]:
    """
    Consume a token. The record is deleted whether or not it has expired.

    Returns:
        Ok(token) if it existed and was unexpired,
        Err("TOKEN_NOT_FOUND") or Err("TOKEN_EXPIRED") otherwise
    """
    token = repo.get(token_id)
    if token is None:
        return Err("TOKEN_NOT_FOUND")

    repo.delete(token_id)

    if token.is_expired(clock.now_utc()):
        logger.info("Expired token presented: subscription=%s", token.subscription_id)
        return Err("TOKEN_EXPIRED")
    return Ok(token)
