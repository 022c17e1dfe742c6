"""Random identifier generation for subscriptions and tokens."""

from __future__ import annotations

import secrets

ID_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"

# Length of bearer tokens (verification links)
TOKEN_ID_LENGTH = 63

# Length of subscription primary keys
SUBSCRIPTION_ID_LENGTH = 15


def generate_id(length: int) -> str:
    """
    Generate a cryptographically random id from a lowercase alphanumeric alphabet.

    Args:
        length: Number of characters

    Returns:
        Random identifier string
    """
    if length < 1:
        raise ValueError("length must be positive")
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


class SecretsIdGenerator:
    """IdGeneratorPort backed by the ``secrets`` module."""

    def generate(self, length: int) -> str:
        return generate_id(length)
