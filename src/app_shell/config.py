import logging
import os
from collections.abc import Mapping

from src.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Startup configuration is incomplete."""


def validate_ops_rules(rules: Rules, environ: Mapping[str, str] | None = None) -> None:
    """
    Validate operational requirements before startup.

    Raises ConfigurationError listing every missing environment variable.
    """
    env = os.environ if environ is None else environ

    missing = [name for name in rules.ops.required_env if name not in env]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    logger.info("Configuration validated.")
