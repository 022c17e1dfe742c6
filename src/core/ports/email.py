"""
Email Adapter Interface.

Protocol-based interface for sending transactional emails.
Used by the newsletter component to deliver confirmation links.

Implementations:
- DevEmailAdapter: logs emails instead of sending (dev/test, default)

Sending never raises; failures come back as an EmailResult with
FAILED status so a subscription is never rolled back by a mail outage.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol


class EmailStatus(Enum):
    """Email send result status."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"  # Dev adapter or dry-run


@dataclass
class EmailResult:
    """Result of an email send attempt."""

    status: EmailStatus
    message_id: str | None = None
    error: str | None = None
    sent_at: datetime | None = None
    recipient: str = ""


class EmailPort(Protocol):
    """Email sending interface."""

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        """
        Send a transactional email.

        Args:
            recipient: Email address of recipient
            subject: Email subject line
            body_html: HTML body content
            body_text: Plain text body (optional, fallback)

        Returns:
            EmailResult with send outcome
        """
        ...
