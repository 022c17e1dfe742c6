"""
Dev Email Adapter.

Logs emails instead of sending them. Used for local development, for
tests, and in any deployment without a mail provider configured.

Key behaviors:
- Logs recipient, subject and a body preview
- Returns SKIPPED status (not SENT)
- Keeps emails in memory for test assertions when built with record=True;
  off by default since each confirmation email carries a live token
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from src.core.ports.email import EmailResult, EmailStatus

logger = logging.getLogger(__name__)


@dataclass
class SentEmail:
    """Record of a logged email for test assertions."""

    id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str
    logged_at: datetime


@dataclass
class DevEmailAdapter:
    """
    Email adapter that logs instead of sending.

    Implements EmailPort.
    """

    sent_emails: list[SentEmail] = field(default_factory=list)
    record: bool = False

    log_level: int = logging.INFO
    log_body: bool = True
    body_preview_length: int = 100

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        """
        Log an email instead of sending.

        Returns:
            EmailResult with SKIPPED status
        """
        message_id = f"dev-{uuid4().hex[:12]}"

        if self.record:
            self.sent_emails.append(
                SentEmail(
                    id=message_id,
                    recipient=recipient,
                    subject=subject,
                    body_html=body_html,
                    body_text=body_text or "",
                    logged_at=datetime.now(UTC),
                )
            )
        self._log_email(recipient, subject, body_text or body_html, message_id)

        return EmailResult(
            status=EmailStatus.SKIPPED,
            message_id=message_id,
            recipient=recipient,
            error="Dev mode - email logged, not sent",
        )

    def _log_email(self, recipient: str, subject: str, body: str, message_id: str) -> None:
        parts = [f"EMAIL (dev): To={recipient}", f"Subject={subject}"]

        if self.log_body and body:
            preview = body[: self.body_preview_length]
            if len(body) > self.body_preview_length:
                preview += "..."
            parts.append(f"Body={preview}")

        parts.append(f"MessageID={message_id}")
        logger.log(self.log_level, ", ".join(parts))

    # --- Test Helper Methods ---

    def get_last_email(self) -> SentEmail | None:
        """Get the most recently logged email."""
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        """Get all emails logged to a specific recipient."""
        return [e for e in self.sent_emails if e.recipient == recipient]

    def clear(self) -> None:
        """Clear all stored emails."""
        self.sent_emails.clear()

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)
