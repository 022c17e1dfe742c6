from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path

import pytest

from src.adapters.clock import FixedClock
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.components.newsletter import NewsletterContext
from src.core.entities import (
    EmailConfirm,
    HostnameConfig,
    ListConfig,
    Subscription,
    SubscriptionToken,
    TokenType,
)
from src.core.ports.db import UniqueConstraintError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"

START = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


# --- In-Memory Repositories ---


class InMemorySubscriptionRepo:
    def __init__(self) -> None:
        self.rows: dict[str, Subscription] = {}

    def insert(self, subscription: Subscription) -> None:
        for row in self.rows.values():
            if (row.email, row.hostname, row.list_name) == (
                subscription.email,
                subscription.hostname,
                subscription.list_name,
            ):
                raise UniqueConstraintError("subscription")
        self.rows[subscription.id] = subscription

    def get_by_id(self, subscription_id: str) -> Subscription | None:
        return self.rows.get(subscription_id)

    def get_by_unique_values(
        self, email: str, hostname: str, list_name: str
    ) -> Subscription | None:
        for row in self.rows.values():
            if (row.email, row.hostname, row.list_name) == (email, hostname, list_name):
                return row
        return None

    def set_unsubscribed_at(self, subscription_id: str, unsubscribed_at: datetime | None) -> None:
        self.rows[subscription_id] = replace(
            self.rows[subscription_id], unsubscribed_at=unsubscribed_at
        )

    def set_email_confirmed_at(self, subscription_id: str, email_confirmed_at: datetime) -> None:
        self.rows[subscription_id] = replace(
            self.rows[subscription_id], email_confirmed_at=email_confirmed_at
        )


class InMemoryTokenRepo:
    def __init__(self) -> None:
        self.rows: dict[str, SubscriptionToken] = {}

    def get(self, token_id: str) -> SubscriptionToken | None:
        return self.rows.get(token_id)

    def list_for_subscription(
        self, subscription_id: str, token_type: TokenType
    ) -> list[SubscriptionToken]:
        return [
            t
            for t in self.rows.values()
            if t.subscription_id == subscription_id and t.token_type == token_type
        ]

    def insert(self, token: SubscriptionToken) -> None:
        if token.id in self.rows:
            raise UniqueConstraintError("subscription_token")
        self.rows[token.id] = token

    def delete(self, token_id: str) -> None:
        self.rows.pop(token_id, None)


class InMemoryHostnameConfigRepo:
    def __init__(self, *hostnames: str) -> None:
        self.rows = {h: HostnameConfig(hostname=h) for h in hostnames}

    def get(self, hostname: str) -> HostnameConfig | None:
        return self.rows.get(hostname)


class InMemoryListConfigRepo:
    def __init__(self, *configs: ListConfig) -> None:
        self.rows = {(c.hostname, c.list_name): c for c in configs}

    def get_by_unique_values(self, hostname: str, list_name: str) -> ListConfig | None:
        return self.rows.get((hostname, list_name))


class SequentialIds:
    """Deterministic ids: zero-padded counter of the requested length."""

    def __init__(self) -> None:
        self.counter = 0

    def generate(self, length: int) -> str:
        self.counter += 1
        return f"{self.counter:0{length}d}"


# --- Fixtures ---


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(START)


@pytest.fixture
def token_repo() -> InMemoryTokenRepo:
    return InMemoryTokenRepo()


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
def email_sender() -> DevEmailAdapter:
    return DevEmailAdapter(record=True)


@pytest.fixture
def newsletter_ctx(clock, token_repo, ids, email_sender) -> NewsletterContext:
    """
    Newsletter context over in-memory stores.

    Registered hostname ``example.com`` has a ``news`` list confirmed by
    link and a ``digest`` list without confirmation.
    """
    return NewsletterContext(
        subscriptions=InMemorySubscriptionRepo(),
        tokens=token_repo,
        hostnames=InMemoryHostnameConfigRepo("example.com"),
        lists=InMemoryListConfigRepo(
            ListConfig(
                id="list-news",
                hostname="example.com",
                list_name="news",
                email_confirm=EmailConfirm.LINK,
            ),
            ListConfig(id="list-digest", hostname="example.com", list_name="digest"),
        ),
        clock=clock,
        ids=ids,
        email_sender=email_sender,
    )


@pytest.fixture
def db_path(tmp_path) -> str:
    """Temporary SQLite database with all migrations applied."""
    path = str(tmp_path / "edge.db")
    SQLiteMigrator(path, str(MIGRATIONS_DIR)).run_migrations()
    return path
