"""
Regression tests for the token and subscription invariants, run against
the SQLite stores so the storage-level unique keys take part.
"""

from __future__ import annotations

import pytest

from src.adapters.sqlite_db import (
    SQLiteHostnameConfigRepo,
    SQLiteListConfigRepo,
    SQLiteSubscriptionRepo,
    SQLiteSubscriptionTokenRepo,
)
from src.components.newsletter import (
    ConfirmInput,
    NewsletterContext,
    SubscribeInput,
    UnsubscribeInput,
    confirm_email,
    subscribe,
    unsubscribe,
)
from src.components.tokens import consume_token, issue_token
from src.core.entities import HostnameConfig, TokenType
from src.core.ids import SecretsIdGenerator
from src.core.result import Err, Ok

E, H, L = "linus@example.org", "example.com", "news"


@pytest.fixture
def sqlite_ctx(db_path, clock) -> NewsletterContext:
    hostnames = SQLiteHostnameConfigRepo(db_path)
    hostnames.insert(HostnameConfig(hostname=H))
    return NewsletterContext(
        subscriptions=SQLiteSubscriptionRepo(db_path),
        tokens=SQLiteSubscriptionTokenRepo(db_path),
        hostnames=hostnames,
        lists=SQLiteListConfigRepo(db_path),
        clock=clock,
        ids=SecretsIdGenerator(),
    )


@pytest.fixture
def subscription_id(sqlite_ctx) -> str:
    return subscribe(sqlite_ctx, SubscribeInput(email=E, hostname=H, list_name=L)).value.subscription_id


def issue(ctx: NewsletterContext, subscription_id: str):
    return issue_token(
        TokenType.VERIFY_EMAIL,
        subscription_id,
        repo=ctx.tokens,
        clock=ctx.clock,
        ids=ctx.ids,
        config=ctx.config.token,
    )


def stored_tokens(ctx: NewsletterContext, subscription_id: str):
    return ctx.tokens.list_for_subscription(subscription_id, TokenType.VERIFY_EMAIL)


class TestTokenInvariants:
    @pytest.mark.parametrize("step_minutes", [0, 30, 59, 60, 90, 120, 240])
    def test_at_most_one_token_per_pair(self, sqlite_ctx, subscription_id, clock, step_minutes):
        for _ in range(4):
            issue(sqlite_ctx, subscription_id)
            assert len(stored_tokens(sqlite_ctx, subscription_id)) <= 1
            clock.advance(minutes=step_minutes)

    def test_quick_reissue_is_refused_without_new_records(self, sqlite_ctx, subscription_id):
        first = issue(sqlite_ctx, subscription_id)

        second = issue(sqlite_ctx, subscription_id)

        assert isinstance(first, Ok)
        assert second == Err("EXISTING_UNEXPIRED_TOKEN")
        assert [t.id for t in stored_tokens(sqlite_ctx, subscription_id)] == [first.value]

    def test_consume_succeeds_at_most_once(self, sqlite_ctx, subscription_id):
        token_id = issue(sqlite_ctx, subscription_id).value

        results = [
            consume_token(token_id, repo=sqlite_ctx.tokens, clock=sqlite_ctx.clock)
            for _ in range(3)
        ]

        assert sum(isinstance(r, Ok) for r in results) == 1
        assert results[1:] == [Err("TOKEN_NOT_FOUND"), Err("TOKEN_NOT_FOUND")]

    def test_expired_consume_deletes_token(self, sqlite_ctx, subscription_id, clock):
        token_id = issue(sqlite_ctx, subscription_id).value
        clock.advance(hours=2, minutes=1)

        first = consume_token(token_id, repo=sqlite_ctx.tokens, clock=clock)
        second = consume_token(token_id, repo=sqlite_ctx.tokens, clock=clock)

        assert first == Err("TOKEN_EXPIRED")
        assert second == Err("TOKEN_NOT_FOUND")


class TestSubscriptionScenarios:
    def test_unknown_hostname_creates_nothing(self, sqlite_ctx):
        result = subscribe(sqlite_ctx, SubscribeInput(email=E, hostname="other.org", list_name=L))

        assert result == Err("UNKNOWN_HOSTNAME")
        assert sqlite_ctx.subscriptions.count() == 0

    def test_subscribe_cycle_keeps_one_row(self, sqlite_ctx):
        inp = SubscribeInput(email=E, hostname=H, list_name=L)
        first = subscribe(sqlite_ctx, inp)

        assert subscribe(sqlite_ctx, inp) == Err("ALREADY_SUBSCRIBED")
        assert unsubscribe(sqlite_ctx, UnsubscribeInput(email=E, hostname=H, list_name=L)) == Ok(None)
        assert subscribe(sqlite_ctx, inp) == Err("RESUBSCRIBED")

        row = sqlite_ctx.subscriptions.get_by_unique_values(E, H, L)
        assert row.id == first.value.subscription_id
        assert row.is_subscribed
        assert sqlite_ctx.subscriptions.count() == 1

    def test_unsubscribe_never_subscribed(self, sqlite_ctx):
        result = unsubscribe(sqlite_ctx, UnsubscribeInput(email=E, hostname=H, list_name=L))

        assert result == Err("NOT_FOUND")

    def test_unsubscribe_twice(self, sqlite_ctx, subscription_id):
        inp = UnsubscribeInput(email=E, hostname=H, list_name=L)

        assert unsubscribe(sqlite_ctx, inp) == Ok(None)
        assert unsubscribe(sqlite_ctx, inp) == Err("ALREADY_UNSUBSCRIBED")

    def test_confirm_with_issued_token(self, sqlite_ctx, subscription_id, clock):
        token_id = issue(sqlite_ctx, subscription_id).value
        clock.advance(minutes=5)

        result = confirm_email(sqlite_ctx, ConfirmInput(token=token_id, hostname=H))

        assert result == Ok(None)
        assert sqlite_ctx.subscriptions.get_by_id(subscription_id).email_confirmed_at is not None
