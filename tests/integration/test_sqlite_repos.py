from datetime import UTC, datetime, timedelta

import pytest

from src.adapters.sqlite_db import (
    SQLiteHostnameConfigRepo,
    SQLiteKeyValueStore,
    SQLiteListConfigRepo,
    SQLiteSiteRedirectRepo,
    SQLiteSubscriptionRepo,
    SQLiteSubscriptionTokenRepo,
)
from src.core.entities import (
    EmailConfirm,
    HostnameConfig,
    ListConfig,
    Subscription,
    SubscriptionToken,
    TokenType,
)
from src.core.ports.db import UniqueConstraintError

NOW = datetime(2025, 6, 1, 8, 0, tzinfo=UTC)


@pytest.fixture
def subscriptions(db_path):
    return SQLiteSubscriptionRepo(db_path)


@pytest.fixture
def tokens(db_path):
    return SQLiteSubscriptionTokenRepo(db_path)


def make_subscription(sub_id="sub000000000001", email="ada@example.org"):
    return Subscription(id=sub_id, email=email, hostname="example.com", list_name="news")


class TestSubscriptionRepo:
    def test_insert_and_get(self, subscriptions):
        subscriptions.insert(make_subscription())

        row = subscriptions.get_by_id("sub000000000001")
        assert row == make_subscription()
        assert subscriptions.get_by_unique_values("ada@example.org", "example.com", "news") == row

    def test_duplicate_triple_is_unique_constraint_error(self, subscriptions):
        subscriptions.insert(make_subscription())

        with pytest.raises(UniqueConstraintError) as exc_info:
            subscriptions.insert(make_subscription(sub_id="sub000000000002"))

        assert exc_info.value.table == "subscription"
        assert subscriptions.count() == 1

    def test_timestamps_round_trip(self, subscriptions):
        subscriptions.insert(make_subscription())

        subscriptions.set_unsubscribed_at("sub000000000001", NOW)
        subscriptions.set_email_confirmed_at("sub000000000001", NOW + timedelta(minutes=1))

        row = subscriptions.get_by_id("sub000000000001")
        assert row.unsubscribed_at == NOW
        assert row.email_confirmed_at == NOW + timedelta(minutes=1)

    def test_clear_unsubscribed_at(self, subscriptions):
        subscriptions.insert(make_subscription())
        subscriptions.set_unsubscribed_at("sub000000000001", NOW)

        subscriptions.set_unsubscribed_at("sub000000000001", None)

        assert subscriptions.get_by_id("sub000000000001").is_subscribed

    def test_missing(self, subscriptions):
        assert subscriptions.get_by_id("nope") is None
        assert subscriptions.get_by_unique_values("a@b.co", "example.com", "news") is None


class TestTokenRepo:
    def test_expires_at_round_trip(self, subscriptions, tokens):
        subscriptions.insert(make_subscription())
        token = SubscriptionToken(
            id="t" * 63,
            expires_at=NOW + timedelta(hours=2),
            subscription_id="sub000000000001",
            token_type=TokenType.VERIFY_EMAIL,
        )

        tokens.insert(token)

        assert tokens.get("t" * 63) == token

    def test_list_and_delete(self, subscriptions, tokens):
        subscriptions.insert(make_subscription())
        for token_id in ("a" * 63, "b" * 63):
            tokens.insert(
                SubscriptionToken(
                    id=token_id,
                    expires_at=NOW,
                    subscription_id="sub000000000001",
                    token_type=TokenType.VERIFY_EMAIL,
                )
            )

        listed = tokens.list_for_subscription("sub000000000001", TokenType.VERIFY_EMAIL)
        assert sorted(t.id for t in listed) == ["a" * 63, "b" * 63]

        tokens.delete("a" * 63)
        assert tokens.get("a" * 63) is None
        assert len(tokens.list_for_subscription("sub000000000001", TokenType.VERIFY_EMAIL)) == 1

    def test_duplicate_id(self, subscriptions, tokens):
        subscriptions.insert(make_subscription())
        token = SubscriptionToken(
            id="c" * 63,
            expires_at=NOW,
            subscription_id="sub000000000001",
            token_type=TokenType.VERIFY_EMAIL,
        )
        tokens.insert(token)

        with pytest.raises(UniqueConstraintError):
            tokens.insert(token)


class TestConfigRepos:
    def test_hostname_crud(self, db_path):
        repo = SQLiteHostnameConfigRepo(db_path)
        repo.insert(HostnameConfig(hostname="example.com"))

        repo.update(HostnameConfig(hostname="example.com", google_recaptcha_secret="s"))
        assert repo.get("example.com").google_recaptcha_secret == "s"

        repo.delete("example.com")
        assert repo.get("example.com") is None

    def test_list_config(self, db_path):
        SQLiteHostnameConfigRepo(db_path).insert(HostnameConfig(hostname="example.com"))
        repo = SQLiteListConfigRepo(db_path)
        repo.insert(ListConfig(id="l1", hostname="example.com", list_name="news",
                               email_confirm=EmailConfirm.LINK))
        repo.insert(ListConfig(id="l2", hostname="example.com", list_name="digest"))

        assert repo.get_by_unique_values("example.com", "news").email_confirm == EmailConfirm.LINK
        assert repo.get_by_unique_values("example.com", "digest").email_confirm is None
        assert repo.get_by_unique_values("example.com", "other") is None


class TestKeyValueStore:
    def test_put_get_overwrite_delete(self, db_path):
        store = SQLiteKeyValueStore(db_path, "api_keys")

        store.put("k1", '{"a":1}')
        store.put("k1", '{"a":2}')
        assert store.get("k1") == '{"a":2}'

        store.delete("k1")
        assert store.get("k1") is None

    def test_namespaces_are_isolated(self, db_path):
        SQLiteKeyValueStore(db_path, "one").put("k", "v")

        assert SQLiteKeyValueStore(db_path, "two").get("k") is None


class TestSiteRedirectRepo:
    def test_put_get_delete(self, db_path):
        repo = SQLiteSiteRedirectRepo(db_path)

        repo.put("example.com/old/index.html", "https://example.com/new/")
        repo.put("example.com/old/index.html", "https://example.com/newer/")
        assert repo.get("example.com/old/index.html") == "https://example.com/newer/"

        repo.delete("example.com/old/index.html")
        assert repo.get("example.com/old/index.html") is None
