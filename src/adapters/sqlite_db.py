"""
SQLite Database Adapter.

Implements the repository ports of the newsletter, token, API key and
static site components using SQLite. Schema lives in ``migrations/``.

Conventions:
- Subscription timestamps are ISO-8601 text (UTC)
- Token ``expires_at`` is integer epoch milliseconds
- A duplicate unique key on insert surfaces as ``UniqueConstraintError``;
  every other driver error propagates unchanged
"""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from typing import Any

from src.core.entities import (
    EmailConfirm,
    HostnameConfig,
    ListConfig,
    Subscription,
    SubscriptionToken,
    TokenType,
)
from src.core.ports.db import UniqueConstraintError

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------

UNIQUE_CONSTRAINT_PREFIX = "UNIQUE constraint failed"


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def parse_dt(s: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s) if s else None


def format_dt(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


def to_epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def from_epoch_ms(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=UTC)


def is_unique_constraint_error(error: sqlite3.IntegrityError) -> bool:
    return str(error).startswith(UNIQUE_CONSTRAINT_PREFIX)


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None

    def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            row: dict[str, Any] | None = conn.execute(sql, params).fetchone()
            return row
        finally:
            if self._should_close():
                conn.close()

    def _fetch_all(self, sql: str, params: tuple[Any, ...]) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            rows: list[dict[str, Any]] = conn.execute(sql, params).fetchall()
            return rows
        finally:
            if self._should_close():
                conn.close()

    def _execute(self, sql: str, params: tuple[Any, ...], *, table: str = "") -> None:
        conn = self._get_conn()
        try:
            try:
                conn.execute(sql, params)
            except sqlite3.IntegrityError as e:
                if is_unique_constraint_error(e):
                    raise UniqueConstraintError(table, str(e)) from e
                raise
            if self._should_close():
                conn.commit()
        finally:
            if self._should_close():
                conn.close()


# -----------------------------------------------------------------------------
# Subscription Repository
# -----------------------------------------------------------------------------


class SQLiteSubscriptionRepo(SQLiteRepoBase):
    """SQLite implementation of SubscriptionRepoPort."""

    def insert(self, subscription: Subscription) -> None:
        self._execute(
            """
            INSERT INTO subscription (
                id, email, hostname, list_name, person_name,
                email_confirmed_at, unsubscribed_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                subscription.id,
                subscription.email,
                subscription.hostname,
                subscription.list_name,
                subscription.person_name,
                format_dt(subscription.email_confirmed_at),
                format_dt(subscription.unsubscribed_at),
            ),
            table="subscription",
        )

    def get_by_id(self, subscription_id: str) -> Subscription | None:
        row = self._fetch_one("SELECT * FROM subscription WHERE id = ?", (subscription_id,))
        return self._map_row(row) if row else None

    def get_by_unique_values(
        self,
        email: str,
        hostname: str,
        list_name: str,
    ) -> Subscription | None:
        row = self._fetch_one(
            "SELECT * FROM subscription WHERE email = ? AND hostname = ? AND list_name = ?",
            (email, hostname, list_name),
        )
        return self._map_row(row) if row else None

    def set_unsubscribed_at(self, subscription_id: str, unsubscribed_at: datetime | None) -> None:
        self._execute(
            "UPDATE subscription SET unsubscribed_at = ? WHERE id = ?",
            (format_dt(unsubscribed_at), subscription_id),
        )

    def set_email_confirmed_at(self, subscription_id: str, email_confirmed_at: datetime) -> None:
        self._execute(
            "UPDATE subscription SET email_confirmed_at = ? WHERE id = ?",
            (format_dt(email_confirmed_at), subscription_id),
        )

    def count(self) -> int:
        row = self._fetch_one("SELECT COUNT(*) AS n FROM subscription", ())
        return int(row["n"]) if row else 0

    def _map_row(self, row: dict[str, Any]) -> Subscription:
        return Subscription(
            id=row["id"],
            email=row["email"],
            hostname=row["hostname"],
            list_name=row["list_name"],
            person_name=row["person_name"],
            email_confirmed_at=parse_dt(row["email_confirmed_at"]),
            unsubscribed_at=parse_dt(row["unsubscribed_at"]),
        )


# -----------------------------------------------------------------------------
# Subscription Token Repository
# -----------------------------------------------------------------------------


class SQLiteSubscriptionTokenRepo(SQLiteRepoBase):
    """SQLite implementation of TokenRepoPort."""

    def get(self, token_id: str) -> SubscriptionToken | None:
        row = self._fetch_one("SELECT * FROM subscription_token WHERE id = ?", (token_id,))
        return self._map_row(row) if row else None

    def list_for_subscription(
        self,
        subscription_id: str,
        token_type: TokenType,
    ) -> list[SubscriptionToken]:
        rows = self._fetch_all(
            """
            SELECT id, expires_at, subscription_id, token_type
            FROM subscription_token
            WHERE subscription_id = ? AND token_type = ?
            """,
            (subscription_id, token_type.value),
        )
        return [self._map_row(r) for r in rows]

    def insert(self, token: SubscriptionToken) -> None:
        self._execute(
            """
            INSERT INTO subscription_token (id, expires_at, token_type, subscription_id)
            VALUES (?, ?, ?, ?)
            """,
            (
                token.id,
                to_epoch_ms(token.expires_at),
                token.token_type.value,
                token.subscription_id,
            ),
            table="subscription_token",
        )

    def delete(self, token_id: str) -> None:
        self._execute("DELETE FROM subscription_token WHERE id = ?", (token_id,))

    def _map_row(self, row: dict[str, Any]) -> SubscriptionToken:
        return SubscriptionToken(
            id=row["id"],
            expires_at=from_epoch_ms(row["expires_at"]),
            subscription_id=row["subscription_id"],
            token_type=TokenType(row["token_type"]),
        )


# -----------------------------------------------------------------------------
# Hostname / List Configuration Repositories
# -----------------------------------------------------------------------------


class SQLiteHostnameConfigRepo(SQLiteRepoBase):
    """SQLite implementation of HostnameConfigRepoPort, plus admin writes."""

    def get(self, hostname: str) -> HostnameConfig | None:
        row = self._fetch_one(
            "SELECT hostname, google_recaptcha_secret FROM hostname_config WHERE hostname = ?",
            (hostname,),
        )
        if not row:
            return None
        return HostnameConfig(
            hostname=row["hostname"],
            google_recaptcha_secret=row["google_recaptcha_secret"],
        )

    def insert(self, config: HostnameConfig) -> None:
        self._execute(
            "INSERT INTO hostname_config (hostname, google_recaptcha_secret) VALUES (?, ?)",
            (config.hostname, config.google_recaptcha_secret),
            table="hostname_config",
        )

    def update(self, config: HostnameConfig) -> None:
        self._execute(
            "UPDATE hostname_config SET google_recaptcha_secret = ? WHERE hostname = ?",
            (config.google_recaptcha_secret, config.hostname),
        )

    def delete(self, hostname: str) -> None:
        self._execute("DELETE FROM hostname_config WHERE hostname = ?", (hostname,))


class SQLiteListConfigRepo(SQLiteRepoBase):
    """SQLite implementation of ListConfigRepoPort."""

    def get_by_unique_values(self, hostname: str, list_name: str) -> ListConfig | None:
        row = self._fetch_one(
            """
            SELECT id, hostname, list_name, email_confirm
            FROM list_config WHERE hostname = ? AND list_name = ?
            """,
            (hostname, list_name),
        )
        if not row:
            return None
        return ListConfig(
            id=row["id"],
            hostname=row["hostname"],
            list_name=row["list_name"],
            email_confirm=EmailConfirm(row["email_confirm"]) if row["email_confirm"] else None,
        )

    def insert(self, config: ListConfig) -> None:
        self._execute(
            """
            INSERT INTO list_config (id, hostname, list_name, email_confirm)
            VALUES (?, ?, ?, ?)
            """,
            (
                config.id,
                config.hostname,
                config.list_name,
                config.email_confirm.value if config.email_confirm else None,
            ),
            table="list_config",
        )


# -----------------------------------------------------------------------------
# Key-Value Store (API keys)
# -----------------------------------------------------------------------------


class SQLiteKeyValueStore(SQLiteRepoBase):
    """SQLite implementation of KeyValueStorePort scoped to one namespace."""

    def __init__(
        self,
        db_path: str,
        namespace: str,
        connection: sqlite3.Connection | None = None,
    ):
        super().__init__(db_path, connection)
        self.namespace = namespace

    def get(self, key: str) -> str | None:
        row = self._fetch_one(
            "SELECT value FROM kv_entry WHERE namespace = ? AND key = ?",
            (self.namespace, key),
        )
        return row["value"] if row else None

    def put(self, key: str, value: str) -> None:
        self._execute(
            """
            INSERT INTO kv_entry (namespace, key, value, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(namespace, key) DO UPDATE SET
                value=excluded.value,
                updated_at=excluded.updated_at
            """,
            (self.namespace, key, value, datetime.now(UTC).isoformat()),
        )

    def delete(self, key: str) -> None:
        self._execute(
            "DELETE FROM kv_entry WHERE namespace = ? AND key = ?",
            (self.namespace, key),
        )


# -----------------------------------------------------------------------------
# Site Redirects (static sites)
# -----------------------------------------------------------------------------


class SQLiteSiteRedirectRepo(SQLiteRepoBase):
    """SQLite implementation of RedirectLookupPort, plus admin writes."""

    def get(self, source: str) -> str | None:
        row = self._fetch_one("SELECT target FROM site_redirect WHERE source_path = ?", (source,))
        return row["target"] if row else None

    def put(self, source: str, target: str) -> None:
        self._execute(
            """
            INSERT INTO site_redirect (source_path, target) VALUES (?, ?)
            ON CONFLICT(source_path) DO UPDATE SET target=excluded.target
            """,
            (source, target),
        )

    def delete(self, source: str) -> None:
        self._execute("DELETE FROM site_redirect WHERE source_path = ?", (source,))
