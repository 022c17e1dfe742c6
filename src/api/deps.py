import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from src.adapters.clock import SystemClock
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.fs.filestore import FileSystemStore
from src.adapters.response_cache import InMemoryResponseCache
from src.adapters.sqlite_db import (
    SQLiteHostnameConfigRepo,
    SQLiteKeyValueStore,
    SQLiteListConfigRepo,
    SQLiteSiteRedirectRepo,
    SQLiteSubscriptionRepo,
    SQLiteSubscriptionTokenRepo,
)
from src.components.api_keys import AccessPolicy, ApiKeysConfig, load_access_policy
from src.components.newsletter import NewsletterConfig, NewsletterContext
from src.components.static_sites import StaticSitesConfig
from src.core.ids import SecretsIdGenerator
from src.core.ports.email import EmailPort
from src.core.ports.time import ClockPort, IdGeneratorPort
from src.rules.loader import load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        env = os.environ if environ is None else environ
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(env.get("EDGE_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "edge.db")
        self.sites_dir = self.data_dir / "sites"
        self.rules_path = Path(env.get("EDGE_RULES_PATH", str(self.base_dir / "rules.yaml")))
        self.migrations_dir = Path(__file__).resolve().parents[2] / "migrations"
        self.purge_token = env.get("PURGE_TOKEN") or None
        self.environment = env.get("ENVIRONMENT", "development")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Shared adapters ---
_clock = SystemClock()
_id_generator = SecretsIdGenerator()
_email_sender = DevEmailAdapter()
_response_cache = InMemoryResponseCache()


def get_clock() -> ClockPort:
    return _clock


def get_id_generator() -> IdGeneratorPort:
    return _id_generator


def get_email_sender() -> EmailPort:
    return _email_sender


# --- Newsletter ---
def get_subscription_repo(settings: Settings = Depends(get_settings)) -> SQLiteSubscriptionRepo:
    return SQLiteSubscriptionRepo(settings.db_path)


def get_token_repo(settings: Settings = Depends(get_settings)) -> SQLiteSubscriptionTokenRepo:
    return SQLiteSubscriptionTokenRepo(settings.db_path)


def get_hostname_config_repo(
    settings: Settings = Depends(get_settings),
) -> SQLiteHostnameConfigRepo:
    return SQLiteHostnameConfigRepo(settings.db_path)


def get_list_config_repo(settings: Settings = Depends(get_settings)) -> SQLiteListConfigRepo:
    return SQLiteListConfigRepo(settings.db_path)


def get_newsletter_config(rules: Rules = Depends(get_rules)) -> NewsletterConfig:
    newsletters = rules.newsletters
    return NewsletterConfig(
        token=newsletters.token_config(),
        subscription_id_length=newsletters.subscription_id_length,
        confirmation_base_url=newsletters.confirmation_base_url,
        confirmation_path=newsletters.confirmation_path,
    )


def get_newsletter_context(
    subscriptions: SQLiteSubscriptionRepo = Depends(get_subscription_repo),
    tokens: SQLiteSubscriptionTokenRepo = Depends(get_token_repo),
    hostnames: SQLiteHostnameConfigRepo = Depends(get_hostname_config_repo),
    lists: SQLiteListConfigRepo = Depends(get_list_config_repo),
    clock: ClockPort = Depends(get_clock),
    ids: IdGeneratorPort = Depends(get_id_generator),
    email_sender: EmailPort = Depends(get_email_sender),
    config: NewsletterConfig = Depends(get_newsletter_config),
) -> NewsletterContext:
    """Wire the newsletter operations to SQLite and the configured adapters."""
    return NewsletterContext(
        subscriptions=subscriptions,
        tokens=tokens,
        hostnames=hostnames,
        lists=lists,
        clock=clock,
        ids=ids,
        email_sender=email_sender,
        config=config,
    )


# --- API keys ---
def get_api_keys_config(rules: Rules = Depends(get_rules)) -> ApiKeysConfig:
    return rules.api_keys.to_config()


def get_kv_store(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> SQLiteKeyValueStore:
    return SQLiteKeyValueStore(settings.db_path, rules.api_keys.namespace)


def get_access_policy() -> AccessPolicy:
    # Read per request so rotated SECRET_AUTH_KEY_* values apply without a restart
    return load_access_policy(os.environ)


# --- Static sites ---
def get_static_sites_config(rules: Rules = Depends(get_rules)) -> StaticSitesConfig:
    return rules.static_sites.to_config()


def get_object_store(settings: Settings = Depends(get_settings)) -> FileSystemStore:
    return FileSystemStore(str(settings.sites_dir))


def get_site_redirects(settings: Settings = Depends(get_settings)) -> SQLiteSiteRedirectRepo:
    return SQLiteSiteRedirectRepo(settings.db_path)


def get_response_cache() -> InMemoryResponseCache:
    return _response_cache


def get_purge_token(settings: Settings = Depends(get_settings)) -> str | None:
    return settings.purge_token
