"""
Seed tenant configuration into the edge database.

Usage:
    python seed_db.py hostname example.com
    python seed_db.py list example.com news --confirm link
    python seed_db.py redirect example.com/old/index.html https://example.com/new/
"""

from __future__ import annotations

import argparse
import logging
import sys

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite_db import (
    SQLiteHostnameConfigRepo,
    SQLiteListConfigRepo,
    SQLiteSiteRedirectRepo,
)
from src.api.deps import Settings
from src.core.entities import EmailConfirm, HostnameConfig, ListConfig
from src.core.ids import generate_id
from src.core.ports.db import UniqueConstraintError

logger = logging.getLogger("seed_db")


class SeedError(Exception):
    """Seeding request refers to configuration that does not exist."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed edge service configuration")
    sub = parser.add_subparsers(dest="command", required=True)

    hostname = sub.add_parser("hostname", help="Register a tenant hostname")
    hostname.add_argument("hostname")
    hostname.add_argument("--recaptcha-secret", default=None)

    list_cmd = sub.add_parser("list", help="Configure a newsletter list")
    list_cmd.add_argument("hostname")
    list_cmd.add_argument("list_name")
    list_cmd.add_argument("--confirm", choices=[c.value for c in EmailConfirm], default=None)

    redirect = sub.add_parser("redirect", help="Add or replace a static site redirect")
    redirect.add_argument("source", help="<hostname><normalized path>")
    redirect.add_argument("target")

    return parser


def seed(args: argparse.Namespace, settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()

    if args.command == "hostname":
        config = HostnameConfig(hostname=args.hostname, google_recaptcha_secret=args.recaptcha_secret)
        repo = SQLiteHostnameConfigRepo(settings.db_path)
        try:
            repo.insert(config)
            logger.info("Registered hostname %s", args.hostname)
        except UniqueConstraintError:
            repo.update(config)
            logger.info("Updated hostname %s", args.hostname)

    elif args.command == "list":
        if SQLiteHostnameConfigRepo(settings.db_path).get(args.hostname) is None:
            raise SeedError(f"Unknown hostname {args.hostname}; register it first")
        SQLiteListConfigRepo(settings.db_path).insert(
            ListConfig(
                id=generate_id(15),
                hostname=args.hostname,
                list_name=args.list_name,
                email_confirm=EmailConfirm(args.confirm) if args.confirm else None,
            )
        )
        logger.info("Configured list %s on %s", args.list_name, args.hostname)

    elif args.command == "redirect":
        SQLiteSiteRedirectRepo(settings.db_path).put(args.source, args.target)
        logger.info("Redirect %s -> %s", args.source, args.target)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    args = build_parser().parse_args(argv)
    try:
        seed(args, Settings())
    except UniqueConstraintError as e:
        logger.error("Already configured: %s", e)
        return 1
    except SeedError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
