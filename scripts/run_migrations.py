#!/usr/bin/env python3
"""Apply document store migrations with Logfire error tracking."""

import argparse
import sys

import logfire
from alembic import command
from alembic.config import Config

from clubhouse.config import Settings
from clubhouse.util.logging import setup_logging
from clubhouse.util.observability import configure_logfire


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "revision", nargs="?", default="head", help="Target revision (default: head)"
    )
    parser.add_argument(
        "--config", default="alembic.ini", help="Path to the Alembic config file"
    )
    parser.add_argument(
        "--sql", action="store_true", help="Print the SQL instead of executing it"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Upgrade the schema and report failures to Logfire."""
    args = parse_args(argv)
    settings = Settings()
    setup_logging(settings)
    configure_logfire(settings)

    with logfire.span("run_migrations", revision=args.revision, offline=args.sql):
        try:
            command.upgrade(Config(args.config), args.revision, sql=args.sql)
        except Exception as e:
            logfire.error(
                "Database migration failed",
                revision=args.revision,
                error=str(e),
                error_type=type(e).__name__,
                _exc_info=sys.exc_info(),
            )
            # Fail loudly so nothing starts against a half-migrated schema
            raise

    logfire.info("Database migrations applied", revision=args.revision)
    return 0


if __name__ == "__main__":
    sys.exit(main())
