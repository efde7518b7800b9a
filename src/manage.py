"""Bazaar Ordering database management CLI.

Creates and drops the Ordering schema on the configured SQL provider. Set
PROTEAN_ENV=production to target PostgreSQL (see ordering/domain.toml).

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys

import structlog

logger = structlog.get_logger("manage")


def setup_database():
    from ordering.domain import ordering
    from ordering.utils.db import setup_db

    logger.info("Initializing domain", domain=ordering.name)
    ordering.init()
    setup_db(ordering)
    logger.info("Schema ready", domain=ordering.name)


def drop_database():
    from ordering.domain import ordering
    from ordering.utils.db import drop_db

    logger.info("Initializing domain", domain=ordering.name)
    ordering.init()
    drop_db(ordering)
    logger.info("Schema dropped", domain=ordering.name)


def main():
    parser = argparse.ArgumentParser(description="Bazaar Ordering database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
