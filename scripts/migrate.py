#!/usr/bin/env python3
"""
Apply, revert or inspect catalog schema migrations.

Usage:
    python scripts/migrate.py upgrade [--target ID] [--database-url URL]
    python scripts/migrate.py downgrade [--target ID] [--database-url URL]
    python scripts/migrate.py status [--database-url URL]

``downgrade`` without ``--target`` reverts every applied migration.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add the src directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from library_catalog.config import get_config
from library_catalog.database import DatabaseManager
from library_catalog.errors import CatalogError
from library_catalog.observability import configure_logging, initialize_observability

logger = logging.getLogger("library_catalog.scripts.migrate")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage the library catalog schema")
    parser.add_argument("command", choices=["upgrade", "downgrade", "status"])
    parser.add_argument(
        "--target",
        help="Migration id to stop at (inclusive for upgrade, kept for downgrade)",
    )
    parser.add_argument(
        "--database-url",
        help="Override default database URL",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for schema management."""
    args = build_parser().parse_args(argv)

    config = get_config()
    configure_logging(config)
    initialize_observability(config)

    db_manager = DatabaseManager(args.database_url, config=config)
    if not db_manager.verify_connection():
        logger.error("Failed to connect to database")
        return 1

    runner = db_manager.migration_runner()
    try:
        if args.command == "upgrade":
            applied = runner.upgrade(args.target)
            logger.info("Applied %d migration(s): %s", len(applied), ", ".join(applied) or "-")
        elif args.command == "downgrade":
            reverted = runner.downgrade(args.target)
            logger.info("Reverted %d migration(s): %s", len(reverted), ", ".join(reverted) or "-")

        status = runner.status()
        print(f"Current version: {status.current or '(empty)'}")
        for migration_id in status.applied:
            print(f"  [x] {migration_id}")
        for migration_id in status.pending:
            print(f"  [ ] {migration_id}")
    except CatalogError:
        logger.exception("Migration command failed")
        return 1
    finally:
        db_manager.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
