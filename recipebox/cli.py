"""Database administration commands.

Usage:
    recipebox-admin validate
    recipebox-admin reset-recipes --yes
"""

import argparse
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from .config import get_settings
from .database import get_db_session, init_db
from .fts import create_fts_index, rebuild_fts_index
from .maintenance import (
    cleanup_orphaned_data,
    reset_recipe_data,
    reset_user_data,
    validate_database_integrity,
)

logger = logging.getLogger(__name__)

DESTRUCTIVE_COMMANDS = {"reset-recipes", "reset-users"}


def cmd_init_db(args) -> int:
    init_db()
    print("Database schema and FTS index created")
    return 0


def cmd_reset_recipes(args) -> int:
    with get_db_session() as db:
        reset_recipe_data(db)
    print("Recipe data reset completed (users preserved)")
    return 0


def cmd_reset_users(args) -> int:
    with get_db_session() as db:
        reset_user_data(db)
    print("User data reset completed")
    return 0


def cmd_validate(args) -> int:
    with get_db_session() as db:
        report = validate_database_integrity(db)
    if report.is_valid:
        print("Database integrity check passed")
        return 0
    print("Database integrity issues found:")
    for issue in report.issues:
        print(f"  - {issue}")
    return 1


def cmd_cleanup(args) -> int:
    with get_db_session() as db:
        report = cleanup_orphaned_data(db)
    print(f"Cleanup completed: {report.total} items cleaned")
    for detail in report.details:
        print(f"  - {detail}")
    if not report.fts_ok:
        print("  - FTS table is missing or corrupted; run setup-fts")
    return 0


def cmd_setup_fts(args) -> int:
    with get_db_session() as db:
        create_fts_index(db)
    print("FTS setup completed")
    return 0


def cmd_rebuild_fts(args) -> int:
    with get_db_session() as db:
        count = rebuild_fts_index(db)
    print(f"FTS index rebuild completed: {count} recipes indexed")
    return 0


COMMANDS = {
    "init-db": (cmd_init_db, "Create tables and the FTS index on a fresh database"),
    "reset-recipes": (cmd_reset_recipes, "Delete all recipe data, keep users (DESTRUCTIVE)"),
    "reset-users": (cmd_reset_users, "Delete all recipe and user data (DESTRUCTIVE)"),
    "validate": (cmd_validate, "Report orphaned rows and FTS health"),
    "cleanup": (cmd_cleanup, "Delete orphaned rows"),
    "setup-fts": (cmd_setup_fts, "Create the FTS table and triggers"),
    "rebuild-fts": (cmd_rebuild_fts, "Repopulate the FTS index from recipes"),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="recipebox-admin", description="recipebox database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, (_, help_text) in COMMANDS.items():
        sub = subparsers.add_parser(name, help=help_text)
        if name in DESTRUCTIVE_COMMANDS:
            sub.add_argument("--yes", action="store_true", help="Confirm the destructive operation")
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = build_parser().parse_args(argv)

    if args.command in DESTRUCTIVE_COMMANDS and not args.yes:
        print(f"Refusing to run {args.command} without --yes", file=sys.stderr)
        return 2

    handler, _ = COMMANDS[args.command]
    try:
        return handler(args)
    except SQLAlchemyError as e:
        logger.error(f"Command {args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
