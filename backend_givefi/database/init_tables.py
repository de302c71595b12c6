"""
Initialize GiveFi ledger tables (users, donations).

Safe to run multiple times. Uses DATABASE_URL (or --database-url).

    python -m backend_givefi.database.init_tables
"""

from __future__ import annotations

import argparse
import os
import sys

from backend_givefi.givefi_logging import get_logger

logger = get_logger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create GiveFi ledger tables if they do not exist.")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    args = parser.parse_args(argv)
    if args.database_url:
        os.environ["DATABASE_URL"] = args.database_url
        os.environ.pop("GIVEFI_DB_PATH", None)

    from backend_givefi.database import init_db, reset_engine

    reset_engine()
    try:
        init_db()
    except Exception as e:
        logger.error("init_tables_failed", error=str(e))
        return 1
    logger.info("init_tables_done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
