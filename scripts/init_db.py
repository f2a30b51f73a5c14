"""
Create the site tables in the configured database.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from venuecharge.config import get_settings
from venuecharge.db import Base, PostgresStorageClient

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create site database tables")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Override DATABASE_URL",
    )
    args = parser.parse_args()

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    database_url = args.database_url or settings.database_url
    if not database_url:
        logger.error("No database URL given; set DATABASE_URL or pass --database-url")
        return 1

    try:
        PostgresStorageClient(database_url, auto_create_tables=True)
    except Exception as exc:
        logger.exception("Table creation failed: %s", exc)
        return 1

    logger.info("Tables ready: %s", ", ".join(sorted(Base.metadata.tables)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
