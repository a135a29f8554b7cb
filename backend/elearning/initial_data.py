"""
Create tables and seed initial data for the Visnet E-Learning API.

Usage: ``elearning-init-db [--reset]``
"""

import argparse
import logging

from elearning.core.database import DatabaseManager, SessionLocal, init_db
from elearning.core.logging import setup_logging


logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Create tables and seed initial data")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="drop every table before recreating it"
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="print row counts per table afterwards"
    )
    args = parser.parse_args()

    setup_logging()

    if args.reset:
        DatabaseManager.reset_database()
    else:
        DatabaseManager.create_all_tables()
        db = SessionLocal()
        try:
            init_db(db)
        finally:
            db.close()
    logger.info("Initial data created")

    if args.stats:
        for table, info in DatabaseManager.get_table_stats().items():
            logger.info(f"{table}: {info['count']} rows")


if __name__ == "__main__":
    main()
