"""
Create metric tables for the given table names
"""

import argparse
import asyncio
import logging

from core.config import settings
from core.database import create_engine, create_session_maker
from core.logging import setup_logging
from importer.loaders.postgres_store import PostgresMetricStore

logger = logging.getLogger(__name__)


async def init_database(table_names):
    logger.info("Connecting to database...")
    engine = create_engine(settings.DATABASE_URL)
    store = PostgresMetricStore(create_session_maker(engine))

    try:
        for table_name in table_names:
            await store.create_table(table_name)
        logger.info(f"Created {len(table_names)} metric tables.")
    finally:
        await engine.dispose()


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("table_names", nargs="+", help="metric tables to create")
    args = parser.parse_args(argv)

    setup_logging()
    asyncio.run(init_database(args.table_names))


if __name__ == "__main__":
    main()
