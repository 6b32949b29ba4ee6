"""
Store imported metrics in PostgreSQL and report the latest stored timestamp
"""

from typing import List, Optional, Dict, Any
from datetime import datetime
from sqlalchemy import insert, select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from importer.base import MetricSink
from models.metric import metric_table
from schemas.metrics import MetricRecord
from core.config import settings
from core.exceptions import StoreError, CheckpointError
import logging

logger = logging.getLogger(__name__)


class PostgresMetricStore(MetricSink):
    """
    Append metric records to per-target tables.

    Inserts are plain appends: no upsert, no deduplication. Every write opens
    its own session so importers for different tables never share one.
    """

    def __init__(self, session_maker: async_sessionmaker, batch_size: Optional[int] = None):
        self.session_maker = session_maker
        self.batch_size = batch_size or settings.STORE_BATCH_SIZE

    async def create_table(self, table_name: str):
        """Create the metric table if it does not exist yet"""
        table = metric_table(table_name)
        async with self.session_maker() as session:
            conn = await session.connection()
            await conn.run_sync(table.create, checkfirst=True)
            await session.commit()
        logger.info(f"Ensured metric table {table_name} exists")

    async def execute(self, table_name: str, records: List[MetricRecord]) -> None:
        """
        Insert records in batches within a single transaction.

        Raises:
            StoreError: The insert failed; nothing from this call is committed
        """
        if not records:
            return

        table = metric_table(table_name)
        rows = [self._to_row(record) for record in records]

        async with self.session_maker() as session:
            try:
                for i in range(0, len(rows), self.batch_size):
                    await session.execute(insert(table), rows[i:i + self.batch_size])
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreError(
                    f"Failed to insert metrics into table {table_name}",
                    context={
                        "table_name": table_name,
                        "operation": "INSERT",
                        "records": len(rows),
                    },
                    original_exception=e
                )

        logger.debug(f"Inserted {len(rows)} rows into {table_name}")

    async def max_timestamp(self, table_name: str) -> Optional[datetime]:
        """
        Raises:
            CheckpointError: The table could not be queried
        """
        table = metric_table(table_name)

        async with self.session_maker() as session:
            try:
                result = await session.execute(select(func.max(table.c.timestamp)))
            except SQLAlchemyError as e:
                raise CheckpointError(
                    f"Failed to get last timestamp for table {table_name}",
                    context={
                        "table_name": table_name,
                        "operation": "SELECT max(timestamp)",
                    },
                    original_exception=e
                )
            return result.scalar()

    @staticmethod
    def _to_row(record: MetricRecord) -> Dict[str, Any]:
        return {
            "amount": record.amount,
            "timestamp": record.timestamp,
            "timeprecision": record.step_size.total_seconds(),
            "labels": record.labels,
            "dt": record.timestamp.strftime("%Y-%m-%d"),
        }
