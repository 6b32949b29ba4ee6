"""
Resolve where the next import of a table should resume
"""

from typing import Optional
from datetime import datetime
from importer.base import MetricSink
from schemas.metrics import to_utc
import logging

logger = logging.getLogger(__name__)


class CheckpointResolver:
    """
    Looks up the latest timestamp already stored for a table.

    Used when an importer's in-memory checkpoint is unknown: at startup and
    after any failed batch. Errors from the sink are not retried here.
    """

    def __init__(self, sink: MetricSink):
        self.sink = sink

    async def resolve(self, table_name: str) -> Optional[datetime]:
        """
        Returns:
            The maximum stored timestamp in UTC, or None when the table holds
            no data yet
        """
        logger.debug(f"Querying latest timestamp for table {table_name}")
        last_timestamp = await self.sink.max_timestamp(table_name)

        if last_timestamp is None:
            logger.debug(f"No data in table {table_name} yet")
            return None

        return to_utc(last_timestamp)
