"""
MetricImporter - incremental, resumable import of monitoring metrics.

The importer remembers the last timestamp it stored for its table and the
next import starts from there. When that timestamp is unknown (first run,
or the previous batch failed) it is recovered from storage. Each call is
bounded: it never covers more than ``MAX_CHUNK_DURATION`` of catch-up, and
never queries more than ``max_query_range_duration`` at once.
"""

from typing import Callable, Optional
from datetime import datetime, timedelta, timezone
from importer.base import RangeChunker, MetricSink
from importer.batch import BatchImporter
from importer.checkpoint import CheckpointResolver
from importer.state import ImporterState
from schemas.metrics import ImporterConfig, ImportOutcome, to_utc
from core.exceptions import ConfigurationError
import asyncio
import logging

logger = logging.getLogger(__name__)

# cap on how far a single import_from_last_timestamp call catches up
MAX_CHUNK_DURATION = timedelta(hours=24)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MetricImporter:
    """
    Imports the results of one query into one table.

    At most one import runs at a time per instance; concurrent calls wait
    for the lock in order and are never rejected.
    """

    def __init__(
        self,
        config: ImporterConfig,
        chunker: RangeChunker,
        sink: MetricSink,
        clock: Callable[[], datetime] = utc_now
    ):
        self.clock = clock
        self._state = ImporterState(config)
        self._import_lock = asyncio.Lock()
        self._resolver = CheckpointResolver(sink)
        self._batch = BatchImporter(chunker, sink, self._state)

    @property
    def config(self) -> ImporterConfig:
        return self._state.config

    @property
    def table_name(self) -> str:
        return self._state.config.table_name

    @property
    def last_timestamp(self) -> Optional[datetime]:
        return self._state.checkpoint

    @property
    def is_importing(self) -> bool:
        return self._import_lock.locked()

    async def update_config(self, config: ImporterConfig):
        """
        Replace the configuration once any running import has finished.

        The table name is fixed at construction; importers are registered
        under it.

        Raises:
            ConfigurationError: The new config names a different table
        """
        if config.table_name != self.table_name:
            raise ConfigurationError(
                "Importer table name cannot be changed",
                context={"table_name": self.table_name, "new_table_name": config.table_name}
            )
        async with self._import_lock:
            self._state.replace_config(config)

    async def import_from_last_timestamp(self, allow_incomplete_chunks: bool = False) -> ImportOutcome:
        """
        Import everything since the last stored timestamp up to now.

        Start of the window:
        - known checkpoint: checkpoint + step size, so the last stored sample
          is not imported twice
        - table has no data: now - 2 * chunk size; the newest chunk ends at
          "now" and is usually incomplete, so this backfills the one before it
        The window is cut to MAX_CHUNK_DURATION when the importer is far
        behind; later calls pick up the rest.

        Raises:
            CheckpointError: The last timestamp could not be read from storage
            QueryError, StoreError: The batch failed; the checkpoint is reset
        """
        async with self._import_lock:
            config = self._state.config
            logger.debug(f"ImportFromLastTimestamp started for table {config.table_name}")

            end_time = to_utc(self.clock())

            if not self._state.checkpoint_known:
                logger.debug(f"last timestamp for table {config.table_name} isn't known, querying for timestamp")
                try:
                    last_timestamp = await self._resolver.resolve(config.table_name)
                except Exception as e:
                    logger.error(f"unable to get last timestamp for table {config.table_name}: {e}")
                    raise
                if last_timestamp is not None:
                    self._state.advance(last_timestamp)

            if self._state.checkpoint_known:
                logger.debug(f"last timestamp for table {config.table_name}: {self._state.checkpoint}")
                start_time = self._state.checkpoint + config.step_size
            else:
                logger.debug(f"no data in table {config.table_name} yet")
                start_time = end_time - 2 * config.chunk_size

            if end_time - start_time >= MAX_CHUNK_DURATION:
                end_time = start_time + MAX_CHUNK_DURATION

            try:
                return await self._batch.run(start_time, end_time, allow_incomplete_chunks)
            finally:
                logger.debug(f"ImportFromLastTimestamp finished for table {config.table_name}")

    async def import_metrics(
        self,
        start_time: datetime,
        end_time: datetime,
        allow_incomplete_chunks: bool = False
    ) -> ImportOutcome:
        """Import an explicit ``[start_time, end_time)`` span; naive bounds are taken as UTC"""
        start_time, end_time = to_utc(start_time), to_utc(end_time)
        async with self._import_lock:
            table_name = self._state.config.table_name
            logger.debug(f"Import started for table {table_name}: {start_time} to {end_time}")
            try:
                return await self._batch.run(start_time, end_time, allow_incomplete_chunks)
            finally:
                logger.debug(f"Import finished for table {table_name}")
