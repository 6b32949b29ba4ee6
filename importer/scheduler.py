import logging
from typing import Dict, Iterable
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from core.config import settings
from importer.importer import MetricImporter

logger = logging.getLogger(__name__)


class ImportScheduler:
    """Re-invokes every registered importer on a fixed interval"""

    def __init__(self, importers: Iterable[MetricImporter], interval_seconds: int = None):
        self.scheduler = AsyncIOScheduler()
        self.importers: Dict[str, MetricImporter] = {i.table_name: i for i in importers}
        self.interval_seconds = interval_seconds or settings.IMPORT_INTERVAL_SECONDS

    async def run_import_job(self, table_name: str):
        """Job to import the latest metrics for one table"""
        importer = self.importers[table_name]
        logger.debug(f"Scheduler: Starting import for {table_name}")
        try:
            outcome = await importer.import_from_last_timestamp(allow_incomplete_chunks=False)
            logger.debug(
                f"Scheduler: Imported {outcome.records_written} metrics "
                f"over {len(outcome.time_ranges)} time ranges into {table_name}"
            )
        except Exception as e:
            # the next tick retries from the re-derived checkpoint
            logger.error(f"Scheduler: Import for {table_name} failed - {e}")

    def start(self):
        """Start the scheduler"""
        for table_name in self.importers:
            self.scheduler.add_job(
                self.run_import_job,
                trigger=IntervalTrigger(seconds=self.interval_seconds),
                args=[table_name],
                id=f"import_{table_name}",
                max_instances=1,
                coalesce=True,
                replace_existing=True
            )
        self.scheduler.start()
        logger.info(f"Import scheduler started for {len(self.importers)} tables")

    def stop(self):
        self.scheduler.shutdown()
        logger.info("Import scheduler stopped")
