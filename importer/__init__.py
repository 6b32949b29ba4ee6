"""
Incremental import of monitoring metrics into append-only tables.

Modules:
    base: Contracts for the range chunker and the storage sink
    transformer: Query result -> metric records
    state: Config and checkpoint holder for one importer
    checkpoint: Resolve the resume point from storage
    handlers: Chunker callbacks and the per-run accumulator
    batch: Run one bounded span and update the checkpoint
    importer: MetricImporter, the public entry points
    scheduler: APScheduler loop re-invoking importers periodically

Subpackages:
    loaders: PostgreSQL-backed metric sink

Usage:
    from importer.importer import MetricImporter
    from importer.loaders.postgres_store import PostgresMetricStore

Example:
    store = PostgresMetricStore(create_session_maker(create_engine()))
    importer = MetricImporter(config, chunker=my_chunker, sink=store)

    outcome = await importer.import_from_last_timestamp()
    print(f"Imported {outcome.records_written} metrics")

Error Handling:
    A failed batch resets the importer's checkpoint; the next call reads the
    latest stored timestamp again. Chunks stored before the failure may be
    written again, so the sink has to accept duplicates.
"""

from importer.base import RangeChunker, MetricSink, ResultHandler
from importer.transformer import query_result_to_metrics
from importer.state import ImporterState
from importer.checkpoint import CheckpointResolver
from importer.handlers import ImportRun, MetricResultHandler
from importer.batch import BatchImporter
from importer.importer import MetricImporter
from importer.loaders.postgres_store import PostgresMetricStore
from importer.scheduler import ImportScheduler

__all__ = [
    "MetricImporter",
    "BatchImporter",
    "CheckpointResolver",
    "ImporterState",
    "MetricResultHandler",
    "ImportRun",
    "ResultHandler",
    "RangeChunker",
    "MetricSink",
    "PostgresMetricStore",
    "ImportScheduler",
    "query_result_to_metrics",
]
