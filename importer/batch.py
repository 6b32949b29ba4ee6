"""
Import one bounded span of metrics and move the checkpoint accordingly
"""

from typing import Optional
from datetime import datetime, timedelta
from importer.base import RangeChunker, MetricSink
from importer.handlers import ImportRun, MetricResultHandler
from importer.state import ImporterState
from schemas.metrics import ImportOutcome
from core.exceptions import ImporterException, QueryError
import asyncio
import logging

logger = logging.getLogger(__name__)


def clamp_query_range(
    start: datetime,
    end: datetime,
    max_query_range_duration: Optional[timedelta]
) -> datetime:
    """Return ``end`` limited to ``start + max_query_range_duration`` (None/zero disables)"""
    if max_query_range_duration and end - start > max_query_range_duration:
        return start + max_query_range_duration
    return end


class BatchImporter:
    """
    Runs the chunker over a span and updates the importer state.

    Must only be called while the owning importer's lock is held.

    Checkpoint policy:
    - success with processed ranges: checkpoint moves to the end of the last range
    - success with nothing processed: checkpoint unchanged
    - any failure, cancellation included: checkpoint becomes unknown, since it
      is not known how much of the batch reached storage
    """

    def __init__(self, chunker: RangeChunker, sink: MetricSink, state: ImporterState):
        self.chunker = chunker
        self.state = state
        self.result_handler = MetricResultHandler(sink)

    async def run(
        self,
        start: datetime,
        end: datetime,
        allow_incomplete_chunks: bool
    ) -> ImportOutcome:
        config = self.state.config
        run_logger = logging.LoggerAdapter(logger, {
            "table_name": config.table_name,
            "start_time": start,
            "end_time": end,
        })

        clamped_end = clamp_query_range(start, end, config.max_query_range_duration)
        if clamped_end != end:
            run_logger.warning(
                f"time range {start} to {end} exceeds max query range duration "
                f"{config.max_query_range_duration}, new end time: {clamped_end}"
            )
            end = clamped_end

        run = ImportRun(config.table_name)

        try:
            time_ranges = await self.chunker.chunk(
                config.query,
                start,
                end,
                config.chunk_size,
                config.step_size,
                config.max_time_ranges,
                allow_incomplete_chunks,
                self.result_handler.bind(run),
            )

        except asyncio.CancelledError:
            run_logger.warning("import cancelled, resetting last timestamp")
            self.state.invalidate()
            raise

        except Exception as e:
            # storage state is unknown now; the next import re-reads it from the sink
            self.state.invalidate()

            if isinstance(e, ImporterException):
                error = e
            else:
                error = QueryError(
                    "Error collecting metrics",
                    context={
                        "table_name": config.table_name,
                        "start": start,
                        "end": end,
                    },
                    original_exception=e
                )

            error.outcome = ImportOutcome(
                time_ranges=list(run.time_ranges),
                records_written=run.metrics_count,
                error=error,
            )
            logger.error(
                f"error collecting metrics for table {config.table_name}: {error.message}",
                extra={"error_context": error.to_dict()}
            )
            raise error

        outcome = ImportOutcome(
            time_ranges=list(time_ranges),
            records_written=run.metrics_count,
        )
        if outcome.last_timestamp is not None:
            self.state.advance(outcome.last_timestamp)

        return outcome
