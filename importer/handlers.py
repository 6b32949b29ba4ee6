"""
Chunker callbacks that transform query results and store them.

Per-run counters and log context live on an ``ImportRun`` created fresh for
every batch. ``MetricResultHandler`` itself holds no run state; ``bind`` ties
its callbacks to one run for the chunker.
"""

from typing import List, Dict, Any
from functools import partial
from importer.base import MetricSink, ResultHandler
from importer.transformer import query_result_to_metrics
from schemas.metrics import TimeRange, QueryResult
from core.exceptions import StoreError
import logging

logger = logging.getLogger(__name__)


class ImportRun:
    """Accumulator for a single batch: records written, ranges stored, log fields"""

    def __init__(self, table_name: str):
        self.table_name = table_name
        self.reset()

    def reset(self):
        self.metrics_count = 0
        self.time_ranges: List[TimeRange] = []
        self.log_context: Dict[str, Any] = {"table_name": self.table_name}

    def with_fields(self, **fields):
        self.log_context.update(fields)

    @property
    def logger(self) -> logging.LoggerAdapter:
        return logging.LoggerAdapter(logger, dict(self.log_context))


class MetricResultHandler:
    """Builds the four chunker callbacks on top of a metric sink"""

    def __init__(self, sink: MetricSink):
        self.sink = sink

    def bind(self, run: ImportRun) -> ResultHandler:
        return ResultHandler(
            pre_processing=partial(self.pre_processing, run),
            pre_query=partial(self.pre_query, run),
            post_query=partial(self.post_query, run),
            post_processing=partial(self.post_processing, run),
        )

    async def pre_processing(self, run: ImportRun, time_ranges: List[TimeRange]):
        run.reset()

        if not time_ranges:
            run.logger.info(f"no time ranges to query yet for table {run.table_name}")
            return

        begin = time_ranges[0].start
        end = time_ranges[-1].end
        run.with_fields(range_begin=begin)
        run.logger.debug(
            f"querying for data between {begin} and {end} (chunks: {len(time_ranges)})"
        )

    async def pre_query(self, run: ImportRun, time_range: TimeRange):
        run.with_fields(query_begin=time_range.start, query_end=time_range.end)
        run.logger.debug(f"querying range {time_range.start} to {time_range.end}")

    async def post_query(self, run: ImportRun, time_range: TimeRange, result: QueryResult):
        metrics = query_result_to_metrics(time_range, result)

        if metrics:
            run.logger.debug(
                f"got {len(metrics)} metrics for time range {time_range.start} to {time_range.end}, "
                f"storing them into table {run.table_name}"
            )
            try:
                await self.sink.execute(run.table_name, metrics)
            except StoreError as e:
                e.context.update(query_begin=time_range.start, query_end=time_range.end)
                raise
            except Exception as e:
                raise StoreError(
                    f"Failed to store metrics into table {run.table_name}",
                    context={
                        "table_name": run.table_name,
                        "query_begin": time_range.start,
                        "query_end": time_range.end,
                        "records": len(metrics),
                    },
                    original_exception=e
                )
            run.logger.debug(f"stored {len(metrics)} metrics into table {run.table_name}")
        else:
            run.logger.debug(f"got 0 metrics for time range {time_range.start} to {time_range.end}")

        run.metrics_count += len(metrics)
        run.time_ranges.append(time_range)

    async def post_processing(self, run: ImportRun, time_ranges: List[TimeRange]):
        if time_ranges:
            begin = time_ranges[0].start
            end = time_ranges[-1].end
            run.logger.info(
                f"stored a total of {run.metrics_count} metrics for data between "
                f"{begin} and {end} into {run.table_name}"
            )
        else:
            run.logger.info(f"no time ranges processed for {run.table_name}")
