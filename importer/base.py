"""
Contracts for the importer's external collaborators.

The importer never splits spans, talks to the monitoring system or executes
SQL itself. It drives a ``RangeChunker`` with a ``ResultHandler`` and writes
through a ``MetricSink``.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, NamedTuple, Callable, Awaitable
from datetime import datetime, timedelta
from schemas.metrics import TimeRange, QueryResult, MetricRecord


class ResultHandler(NamedTuple):
    """
    The four lifecycle callbacks a chunker invokes.

    - pre_processing(time_ranges): once, before any chunk is queried
    - pre_query(time_range): before each chunk's query
    - post_query(time_range, result): after each chunk's query
    - post_processing(time_ranges): once, after the last chunk (or none)
    """
    pre_processing: Callable[[List[TimeRange]], Awaitable[None]]
    pre_query: Callable[[TimeRange], Awaitable[None]]
    post_query: Callable[[TimeRange, QueryResult], Awaitable[None]]
    post_processing: Callable[[List[TimeRange]], Awaitable[None]]


class RangeChunker(ABC):
    """
    Splits a span into ordered sub-windows, queries each one and drives the
    callback protocol.

    Implementations must call ``pre_processing`` exactly once before any
    chunk, ``pre_query`` then ``post_query`` for each chunk in order, and
    ``post_processing`` exactly once afterwards. Any callback error aborts the
    remaining chunks and is raised to the caller. The returned ranges may be
    fewer than the span implies when bounded by ``max_time_ranges`` or by the
    incomplete-chunk policy.
    """

    @abstractmethod
    async def chunk(
        self,
        query: str,
        start: datetime,
        end: datetime,
        chunk_size: timedelta,
        step_size: timedelta,
        max_time_ranges: int,
        allow_incomplete_chunks: bool,
        handlers: ResultHandler
    ) -> List[TimeRange]:
        pass


class MetricSink(ABC):
    """
    Append-only storage for metric records.

    ``execute`` gives no deduplication guarantee: a batch that failed half way
    is replayed in full on the next import.
    """

    @abstractmethod
    async def execute(self, table_name: str, records: List[MetricRecord]) -> None:
        """Append ``records`` to ``table_name``"""
        pass

    @abstractmethod
    async def max_timestamp(self, table_name: str) -> Optional[datetime]:
        """Latest stored timestamp in ``table_name``, or None when it holds no data"""
        pass
