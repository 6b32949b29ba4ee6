"""
Unit tests for chunker callbacks and the per-run accumulator
"""

import pytest
from unittest.mock import AsyncMock
from datetime import datetime, timedelta, timezone

from importer.base import ResultHandler
from importer.handlers import ImportRun, MetricResultHandler
from schemas.metrics import TimeRange, SampleStream
from core.exceptions import StoreError
from tests.fakes import two_samples_per_range


UTC = timezone.utc


def make_range(hour):
    return TimeRange(
        start=datetime(2023, 1, 1, hour, tzinfo=UTC),
        end=datetime(2023, 1, 1, hour + 1, tzinfo=UTC),
        step=timedelta(minutes=5),
    )


class TestImportRun:

    def test_reset_clears_counters_and_context(self):
        run = ImportRun("node_cpu_raw")
        run.metrics_count = 10
        run.time_ranges.append(make_range(0))
        run.with_fields(query_begin="x")

        run.reset()

        assert run.metrics_count == 0
        assert run.time_ranges == []
        assert run.log_context == {"table_name": "node_cpu_raw"}

    def test_logger_carries_context(self):
        run = ImportRun("node_cpu_raw")
        run.with_fields(range_begin=datetime(2023, 1, 1, tzinfo=UTC))

        assert run.logger.extra["table_name"] == "node_cpu_raw"
        assert "range_begin" in run.logger.extra


class TestMetricResultHandler:

    @pytest.mark.asyncio
    async def test_post_query_writes_records(self):
        sink = AsyncMock()
        handler = MetricResultHandler(sink)
        run = ImportRun("node_cpu_raw")
        time_range = make_range(0)

        await handler.post_query(run, time_range, two_samples_per_range(time_range))

        sink.execute.assert_awaited_once()
        table_name, records = sink.execute.await_args.args
        assert table_name == "node_cpu_raw"
        assert len(records) == 2
        assert run.metrics_count == 2
        assert run.time_ranges == [time_range]

    @pytest.mark.asyncio
    async def test_post_query_skips_write_without_records(self):
        """Empty results are not written but the range still counts as processed"""
        sink = AsyncMock()
        handler = MetricResultHandler(sink)
        run = ImportRun("node_cpu_raw")
        time_range = make_range(0)

        await handler.post_query(run, time_range, [SampleStream(metric={"pod": "a"}, values=[])])

        sink.execute.assert_not_called()
        assert run.metrics_count == 0
        assert run.time_ranges == [time_range]

    @pytest.mark.asyncio
    async def test_write_failure_raises_store_error(self):
        sink = AsyncMock()
        sink.execute.side_effect = ConnectionError("connection refused")
        handler = MetricResultHandler(sink)
        run = ImportRun("node_cpu_raw")
        time_range = make_range(1)

        with pytest.raises(StoreError) as exc_info:
            await handler.post_query(run, time_range, two_samples_per_range(time_range))

        error = exc_info.value
        assert error.context["table_name"] == "node_cpu_raw"
        assert error.context["query_begin"] == time_range.start
        assert error.context["records"] == 2
        assert isinstance(error.__cause__, ConnectionError)
        assert run.metrics_count == 0
        assert run.time_ranges == []

    @pytest.mark.asyncio
    async def test_store_error_from_sink_gets_range_context(self):
        original = StoreError("Failed to insert metrics", context={"table_name": "node_cpu_raw"})
        sink = AsyncMock()
        sink.execute.side_effect = original
        handler = MetricResultHandler(sink)
        run = ImportRun("node_cpu_raw")
        time_range = make_range(2)

        with pytest.raises(StoreError) as exc_info:
            await handler.post_query(run, time_range, two_samples_per_range(time_range))

        assert exc_info.value is original
        assert original.context["query_end"] == time_range.end

    @pytest.mark.asyncio
    async def test_pre_processing_starts_a_fresh_run(self):
        handler = MetricResultHandler(AsyncMock())
        run = ImportRun("node_cpu_raw")
        run.metrics_count = 7
        run.time_ranges.append(make_range(0))

        await handler.pre_processing(run, [make_range(1), make_range(2)])

        assert run.metrics_count == 0
        assert run.time_ranges == []
        assert run.log_context["range_begin"] == make_range(1).start

    @pytest.mark.asyncio
    async def test_pre_query_adds_chunk_bounds(self):
        handler = MetricResultHandler(AsyncMock())
        run = ImportRun("node_cpu_raw")

        await handler.pre_query(run, make_range(3))

        assert run.log_context["query_begin"] == make_range(3).start
        assert run.log_context["query_end"] == make_range(3).end

    @pytest.mark.asyncio
    async def test_bound_callbacks_share_the_run(self):
        sink = AsyncMock()
        handler = MetricResultHandler(sink)
        run = ImportRun("node_cpu_raw")

        callbacks = handler.bind(run)
        assert isinstance(callbacks, ResultHandler)

        time_ranges = [make_range(0), make_range(1)]
        await callbacks.pre_processing(time_ranges)
        for time_range in time_ranges:
            await callbacks.pre_query(time_range)
            await callbacks.post_query(time_range, two_samples_per_range(time_range))
        await callbacks.post_processing(time_ranges)

        assert run.metrics_count == 4
        assert run.time_ranges == time_ranges
        assert sink.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_separate_runs_do_not_share_counters(self):
        handler = MetricResultHandler(AsyncMock())
        first, second = ImportRun("node_cpu_raw"), ImportRun("node_cpu_raw")
        time_range = make_range(0)

        await handler.bind(first).post_query(time_range, two_samples_per_range(time_range))

        assert first.metrics_count == 2
        assert second.metrics_count == 0
