import pytest
from datetime import datetime, timedelta, timezone

from importer.importer import MetricImporter
from core.exceptions import StoreError, QueryError
from tests.fakes import FakeChunker, InMemorySink


UTC = timezone.utc


@pytest.mark.asyncio
async def test_import_failure_recovery_resume(importer_config, now):
    """
    Failure Recovery Test:
    1. First import stores one chunk, then the second write fails
    2. Checkpoint becomes unknown
    3. Next import re-reads the latest stored timestamp and resumes after it
    4. Following imports continue from the in-memory checkpoint
    """
    sink = InMemorySink(fail_writes={2})
    chunker = FakeChunker()
    clock_time = [now]
    importer = MetricImporter(importer_config, chunker, sink, clock=lambda: clock_time[0])

    # -------------------------------------------------------
    # STEP 1: Backfill fails half way
    # -------------------------------------------------------
    with pytest.raises(StoreError) as exc_info:
        await importer.import_from_last_timestamp()

    assert importer.last_timestamp is None
    assert [r.start for r in exc_info.value.outcome.time_ranges] == [datetime(2023, 1, 1, 1, 0, tzinfo=UTC)]
    stored = sink.tables["node_cpu_raw"]
    assert [r.timestamp for r in stored] == [
        datetime(2023, 1, 1, 1, 0, tzinfo=UTC),
        datetime(2023, 1, 1, 1, 5, tzinfo=UTC),
    ]

    # -------------------------------------------------------
    # STEP 2: Retry resumes from storage
    # -------------------------------------------------------
    outcome = await importer.import_from_last_timestamp()

    assert sink.max_timestamp_calls == 2
    assert chunker.calls[-1]["start"] == datetime(2023, 1, 1, 1, 10, tzinfo=UTC)
    assert [r.end for r in outcome.time_ranges] == [datetime(2023, 1, 1, 2, 10, tzinfo=UTC)]
    assert importer.last_timestamp == datetime(2023, 1, 1, 2, 10, tzinfo=UTC)

    # -------------------------------------------------------
    # STEP 3: Time passes, the in-memory checkpoint is used
    # -------------------------------------------------------
    clock_time[0] = now + timedelta(hours=1)
    outcome = await importer.import_from_last_timestamp()

    assert sink.max_timestamp_calls == 2
    assert chunker.calls[-1]["start"] == datetime(2023, 1, 1, 2, 15, tzinfo=UTC)
    assert len(outcome.time_ranges) == 1

    timestamps = [r.timestamp for r in sink.tables["node_cpu_raw"]]
    assert timestamps == sorted(timestamps)
    assert len(timestamps) == len(set(timestamps))


@pytest.mark.asyncio
async def test_retry_after_failure_with_nothing_stored_backfills_again(importer_config, now):
    """
    Nothing reached storage before the failure, so the retry cannot resume
    from a stored timestamp and backfills the same window again.
    """
    sink = InMemorySink()
    chunker = FakeChunker(result_for=lambda tr: [], fail_on_query=2)
    importer = MetricImporter(importer_config, chunker, sink, clock=lambda: now)

    with pytest.raises(QueryError):
        await importer.import_from_last_timestamp()

    chunker.fail_on_query = None
    await importer.import_from_last_timestamp()

    assert chunker.calls[0]["start"] == chunker.calls[1]["start"]
    assert importer.last_timestamp == now
