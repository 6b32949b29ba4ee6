"""
Pydantic schemas for data validation and serialization.

Schemas:
    metrics: Importer config, time ranges, query results, metric records
        and import outcomes
    api: API endpoint request/response schemas

Usage:
    from schemas.metrics import ImporterConfig, TimeRange, MetricRecord
    from schemas.api import CollectRequest, ImporterStatus

Example:
    config = ImporterConfig(
        query="sum(rate(container_cpu_usage_seconds_total[1m])) by (pod)",
        table_name="pod_cpu_usage_raw",
        chunk_size=timedelta(minutes=5),
        step_size=timedelta(minutes=1),
    )

Prometheus matrix values are accepted as-is:
    stream = SampleStream(metric={"pod": "web-1"}, values=[[1672531200, "0.25"]])
    assert stream.values[0].value == 0.25
"""

from schemas.metrics import (
    ImporterConfig,
    TimeRange,
    Sample,
    SampleStream,
    QueryResult,
    MetricRecord,
    ImportOutcome,
)

__all__ = [
    "ImporterConfig",
    "TimeRange",
    "Sample",
    "SampleStream",
    "QueryResult",
    "MetricRecord",
    "ImportOutcome",
]
