"""
Transform range query results into metric records
"""

from typing import List
from schemas.metrics import TimeRange, QueryResult, MetricRecord, to_utc


def query_result_to_metrics(time_range: TimeRange, result: QueryResult) -> List[MetricRecord]:
    """
    Flatten a query result into one record per sample.

    Order follows the result: every sample of the first stream, then every
    sample of the next. Labels are copied per record; timestamps are UTC.
    """
    metrics = []
    for stream in result:
        for sample in stream.values:
            metrics.append(MetricRecord(
                labels=dict(stream.metric),
                amount=sample.value,
                step_size=time_range.step,
                timestamp=to_utc(sample.timestamp),
            ))
    return metrics
