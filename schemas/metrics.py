"""
Pydantic schemas for importer configuration, query results and metric records
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict
from datetime import datetime, timedelta, timezone
from core.exceptions import ImporterException


def to_utc(ts: datetime) -> datetime:
    """Convert to UTC; naive timestamps are taken to be UTC already"""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class ImporterConfig(BaseModel):
    """
    Configuration of one importer.

    Only structural validation happens here; nonsensical durations are the
    caller's responsibility.
    """

    query: str
    table_name: str
    chunk_size: timedelta
    step_size: timedelta
    max_time_ranges: int = 0  # 0 means no limit
    max_query_range_duration: Optional[timedelta] = None  # None or zero means no cap

    @classmethod
    def from_settings(cls, query: str, table_name: str, app_settings=None) -> "ImporterConfig":
        """Build a config from the application-wide importer defaults"""
        if app_settings is None:
            from core.config import settings as app_settings

        max_query_range = app_settings.DEFAULT_MAX_QUERY_RANGE_SECONDS
        return cls(
            query=query,
            table_name=table_name,
            chunk_size=timedelta(seconds=app_settings.DEFAULT_CHUNK_SIZE_SECONDS),
            step_size=timedelta(seconds=app_settings.DEFAULT_STEP_SIZE_SECONDS),
            max_time_ranges=app_settings.DEFAULT_MAX_TIME_RANGES,
            max_query_range_duration=timedelta(seconds=max_query_range) if max_query_range else None,
        )


class TimeRange(BaseModel):
    """A ``[start, end)`` query window with its step size"""

    start: datetime
    end: datetime
    step: timedelta

    class Config:
        frozen = True


class Sample(BaseModel):
    timestamp: datetime
    value: float


class SampleStream(BaseModel):
    """
    One labelled series of samples from a range query.

    Accepts either ``Sample`` objects/dicts or the Prometheus matrix
    encoding ``[[<unix seconds>, "<value>"], ...]`` for ``values``.
    """

    metric: Dict[str, str] = Field(default_factory=dict)
    values: List[Sample] = Field(default_factory=list)

    @validator("values", pre=True)
    def parse_prometheus_pairs(cls, v):
        parsed = []
        for item in v or []:
            if isinstance(item, (list, tuple)):
                ts, value = item
                parsed.append({
                    "timestamp": datetime.fromtimestamp(float(ts), tz=timezone.utc),
                    "value": float(value),
                })
            else:
                parsed.append(item)
        return parsed


QueryResult = List[SampleStream]


class MetricRecord(BaseModel):
    """A single sample ready to be appended to a metric table"""

    labels: Dict[str, str]
    amount: float
    step_size: timedelta
    timestamp: datetime

    class Config:
        frozen = True


class ImportOutcome(BaseModel):
    """Time ranges processed by one import and the error that stopped it, if any"""

    time_ranges: List[TimeRange] = Field(default_factory=list)
    records_written: int = 0
    error: Optional[ImporterException] = None  # None on success

    class Config:
        arbitrary_types_allowed = True

    @property
    def last_timestamp(self) -> Optional[datetime]:
        if not self.time_ranges:
            return None
        return self.time_ranges[-1].end
