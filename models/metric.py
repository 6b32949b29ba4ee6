from sqlalchemy import Column, Table, Float, DateTime, String, Index, MetaData
from sqlalchemy.dialects.postgresql import JSONB
from models.base import metadata as default_metadata


def metric_table(table_name: str, metadata: MetaData = None) -> Table:
    """
    Return the append-only table that stores imported samples.

    Layout:
    - amount: the sample value
    - timestamp: sample time (UTC)
    - timeprecision: step size of the query that produced the sample, in seconds
    - labels: the series' label set
    - dt: ``YYYY-MM-DD`` partition key derived from ``timestamp``

    There is no uniqueness constraint; replays after a failed batch append
    duplicate rows.
    """
    metadata = metadata if metadata is not None else default_metadata

    if table_name in metadata.tables:
        return metadata.tables[table_name]

    return Table(
        table_name,
        metadata,
        Column("amount", Float, nullable=False),
        Column("timestamp", DateTime(timezone=True), nullable=False),
        Column("timeprecision", Float, nullable=False),
        Column("labels", JSONB, nullable=False),
        Column("dt", String(10), nullable=False),
        Index(f"idx_{table_name}_timestamp", "timestamp"),
    )
