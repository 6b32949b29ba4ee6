"""
SQLAlchemy table definitions.

Models:
    base: Shared metadata
    metric: Append-only metric table factory (one table per import target)

Usage:
    from models.metric import metric_table

    table = metric_table("pod_cpu_usage_raw")
    async with engine.begin() as conn:
        await conn.run_sync(table.create, checkfirst=True)
"""

from models.base import metadata
from models.metric import metric_table

__all__ = [
    "metadata",
    "metric_table",
]
