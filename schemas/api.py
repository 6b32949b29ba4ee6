"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from schemas.metrics import TimeRange, to_utc


# ============================================================================
# Import Schemas
# ============================================================================

class ImporterStatus(BaseModel):
    """State of one registered importer"""
    table_name: str
    query: str
    chunk_size_seconds: float
    step_size_seconds: float
    last_timestamp: Optional[datetime] = None
    importing: bool = False

    @classmethod
    def from_importer(cls, importer) -> "ImporterStatus":
        config = importer.config
        return cls(
            table_name=config.table_name,
            query=config.query,
            chunk_size_seconds=config.chunk_size.total_seconds(),
            step_size_seconds=config.step_size.total_seconds(),
            last_timestamp=importer.last_timestamp,
            importing=importer.is_importing,
        )


class CollectRequest(BaseModel):
    """
    Trigger an import.

    Give both ``start`` and ``end`` to import an explicit span; omit both to
    import from the last stored timestamp.
    """
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    allow_incomplete_chunks: bool = False

    @validator("start", "end")
    def bounds_in_utc(cls, v):
        # naive bounds are UTC, same as the importer reads them
        return to_utc(v) if v is not None else v

    @validator("end", always=True)
    def bounds_given_together(cls, v, values):
        if (values.get("start") is None) != (v is None):
            raise ValueError("start and end must be given together")
        if v is not None and v <= values["start"]:
            raise ValueError("end must be after start")
        return v


class CollectResponse(BaseModel):
    table_name: str
    time_ranges: List[TimeRange] = Field(default_factory=list)
    records_written: int = 0
    last_timestamp: Optional[datetime] = None
    error: Optional[Dict[str, Any]] = None


# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Overall status: healthy or degraded")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    importers: List[ImporterStatus] = Field(default_factory=list)
    total_importers: int = 0
    unknown_checkpoints: int = 0
