"""
Health check endpoint with importer checkpoint status
"""

from typing import Dict
from fastapi import APIRouter, Depends
from api.dependencies import get_importers
from schemas.api import HealthCheckResponse, ImporterStatus
from importer.importer import MetricImporter
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(importers: Dict[str, MetricImporter] = Depends(get_importers)):
    """
    Health check endpoint.

    Reports "degraded" while any idle importer has no known checkpoint, which
    is the case after a failed import until the next one succeeds.
    """
    statuses = [ImporterStatus.from_importer(i) for i in importers.values()]
    unknown = sum(1 for s in statuses if s.last_timestamp is None and not s.importing)

    return HealthCheckResponse(
        status="degraded" if unknown else "healthy",
        importers=statuses,
        total_importers=len(statuses),
        unknown_checkpoints=unknown,
    )
