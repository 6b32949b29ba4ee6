"""
Endpoints to inspect importers and trigger imports
"""

from typing import Dict, List
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from api.dependencies import get_importers, get_importer
from schemas.api import ImporterStatus, CollectRequest, CollectResponse
from importer.importer import MetricImporter
from core.exceptions import ImporterException
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/imports", tags=["Imports"])


@router.get("", response_model=List[ImporterStatus])
async def list_importers(importers: Dict[str, MetricImporter] = Depends(get_importers)):
    return [ImporterStatus.from_importer(i) for i in importers.values()]


@router.get("/{table_name}", response_model=ImporterStatus)
async def get_importer_status(importer: MetricImporter = Depends(get_importer)):
    return ImporterStatus.from_importer(importer)


@router.post("/{table_name}/collect", response_model=CollectResponse)
async def collect(
    request: CollectRequest,
    importer: MetricImporter = Depends(get_importer)
):
    """
    Run an import now.

    Blocks until any import already running for the table has finished.
    Failures return 502 with the ranges processed before the error.
    """
    logger.info(f"POST /imports/{importer.table_name}/collect")

    try:
        if request.start is not None:
            outcome = await importer.import_metrics(
                request.start, request.end, request.allow_incomplete_chunks
            )
        else:
            outcome = await importer.import_from_last_timestamp(request.allow_incomplete_chunks)

    except ImporterException as e:
        time_ranges = e.outcome.time_ranges if e.outcome else []
        response = CollectResponse(
            table_name=importer.table_name,
            time_ranges=time_ranges,
            records_written=e.outcome.records_written if e.outcome else 0,
            last_timestamp=importer.last_timestamp,
            error=e.to_dict(),
        )
        return JSONResponse(status_code=502, content=response.model_dump(mode="json"))

    return CollectResponse(
        table_name=importer.table_name,
        time_ranges=outcome.time_ranges,
        records_written=outcome.records_written,
        last_timestamp=importer.last_timestamp,
    )
