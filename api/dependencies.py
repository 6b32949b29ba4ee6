"""
FastAPI dependencies resolving registered importers
"""

from typing import Dict
from fastapi import Depends, HTTPException, Request
from importer.importer import MetricImporter


def get_importers(request: Request) -> Dict[str, MetricImporter]:
    """Importers registered on the application, keyed by table name"""
    return request.app.state.importers


def get_importer(
    table_name: str,
    importers: Dict[str, MetricImporter] = Depends(get_importers)
) -> MetricImporter:
    importer = importers.get(table_name)
    if importer is None:
        raise HTTPException(status_code=404, detail=f"No importer registered for table {table_name}")
    return importer
