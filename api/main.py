"""
FastAPI application factory
"""

from typing import Iterable, Optional
from fastapi import FastAPI
from api.routes import health, imports
from importer.importer import MetricImporter
from importer.scheduler import ImportScheduler
from core.config import settings
from core.exceptions import ConfigurationError
import logging

logger = logging.getLogger(__name__)


def create_app(
    importers: Iterable[MetricImporter] = (),
    scheduler: Optional[ImportScheduler] = None
) -> FastAPI:
    """
    Build the API around a set of importers.

    When a scheduler is given it is started and stopped with the application.
    Raises ConfigurationError if two importers write the same table.
    """
    registered = {}
    for importer in importers:
        if importer.table_name in registered:
            raise ConfigurationError(
                "Duplicate importer table name",
                context={"table_name": importer.table_name}
            )
        registered[importer.table_name] = importer

    app = FastAPI(
        title="Metric Importer API",
        description="Trigger and inspect incremental metric imports",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.importers = registered

    app.include_router(health.router)
    app.include_router(imports.router)

    @app.on_event("startup")
    async def startup_event():
        logger.info("Starting Metric Importer API")
        logger.info(f"Environment: {settings.ENVIRONMENT}")
        logger.info(f"Importers: {', '.join(app.state.importers) or 'none'}")
        if scheduler is not None:
            scheduler.start()

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down Metric Importer API")
        if scheduler is not None:
            scheduler.stop()

    @app.get("/")
    async def root():
        return {
            "message": "Metric Importer API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/health",
            "endpoints": {
                "imports": "/imports",
            }
        }

    return app
