"""
Core utilities and configuration for the metric importer.

This package provides foundational components used throughout the importer:

Modules:
    config: Application configuration and environment variable management
    database: Async engine and session factory
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration

Usage:
    from core.config import settings
    from core.database import create_engine, create_session_maker
    from core.exceptions import CheckpointError, StoreError
    from core.logging import setup_logging
"""

from core.config import settings
from core.database import create_engine, create_session_maker
from core.logging import setup_logging
from core.exceptions import (
    ImporterException,
    CheckpointError,
    QueryError,
    StoreError,
    ConfigurationError,
)

__all__ = [
    "settings",
    "create_engine",
    "create_session_maker",
    "setup_logging",
    # Exceptions
    "ImporterException",
    "CheckpointError",
    "QueryError",
    "StoreError",
    "ConfigurationError",
]
