"""
Custom exceptions for the metric importer with structured error context.

Every failure the importer surfaces to its caller is one of these. Each
exception carries context for logging, and failures raised out of a batch
also carry the partial ``ImportOutcome`` (the time ranges processed before
the failure) on ``outcome``.

Exception Hierarchy:
    ImporterException (base)
    ├── CheckpointError
    ├── QueryError
    ├── StoreError
    └── ConfigurationError
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ImporterException(Exception):
    """
    Base exception for all importer errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (table, time range, etc.)
        original_exception: The original exception that was caught (if any)
        outcome: Partial import outcome, set when raised out of a batch
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)
        self.outcome = None

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/API responses."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": {k: str(v) for k, v in self.context.items()},
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


class CheckpointError(ImporterException):
    """
    Raised when the resume point for a table cannot be determined.

    Context should include:
        - table_name: Table whose latest timestamp was requested
        - operation: The lookup that failed
    """
    pass


class QueryError(ImporterException):
    """
    Raised when querying or chunk iteration fails mid-batch.

    Context should include:
        - table_name: Target table of the batch
        - start / end: Span of the batch
    """
    pass


class StoreError(ImporterException):
    """
    Raised when writing metric records to storage fails.

    Context should include:
        - table_name: Name of the table
        - query_begin / query_end: Time range whose records were being stored
        - records: Number of records in the failed write
    """
    pass


class ConfigurationError(ImporterException):
    """Raised when importers are registered with conflicting settings, such as two importers for one table."""
    pass
