"""
Custom exceptions for the GA sync pipeline with structured error context.

This module provides the exception hierarchy for errors raised while
fetching the analytics report, writing it to the database and exporting
the CSV backup. Each exception carries context information for logging.

Exception Hierarchy:
    ETLException (base)
    ├── ExtractionError
    │   └── FetchError
    │       ├── AuthenticationError
    │       └── RateLimitError
    ├── TransformationError
    ├── LoadError
    │   └── SinkError
    │       └── DatabaseConnectionError
    └── ExportError
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ETLException(Exception):
    """
    Base exception for all ETL-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (property, table, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        # Add timestamp to context
        self.context["error_timestamp"] = self.timestamp.isoformat()

        # Chain original exception if provided
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
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(ETLException):
    """Base exception for data extraction failures."""
    pass


class FetchError(ExtractionError):
    """
    Exception raised when the analytics report request fails.

    Context should include:
        - property_id: The analytics property queried
        - api_url: The endpoint that failed
        - status_code: HTTP status code (if applicable)
        - response_body: Response body (truncated if large)
    """
    pass


class AuthenticationError(FetchError):
    """Authentication failures (HTTP 401, 403)."""
    pass


class RateLimitError(FetchError):
    """Quota exhausted (HTTP 429). Not retried."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        retry_after: Optional[int] = None
    ):
        super().__init__(message, context, original_exception)
        self.retry_after = retry_after  # Seconds suggested by the server
        if retry_after:
            self.context["retry_after"] = retry_after


# ============================================================================
# Transformation Errors
# ============================================================================

class TransformationError(ETLException):
    """Unexpected failure while normalizing report rows."""
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(ETLException):
    """Base exception for data loading failures."""
    pass


class SinkError(LoadError):
    """
    Exception raised when the upsert into the sink table fails.

    Context should include:
        - operation: Type of database operation (UPSERT)
        - table_name: Name of the table
        - dialect: Database dialect name
        - batch_size: Number of records in the failed batch
    """
    pass


class DatabaseConnectionError(SinkError):
    """Database connection could not be acquired."""
    pass


# ============================================================================
# Export Errors
# ============================================================================

class ExportError(ETLException):
    """
    Exception raised when the CSV backup cannot be written.

    Non-fatal: the runner logs it and reports it as a warning.

    Context should include:
        - file_path: Target path of the backup file
    """
    pass
