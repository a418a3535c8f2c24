"""
Core utilities and configuration for the GA install sync.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    database: Engine and session factory construction
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import Settings, settings
    from core.database import create_engine_from_settings, create_session_factory
    from core.exceptions import FetchError, SinkError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging(settings)

    # Build engine and session factory
    engine = create_engine_from_settings(settings)
    session_factory = create_session_factory(engine)
    async with session_factory() as session:
        # Perform database operations
        pass
"""

__all__ = [
    "Settings",
    "settings",
    "create_engine_from_settings",
    "create_session_factory",
    "setup_logging",
    # Exceptions
    "ETLException",
    "ExtractionError",
    "FetchError",
    "AuthenticationError",
    "RateLimitError",
    "TransformationError",
    "LoadError",
    "SinkError",
    "DatabaseConnectionError",
    "ExportError",
]
