"""
Database engine and session management with SQLAlchemy async
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
)
from core.config import Settings
import logging

logger = logging.getLogger(__name__)


def create_engine_from_settings(settings: Settings, **engine_kwargs) -> AsyncEngine:
    """
    Create the async engine (and its connection pool) for one sync process.
    
    The caller owns the engine and must ``await engine.dispose()`` when done.
    """
    engine_kwargs.setdefault("echo", False)
    engine_kwargs.setdefault("pool_pre_ping", True)
    
    engine = create_async_engine(settings.DATABASE_URL, **engine_kwargs)
    logger.debug(f"Created database engine for dialect '{engine.dialect.name}'")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create session factory bound to the engine"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )
