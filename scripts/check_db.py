"""
Connectivity check: print the database clock and time zone settings.

Useful when hourly event_datetime values look shifted, since they are
stored as naive timestamps in the database session's time zone.
"""

import asyncio
import sys
import os
import logging
from datetime import datetime

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from core.config import settings
from core.database import create_engine_from_settings
from core.logging import setup_logging

logger = logging.getLogger(__name__)

# (label, query) pairs per dialect
TIME_QUERIES = {
    "postgresql": [
        ("Database time", "SELECT now()"),
        ("Session timezone", "SHOW timezone"),
    ],
    "mysql": [
        ("Database time", "SELECT now()"),
        ("Session timezone", "SELECT @@session.time_zone"),
        ("System timezone", "SELECT @@system_time_zone"),
    ],
    "sqlite": [
        ("Database time (UTC)", "SELECT datetime('now')"),
    ],
}


async def check_database():
    """Connect once and log time-related server settings"""
    engine = create_engine_from_settings(settings)
    dialect = engine.dialect.name
    
    try:
        logger.info(f"Connecting to {dialect} database...")
        async with engine.connect() as conn:
            logger.info("Successfully connected.")
            logger.info(f"Local time: {datetime.now().astimezone().isoformat()}")
            
            for label, query in TIME_QUERIES.get(dialect, []):
                result = await conn.execute(text(query))
                logger.info(f"{label}: {result.scalar()}")
                
    except SQLAlchemyError as e:
        logger.error(f"Database check failed: {str(e)}")
    finally:
        await engine.dispose()
        logger.info("Database connection pool closed.")


if __name__ == "__main__":
    setup_logging(settings)
    asyncio.run(check_database())
