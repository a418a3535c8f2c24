"""
Script to sync GA app-install events into the database
"""

import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import create_engine_from_settings, create_session_factory
from core.exceptions import ETLException
from core.logging import setup_logging
from ingestion.extractors.ga_extractor import GAReportExtractor
from ingestion.runner import SyncRunner

logger = logging.getLogger(__name__)


async def run_sync():
    """Run one GA sync for the configured property"""
    
    if not settings.GA_PROPERTY_ID:
        logger.error("GA_PROPERTY_ID is not defined in .env file.")
        return
    
    engine = create_engine_from_settings(settings)
    
    try:
        runner = SyncRunner(
            settings=settings,
            session_factory=create_session_factory(engine),
            source=GAReportExtractor.from_settings(settings),
        )
        result = await runner.run()
        
        for warning in result["warnings"]:
            logger.warning(f"Sync warning: {warning['message']}")
            
    except ETLException as e:
        logger.error(f"An error occurred during the sync process: {e}")
    finally:
        await engine.dispose()
        logger.info("Database connection pool closed.")


if __name__ == "__main__":
    setup_logging(settings)
    asyncio.run(run_sync())
