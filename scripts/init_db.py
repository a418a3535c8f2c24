import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import create_engine_from_settings
from core.logging import setup_logging
from models.base import Base
# Import all models to ensure they are registered
from models.ga_install import GAAppInstall

logger = logging.getLogger(__name__)

async def init_database():
    logger.info(f"Connecting to database...")
    engine = create_engine_from_settings(settings)
    
    try:
        async with engine.begin() as conn:
            logger.info(f"Creating table '{GAAppInstall.__tablename__}'...")
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Tables created successfully.")
    finally:
        await engine.dispose()

if __name__ == "__main__":
    setup_logging(settings)
    asyncio.run(init_database())
