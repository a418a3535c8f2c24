# ============================================================================
# File: ingestion/runner.py
# Description: GA install sync orchestrator
# ============================================================================
"""
Sync Runner - Orchestrates fetch, normalize, upsert and CSV backup.

This module sequences one sync run:
- Acquire a database connection before touching the API
- Fetch the report, normalize it, stop early when there is nothing to write
- Upsert into ga_app_installs in a single transaction
- Write the CSV backup after commit; a failed backup is reported, never fatal
- Release the connection on every exit path (session context manager)
"""

from typing import Dict, Any, List, Optional, Callable
from pathlib import Path
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.exc import SQLAlchemyError
import logging

from core.config import Settings
from ingestion.base import ReportSource
from ingestion.transformers.normalizer import ReportNormalizer
from ingestion.loaders.upsert_loader import UpsertLoader
from ingestion.exporters.csv_exporter import CSVBackupExporter
from core.exceptions import (
    ETLException,
    TransformationError,
    ExportError,
    DatabaseConnectionError,
)

logger = logging.getLogger(__name__)


class SyncRunner:
    """
    GA install sync orchestrator

    Responsibilities:
    - Orchestrate Fetch → Normalize → Upsert → Export
    - Hold exactly one database connection per run
    - Abort on fetch/upsert failures, isolate export failures
    """

    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker,
        source: ReportSource,
        normalizer: Optional[ReportNormalizer] = None,
        exporter: Optional[CSVBackupExporter] = None,
        loader_factory: Optional[Callable[[AsyncSession], UpsertLoader]] = None
    ):
        self.settings = settings
        self.session_factory = session_factory
        self.source = source
        self.normalizer = normalizer or ReportNormalizer(
            landing_page_base_url=settings.LANDING_PAGE_BASE_URL
        )
        self.exporter = exporter or CSVBackupExporter(export_dir=settings.EXPORT_DIR)
        self.loader_factory = loader_factory or (
            lambda session: UpsertLoader(session, batch_size=settings.ETL_BATCH_SIZE)
        )

    async def run(self) -> Dict[str, Any]:
        """
        Run one sync.

        Returns:
            Dictionary with run statistics:
            - status: "success"
            - records_extracted: Rows returned by the report
            - records_normalized: Records produced by the normalizer
            - records_loaded: Distinct rows upserted
            - export_path: Path of the CSV backup (None if skipped or failed)
            - warnings: Non-fatal errors (failed backup) as dictionaries
            - message: Set when the run stopped early

        Raises:
            ExtractionError: If the report could not be fetched
            TransformationError: If normalization failed unexpectedly
            LoadError: If the connection or the upsert failed
            ETLException: For unexpected errors
        """
        records_extracted = 0
        records_normalized = 0
        records_loaded = 0
        warnings: List[Dict[str, Any]] = []

        logger.info(f"Starting GA data sync for {self.source.source_name}...")

        try:
            async with self.session_factory() as session:
                await self._acquire_connection(session)

                # --------------------------------------------------
                # PHASE 1: FETCH
                # --------------------------------------------------
                rows = await self.source.fetch_data()
                records_extracted = len(rows)

                # --------------------------------------------------
                # PHASE 2: NORMALIZE
                # --------------------------------------------------
                try:
                    records = self.normalizer.normalize_all(rows)
                except Exception as e:
                    raise TransformationError(
                        "Failed to normalize report rows",
                        context={
                            "source_name": self.source.source_name,
                            "records_extracted": records_extracted
                        },
                        original_exception=e
                    )
                records_normalized = len(records)

                if not records:
                    logger.info("No data to process.")
                    return {
                        "status": "success",
                        "records_extracted": records_extracted,
                        "records_normalized": 0,
                        "records_loaded": 0,
                        "export_path": None,
                        "warnings": warnings,
                        "message": "No data to process"
                    }

                # --------------------------------------------------
                # PHASE 3: UPSERT
                # --------------------------------------------------
                loader = self.loader_factory(session)
                records_loaded = await loader.load(records)

                # --------------------------------------------------
                # PHASE 4: CSV BACKUP (after commit)
                # --------------------------------------------------
                export_path = self._export(records, warnings)

            result = {
                "status": "success",
                "records_extracted": records_extracted,
                "records_normalized": records_normalized,
                "records_loaded": records_loaded,
                "export_path": export_path,
                "warnings": warnings
            }

            logger.info(
                f"Sync completed - Extracted: {records_extracted}, "
                f"Loaded: {records_loaded}, Warnings: {len(warnings)}"
            )

            return result

        except ETLException as e:
            # Known pipeline errors - log with context and abort the run
            logger.error(
                f"Sync failed: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            raise

        except Exception as e:
            logger.exception("Unexpected error during the sync process")
            raise ETLException(
                "Unexpected error in sync pipeline",
                context={
                    "source_name": self.source.source_name,
                    "records_extracted": records_extracted,
                    "records_normalized": records_normalized,
                    "records_loaded": records_loaded
                },
                original_exception=e
            )

    async def _acquire_connection(self, session: AsyncSession):
        """Check a connection out of the pool for this session"""
        logger.info("Connecting to database...")
        try:
            await session.connection()
        except (SQLAlchemyError, OSError) as e:
            raise DatabaseConnectionError(
                "Could not connect to database",
                context={"source_name": self.source.source_name},
                original_exception=e
            )
        logger.info("Successfully connected to database.")

    def _export(self, records, warnings: List[Dict[str, Any]]) -> Optional[Path]:
        """Write the CSV backup, recording failures as warnings"""
        try:
            return self.exporter.export(records)
        except ExportError as e:
            logger.error(
                f"Failed to create CSV backup: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            warnings.append(e.to_dict())
            return None
