"""
Load normalized install records with upsert logic (idempotency)
"""

from typing import List, Dict, Any, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.dialects.mysql import insert as mysql_insert
from models.ga_install import GAAppInstall, NATURAL_KEY_COLUMNS, UPSERT_COLUMNS
from schemas.report import NormalizedRecord
from core.exceptions import SinkError
import logging

logger = logging.getLogger(__name__)

ON_CONFLICT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class UpsertLoader:
    """
    Load install records with idempotent upsert operations.

    Ensures:
    - No duplicate rows on repeated runs (unique natural key)
    - Existing keys get the latest event_count / locale / surface fields
    - One transaction per load: all records are applied or none
    """

    def __init__(
        self,
        db_session: AsyncSession,
        batch_size: int = 500,
        dialect_name: Optional[str] = None
    ):
        self.db = db_session
        self.batch_size = batch_size
        self._dialect_name = dialect_name

    @property
    def table_name(self) -> str:
        return GAAppInstall.__tablename__

    @property
    def dialect_name(self) -> str:
        if self._dialect_name is None:
            self._dialect_name = self.db.get_bind().dialect.name
        return self._dialect_name

    @staticmethod
    def collapse_duplicates(records: Sequence[NormalizedRecord]) -> List[Dict[str, Any]]:
        """
        Keep one row per natural key, the last occurrence winning.

        Order follows the first appearance of each key.
        """
        rows: Dict[tuple, Dict[str, Any]] = {}
        for record in records:
            rows[record.natural_key()] = record.to_db_dict()
        return list(rows.values())

    def build_statement(self, rows: List[Dict[str, Any]]):
        """INSERT ... ON CONFLICT / ON DUPLICATE KEY UPDATE for the current dialect"""
        dialect = self.dialect_name

        if dialect in ON_CONFLICT_DIALECTS:
            stmt = ON_CONFLICT_DIALECTS[dialect](GAAppInstall).values(rows)
            return stmt.on_conflict_do_update(
                index_elements=list(NATURAL_KEY_COLUMNS),
                set_={column: stmt.excluded[column] for column in UPSERT_COLUMNS}
            )

        if dialect == "mysql":
            stmt = mysql_insert(GAAppInstall).values(rows)
            return stmt.on_duplicate_key_update(
                {column: stmt.inserted[column] for column in UPSERT_COLUMNS}
            )

        raise SinkError(
            f"Upsert not supported for dialect '{dialect}'",
            context={"table_name": self.table_name, "dialect": dialect}
        )

    async def load(self, records: Sequence[NormalizedRecord]) -> int:
        """
        Upsert records into ga_app_installs.

        Args:
            records: Normalized install records

        Returns:
            Number of distinct rows written

        Raises:
            SinkError: If any statement or the commit fails (transaction rolled back)
        """
        if not records:
            return 0

        rows = self.collapse_duplicates(records)
        if len(rows) < len(records):
            logger.info(
                f"Collapsed {len(records) - len(rows)} duplicate keys within the batch"
            )

        logger.info(f"Preparing to insert/update data into '{self.table_name}'...")

        try:
            for i in range(0, len(rows), self.batch_size):
                chunk = rows[i:i + self.batch_size]
                await self.db.execute(self.build_statement(chunk))
                logger.debug(f"Batch {i // self.batch_size + 1}: sent {len(chunk)} rows")

            await self.db.commit()

        except SQLAlchemyError as e:
            await self.db.rollback()
            raise SinkError(
                "Failed to upsert install records",
                context={
                    "operation": "UPSERT",
                    "table_name": self.table_name,
                    "dialect": self.dialect_name,
                    "batch_size": len(rows)
                },
                original_exception=e
            )

        logger.info(f"Successfully synced {len(rows)} rows to the '{self.table_name}' table.")
        return len(rows)
