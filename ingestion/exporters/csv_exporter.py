"""
CSV backup of each sync run
"""

import pandas as pd
from typing import Callable, Sequence, Union
from datetime import datetime
from pathlib import Path
from schemas.report import NormalizedRecord, RECORD_FIELDS
from core.exceptions import ExportError
import logging

logger = logging.getLogger(__name__)

FILENAME_FORMAT = "%Y%m%d_%H%M%S"


class CSVBackupExporter:
    """
    Write synced records to a timestamped CSV file.

    Output:
    - UTF-8, comma separated, header row of the nine record fields
    - Values quoted only when they contain a comma, quote or newline
    - File named <yyyyMMdd_HHmmss>.csv inside export_dir
    """

    def __init__(
        self,
        export_dir: Union[str, Path] = "ga_sync",
        clock: Callable[[], datetime] = datetime.now
    ):
        self.export_dir = Path(export_dir)
        self.clock = clock

    def backup_path(self) -> Path:
        """Target file for an export happening now"""
        directory = self.export_dir
        if not directory.is_absolute():
            directory = Path.cwd() / directory
        return directory / f"{self.clock().strftime(FILENAME_FORMAT)}.csv"

    def export(self, records: Sequence[NormalizedRecord]) -> Path:
        """
        Write the backup file.

        Returns:
            Path of the written file

        Raises:
            ExportError: If the directory or file cannot be written, or a value
                cannot be encoded
        """
        csv_path = None

        try:
            csv_path = self.backup_path()
            csv_path.parent.mkdir(parents=True, exist_ok=True)

            df = pd.DataFrame(
                [record.as_row() for record in records],
                columns=list(RECORD_FIELDS)
            )
            df.to_csv(csv_path, index=False, encoding="utf-8", lineterminator="\n")

        except (OSError, ValueError) as e:
            raise ExportError(
                "Failed to create CSV backup",
                context={
                    "file_path": str(csv_path) if csv_path else str(self.export_dir),
                    "records": len(records)
                },
                original_exception=e
            )

        logger.info(f"Successfully created CSV backup at {csv_path}")
        return csv_path
