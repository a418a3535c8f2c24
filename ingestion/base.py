"""
Abstract base class for report sources
"""

from abc import ABC, abstractmethod
from typing import List
from schemas.report import RawReportRow
import logging

logger = logging.getLogger(__name__)


class ReportSource(ABC):
    """
    Abstract base class for all report sources.

    Responsibilities:
    - Issue one report query for the configured window
    - Return rows in the positional layout of REPORT_DIMENSIONS / REPORT_METRICS

    Sources perform no retries; a failed query raises FetchError.
    """

    def __init__(self, source_name: str):
        self.source_name = source_name

    @abstractmethod
    async def fetch_data(self) -> List[RawReportRow]:
        """
        Fetch report rows from the source.

        Returns:
            List of raw report rows (possibly empty)
        """
        pass
