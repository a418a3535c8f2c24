"""
Transform raw report rows into normalized install records
"""

from typing import Dict, Any, Optional, List, Iterable
from datetime import datetime
from urllib.parse import urljoin, urlsplit, parse_qs
from schemas.report import (
    RawReportRow,
    NormalizedRecord,
    NOT_SET,
    REPORT_DIMENSIONS,
    REPORT_METRICS,
)
import logging

logger = logging.getLogger(__name__)

EPOCH_DATE_HOUR = "1970010100"
QUERY_PARAMS = ("locale", "surface_type", "surface_detail")


class ReportNormalizer:
    """
    Normalize GA report rows into NormalizedRecord.

    Handles:
    - Named decoding of positional dimension values
    - Landing page query string parsing
    - dateHour (YYYYMMDDHH) to timestamp conversion
    - Default values for anything missing or malformed

    Never raises on bad input: every problem resolves to a default.
    """

    def __init__(self, landing_page_base_url: str = "https://example.com"):
        self.landing_page_base_url = landing_page_base_url

    def normalize_all(self, rows: Iterable[RawReportRow]) -> List[NormalizedRecord]:
        """Normalize rows, preserving order and duplicates"""
        return [self.normalize(row) for row in rows]

    def normalize(self, row: RawReportRow) -> NormalizedRecord:
        """
        Normalize one report row.

        Returns:
            NormalizedRecord with all nine fields populated
        """
        fields = self.decode(row)

        landing_page = fields["landingPagePlusQueryString"]
        params = self._extract_query_params(landing_page)

        return NormalizedRecord(
            country_id=fields["countryId"],
            session_source_medium=fields["sessionSourceMedium"],
            landing_page=landing_page,
            shop_id=fields["customEvent:shop_id"],
            event_datetime=self._parse_date_hour(fields["dateHour"]),
            event_count=self._parse_count(fields["eventCount"]),
            locale=params["locale"],
            surface_type=params["surface_type"],
            surface_detail=params["surface_detail"],
        )

    @staticmethod
    def decode(row: RawReportRow) -> Dict[str, Optional[str]]:
        """Map positional values onto REPORT_DIMENSIONS / REPORT_METRICS names"""
        if len(row.dimension_values) != len(REPORT_DIMENSIONS):
            logger.debug(
                f"Expected {len(REPORT_DIMENSIONS)} dimension values, "
                f"got {len(row.dimension_values)}"
            )

        decoded: Dict[str, Optional[str]] = {}
        for names, values in (
            (REPORT_DIMENSIONS, row.dimension_values),
            (REPORT_METRICS, row.metric_values),
        ):
            for index, name in enumerate(names):
                decoded[name] = values[index] if index < len(values) else None
        return decoded

    def _extract_query_params(self, landing_page: Optional[str]) -> Dict[str, str]:
        """Pull locale / surface_type / surface_detail out of the landing page"""
        params = {name: NOT_SET for name in QUERY_PARAMS}
        if landing_page is None:
            return params

        try:
            query = urlsplit(urljoin(self.landing_page_base_url, landing_page)).query
        except ValueError:
            logger.warning(f"Could not parse landing page URL: {landing_page!r}")
            return params

        parsed = parse_qs(query, keep_blank_values=True)
        for name in QUERY_PARAMS:
            values = parsed.get(name)
            if values and values[0]:
                params[name] = values[0]
        return params

    @staticmethod
    def _parse_date_hour(value: Optional[str]) -> datetime:
        """
        Parse YYYYMMDDHH into a datetime on the hour.

        Absent values use 1970010100. Anything that is not ten digits or not a
        real calendar hour falls back to the same epoch value.
        """
        if value is None or value == "":
            value = EPOCH_DATE_HOUR

        value = value.strip()
        if len(value) == 10 and value.isascii() and value.isdigit():
            try:
                return datetime.strptime(value, "%Y%m%d%H")
            except ValueError:
                pass

        logger.warning(f"Invalid dateHour {value!r}, using {EPOCH_DATE_HOUR}")
        return datetime.strptime(EPOCH_DATE_HOUR, "%Y%m%d%H")

    @staticmethod
    def _parse_count(value: Any) -> int:
        """Safely parse base-10 count, 0 when missing, non-numeric or negative"""
        if value is None:
            return 0
        text = str(value).strip()
        # ASCII digits only: int() would also take "1_000" and full-width digits
        if not (text.isascii() and text.isdigit()):
            return 0
        return int(text, 10)
