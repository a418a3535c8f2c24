"""
Google Analytics Data API report extractor.

This module issues a single runReport query for app-install events:
- Fixed trailing window (7 days ago through today)
- Five dimensions plus the eventCount metric
- Server-side exact-match filter on the event name
- Bearer token authentication
- Bounded request timeout, no retries
"""

import httpx
from typing import List, Dict, Any, Optional
from ingestion.base import ReportSource
from schemas.report import RawReportRow, REPORT_DIMENSIONS, REPORT_METRICS
from core.config import Settings
from core.exceptions import (
    FetchError,
    AuthenticationError,
    RateLimitError,
)
import logging

logger = logging.getLogger(__name__)

START_DATE = "7daysAgo"
END_DATE = "today"


class GAReportExtractor(ReportSource):
    """
    Fetch install-event rows from a GA4 property.

    A failed request is raised as FetchError (or one of its subclasses)
    immediately; scheduling and retries belong to whoever runs the sync.

    Attributes:
        property_id: GA4 property identifier
        event_name: Event the report is filtered to
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        property_id: str,
        access_token: Optional[str] = None,
        event_name: str = "shopify_app_install",
        api_base_url: str = "https://analyticsdata.googleapis.com/v1beta",
        timeout: float = 30.0
    ):
        super().__init__(source_name=f"ga4:{property_id}")
        self.property_id = property_id
        self.access_token = access_token
        self.event_name = event_name
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "GAReportExtractor":
        return cls(
            property_id=settings.GA_PROPERTY_ID,
            access_token=settings.GA_ACCESS_TOKEN,
            event_name=settings.GA_EVENT_NAME,
            api_base_url=settings.GA_API_BASE_URL,
            timeout=settings.GA_TIMEOUT_SECONDS,
        )

    @property
    def report_url(self) -> str:
        return f"{self.api_base_url}/properties/{self.property_id}:runReport"

    def build_report_request(self) -> Dict[str, Any]:
        """runReport body: trailing window, dimensions, metric and event filter"""
        return {
            "dateRanges": [{"startDate": START_DATE, "endDate": END_DATE}],
            "dimensions": [{"name": name} for name in REPORT_DIMENSIONS],
            "metrics": [{"name": name} for name in REPORT_METRICS],
            "dimensionFilter": {
                "filter": {
                    "fieldName": "eventName",
                    "stringFilter": {"matchType": "EXACT", "value": self.event_name},
                }
            },
        }

    def _check_response(self, response: httpx.Response):
        """Map HTTP error statuses onto the FetchError hierarchy"""
        status_code = response.status_code
        if status_code < 400:
            return

        context = {
            "property_id": self.property_id,
            "api_url": self.report_url,
            "status_code": status_code,
            "response_body": response.text[:500]  # Truncate
        }

        if status_code in (401, 403):
            raise AuthenticationError(
                f"Authentication failed for property {self.property_id}",
                context=context
            )

        if status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                f"Quota exhausted for property {self.property_id}",
                context=context,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None
            )

        raise FetchError(
            f"Report request failed with status {status_code}",
            context=context
        )

    async def fetch_data(self) -> List[RawReportRow]:
        """
        Run the report and return its rows.

        Returns:
            List of RawReportRow in response order (empty when the report has no rows)

        Raises:
            AuthenticationError: Credentials rejected
            RateLimitError: Property quota exhausted
            FetchError: Any other request, transport or payload failure
        """
        headers = {"Content-Type": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        logger.info("Fetching data from Google Analytics...")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.report_url,
                    headers=headers,
                    json=self.build_report_request()
                )
        except httpx.TimeoutException as e:
            raise FetchError(
                "Report request timed out",
                context={
                    "property_id": self.property_id,
                    "api_url": self.report_url,
                    "timeout": self.timeout
                },
                original_exception=e
            )
        except httpx.HTTPError as e:
            raise FetchError(
                "Report request failed",
                context={
                    "property_id": self.property_id,
                    "api_url": self.report_url
                },
                original_exception=e
            )

        self._check_response(response)

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(
                "Failed to parse JSON response",
                context={
                    "property_id": self.property_id,
                    "api_url": self.report_url,
                    "response_body": response.text[:500]
                },
                original_exception=e
            )

        if not isinstance(data, dict):
            raise FetchError(
                "Unexpected report payload",
                context={
                    "property_id": self.property_id,
                    "payload_type": type(data).__name__
                }
            )

        rows = [RawReportRow.from_api_row(row) for row in data.get("rows") or []]

        row_count = data.get("rowCount")
        if isinstance(row_count, int) and row_count > len(rows):
            logger.warning(
                f"Report truncated: {len(rows)} of {row_count} rows returned "
                f"for property {self.property_id}"
            )

        logger.info(f"Fetched {len(rows)} rows from GA.")
        return rows
