"""
Pytest configuration and fixtures
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool
from typing import List, Optional
from core.config import Settings
from core.database import create_session_factory
from core.exceptions import FetchError
from ingestion.base import ReportSource
from models.base import Base
from schemas.report import RawReportRow


class StaticReportSource(ReportSource):
    """Report source returning canned rows, or raising a given error"""

    def __init__(self, rows: Optional[List[RawReportRow]] = None, error: Optional[Exception] = None):
        super().__init__(source_name="static_test_source")
        self.rows = rows or []
        self.error = error
        self.calls = 0

    async def fetch_data(self) -> List[RawReportRow]:
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.rows)


def api_row(country, source_medium, landing_page, shop_id, date_hour, count):
    """runReport JSON row in the request's dimension order"""
    return {
        "dimensionValues": [
            {"value": country},
            {"value": source_medium},
            {"value": landing_page},
            {"value": shop_id},
            {"value": date_hour},
        ],
        "metricValues": [{"value": count}],
    }


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """File-backed SQLite engine with the sink table created"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'sync_test.db'}",
        echo=False,
        poolclass=AsyncAdaptedQueuePool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing the CSV backup at a temporary directory"""
    return Settings(
        GA_PROPERTY_ID="123456789",
        GA_ACCESS_TOKEN="test_token",
        EXPORT_DIR=str(tmp_path / "ga_sync"),
        ETL_BATCH_SIZE=500,
    )


@pytest.fixture
def mock_report_response():
    """Mock runReport response body"""
    return {
        "dimensionHeaders": [
            {"name": "countryId"},
            {"name": "sessionSourceMedium"},
            {"name": "landingPagePlusQueryString"},
            {"name": "customEvent:shop_id"},
            {"name": "dateHour"},
        ],
        "metricHeaders": [{"name": "eventCount", "type": "TYPE_INTEGER"}],
        "rows": [
            api_row(
                "US", "google / organic",
                "/install?locale=en-US&surface_type=app_store&surface_detail=search",
                "shop-001", "2024031512", "3"
            ),
            api_row(
                "CA", "(direct) / (none)",
                "/install?locale=fr-CA&surface_type=admin",
                "shop-002", "2024031513", "1"
            ),
        ],
        "rowCount": 2,
    }


@pytest.fixture
def raw_rows(mock_report_response):
    return [RawReportRow.from_api_row(row) for row in mock_report_response["rows"]]


@pytest.fixture
def make_api_row():
    return api_row


@pytest.fixture
def static_source():
    return StaticReportSource


@pytest.fixture
def failing_source():
    return StaticReportSource(error=FetchError("Report request failed", context={"property_id": "123456789"}))
