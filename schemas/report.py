"""
Pydantic schemas for analytics report rows and normalized install records
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime
import hashlib


# Placeholder stored whenever the report leaves a value out
NOT_SET = "(not set)"

# Requested report columns, in response order
REPORT_DIMENSIONS = (
    "countryId",
    "sessionSourceMedium",
    "landingPagePlusQueryString",
    "customEvent:shop_id",
    "dateHour",
)
REPORT_METRICS = ("eventCount",)

# Table/backup column order
RECORD_FIELDS = (
    "country_id",
    "session_source_medium",
    "landing_page",
    "shop_id",
    "event_datetime",
    "event_count",
    "locale",
    "surface_type",
    "surface_detail",
)

EVENT_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class RawReportRow(BaseModel):
    """One report row as returned by the API: positional dimension and metric values"""
    
    dimension_values: List[Optional[str]] = Field(default_factory=list)
    metric_values: List[Optional[str]] = Field(default_factory=list)
    
    @classmethod
    def from_api_row(cls, row: Dict[str, Any]) -> "RawReportRow":
        """
        Build from a runReport JSON row.
        
        Example input:
            {"dimensionValues": [{"value": "US"}, ...], "metricValues": [{"value": "3"}]}
        """
        return cls(
            dimension_values=_values(row.get("dimensionValues")),
            metric_values=_values(row.get("metricValues")),
        )


def _values(cells: Any) -> List[Optional[str]]:
    if not isinstance(cells, list):
        return []
    return [
        cell.get("value") if isinstance(cell, dict) else None
        for cell in cells
    ]


class NormalizedRecord(BaseModel):
    """
    One install-count row ready for the sink table and the CSV backup.
    
    Ensures:
    - Every string field is populated (missing values become "(not set)")
    - event_count is a non-negative integer
    """
    
    # Natural key
    country_id: str = NOT_SET
    session_source_medium: str = NOT_SET
    landing_page: str = NOT_SET
    shop_id: str = NOT_SET
    event_datetime: datetime
    
    # Metric
    event_count: int = Field(0, ge=0)
    
    # Parsed from landing page query string
    locale: str = NOT_SET
    surface_type: str = NOT_SET
    surface_detail: str = NOT_SET
    
    @validator(
        "country_id", "session_source_medium", "shop_id",
        "locale", "surface_type", "surface_detail",
        pre=True
    )
    def default_not_set(cls, v):
        """Missing or empty values resolve to the sentinel"""
        if v is None or v == "":
            return NOT_SET
        return v
    
    @validator("landing_page", pre=True)
    def default_landing_page(cls, v):
        """Landing page keeps whatever the report sent, only absence is replaced"""
        if v is None:
            return NOT_SET
        return v
    
    def natural_key(self) -> Tuple[str, str, str, str, datetime]:
        return (
            self.country_id,
            self.session_source_medium,
            self.landing_page,
            self.shop_id,
            self.event_datetime,
        )
    
    @property
    def landing_page_hash(self) -> str:
        """sha256 hex digest of landing_page, the fixed-width key column"""
        return hashlib.sha256(
            self.landing_page.encode("utf-8", "surrogatepass")
        ).hexdigest()

    def to_db_dict(self) -> Dict[str, Any]:
        """Column -> value mapping for the ga_app_installs table"""
        row = {name: getattr(self, name) for name in RECORD_FIELDS}
        row["landing_page_hash"] = self.landing_page_hash
        return row
    
    def as_row(self) -> List[Any]:
        """Values in table order with event_datetime rendered as text"""
        row = []
        for name in RECORD_FIELDS:
            value = getattr(self, name)
            if isinstance(value, datetime):
                value = value.strftime(EVENT_DATETIME_FORMAT)
            row.append(value)
        return row
