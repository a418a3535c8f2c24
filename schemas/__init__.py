"""
Pydantic schemas for data validation and serialization.

Schemas:
    report: Raw analytics report rows and normalized install records

Usage:
    from schemas.report import RawReportRow, NormalizedRecord, NOT_SET

Example:
    # Parse an API row
    raw = RawReportRow.from_api_row(
        {"dimensionValues": [{"value": "US"}], "metricValues": [{"value": "2"}]}
    )
    assert raw.dimension_values == ["US"]

Validation:
    NormalizedRecord substitutes the "(not set)" sentinel for missing
    string values and rejects negative event counts.
"""

__all__ = [
    "RawReportRow",
    "NormalizedRecord",
    "NOT_SET",
    "REPORT_DIMENSIONS",
    "REPORT_METRICS",
    "RECORD_FIELDS",
]
