"""
Sync pipeline components for GA app-install data.

This package contains all components for the fetch-normalize-load pipeline:

Modules:
    base: Abstract base class for report sources
    runner: Sync orchestrator that sequences fetch, normalize, load and export

Subpackages:
    extractors: Google Analytics Data API report extractor
    transformers: Report row normalization with defaulting
    loaders: Database loader with idempotent upsert operations
    exporters: Timestamped CSV backups of each run

Architecture:
    One run is strictly sequential:

    1. Fetch - One runReport query over the trailing 7-day window
    2. Normalize - Named decoding, URL and dateHour parsing, sentinels
    3. Load - Upsert into ga_app_installs in a single transaction
    4. Export - CSV backup of the same records, failure is non-fatal

Usage:
    from ingestion.extractors.ga_extractor import GAReportExtractor
    from ingestion.runner import SyncRunner

Example:
    source = GAReportExtractor.from_settings(settings)
    runner = SyncRunner(settings, session_factory, source)
    result = await runner.run()

    print(f"Loaded {result['records_loaded']} records")

Error Handling:
    All components raise exceptions from core.exceptions. Fetch and load
    errors abort the run; export errors are returned in result["warnings"].
"""

__all__ = [
    "ReportSource",
    "SyncRunner",
    "GAReportExtractor",
    "ReportNormalizer",
    "UpsertLoader",
    "CSVBackupExporter",
]
