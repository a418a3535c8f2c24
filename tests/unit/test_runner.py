"""
Unit tests for the sync runner sequencing
"""

import pytest
from unittest.mock import Mock
from sqlalchemy.exc import OperationalError
from ingestion.runner import SyncRunner
from core.exceptions import (
    ETLException,
    FetchError,
    SinkError,
    ExportError,
    DatabaseConnectionError,
    TransformationError,
)


class FakeSession:
    """Session stand-in recording connection checkout and release"""

    def __init__(self, events, connect_error=None):
        self.events = events
        self.connect_error = connect_error

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.events.append("release")
        return False

    async def connection(self):
        if self.connect_error:
            raise self.connect_error
        self.events.append("connect")


class FakeLoader:
    def __init__(self, events, error=None):
        self.events = events
        self.error = error

    async def load(self, records):
        self.events.append("load")
        if self.error:
            raise self.error
        return len(records)


def make_runner(test_settings, source, events, loader_error=None, export_error=None,
                connect_error=None):
    exporter = Mock()

    def export(records):
        events.append("export")
        if export_error:
            raise export_error
        return "backup.csv"

    exporter.export = Mock(side_effect=export)

    class TracingSource:
        source_name = source.source_name

        async def fetch_data(self):
            events.append("fetch")
            return await source.fetch_data()

    return SyncRunner(
        settings=test_settings,
        session_factory=lambda: FakeSession(events, connect_error=connect_error),
        source=TracingSource(),
        exporter=exporter,
        loader_factory=lambda session: FakeLoader(events, error=loader_error),
    ), exporter


class TestSyncRunner:
    """Test stage ordering and failure isolation"""

    @pytest.mark.asyncio
    async def test_stage_order(self, test_settings, static_source, raw_rows):
        """Test connect → fetch → load → export → release"""
        events = []
        runner, _ = make_runner(test_settings, static_source(rows=raw_rows), events)

        result = await runner.run()

        assert events == ["connect", "fetch", "load", "export", "release"]
        assert result["status"] == "success"
        assert result["records_extracted"] == 2
        assert result["records_normalized"] == 2
        assert result["records_loaded"] == 2
        assert result["export_path"] == "backup.csv"
        assert result["warnings"] == []

    @pytest.mark.asyncio
    async def test_empty_result_short_circuits(self, test_settings, static_source):
        """Test no load and no export when the report is empty"""
        events = []
        runner, exporter = make_runner(test_settings, static_source(rows=[]), events)

        result = await runner.run()

        assert events == ["connect", "fetch", "release"]
        assert result["records_loaded"] == 0
        assert result["message"] == "No data to process"
        exporter.export.assert_not_called()

    @pytest.mark.asyncio
    async def test_fetch_failure_releases_connection(self, test_settings, failing_source):
        """Test FetchError propagates after release, nothing written"""
        events = []
        runner, exporter = make_runner(test_settings, failing_source, events)

        with pytest.raises(FetchError):
            await runner.run()

        assert events == ["connect", "fetch", "release"]
        exporter.export.assert_not_called()

    @pytest.mark.asyncio
    async def test_sink_failure_skips_export(self, test_settings, static_source, raw_rows):
        """Test SinkError aborts the run before the backup"""
        events = []
        runner, exporter = make_runner(
            test_settings, static_source(rows=raw_rows), events,
            loader_error=SinkError("Failed to upsert install records")
        )

        with pytest.raises(SinkError):
            await runner.run()

        assert events == ["connect", "fetch", "load", "release"]
        exporter.export.assert_not_called()

    @pytest.mark.asyncio
    async def test_export_failure_is_a_warning(self, test_settings, static_source, raw_rows):
        """Test ExportError is returned as a warning, run still succeeds"""
        events = []
        runner, _ = make_runner(
            test_settings, static_source(rows=raw_rows), events,
            export_error=ExportError("Failed to create CSV backup", context={"file_path": "x.csv"})
        )

        result = await runner.run()

        assert result["status"] == "success"
        assert result["records_loaded"] == 2
        assert result["export_path"] is None
        assert len(result["warnings"]) == 1
        assert result["warnings"][0]["error_type"] == "ExportError"
        assert events[-1] == "release"

    @pytest.mark.asyncio
    async def test_connection_failure_skips_fetch(self, test_settings, static_source, raw_rows):
        """Test an unreachable database stops the run before the API call"""
        events = []
        runner, _ = make_runner(
            test_settings, static_source(rows=raw_rows), events,
            connect_error=OperationalError("connect", {}, Exception("refused"))
        )

        with pytest.raises(DatabaseConnectionError):
            await runner.run()

        assert "fetch" not in events
        assert events == ["release"]

    @pytest.mark.asyncio
    async def test_normalizer_crash_wrapped(self, test_settings, static_source, raw_rows):
        """Test an unexpected normalizer exception becomes TransformationError"""
        events = []
        runner, exporter = make_runner(test_settings, static_source(rows=raw_rows), events)
        runner.normalizer = Mock()
        runner.normalizer.normalize_all = Mock(side_effect=RuntimeError("boom"))

        with pytest.raises(TransformationError):
            await runner.run()

        assert "load" not in events
        exporter.export.assert_not_called()

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self, test_settings, static_source):
        """Test non-pipeline exceptions are wrapped in ETLException"""
        events = []
        runner, _ = make_runner(
            test_settings, static_source(error=KeyError("rows")), events
        )

        with pytest.raises(ETLException) as exc_info:
            await runner.run()

        assert isinstance(exc_info.value.original_exception, KeyError)
        assert events[-1] == "release"
