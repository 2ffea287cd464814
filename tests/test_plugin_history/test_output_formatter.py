"""Tests for plugin history output formatting."""

import csv
import json
from io import StringIO

import pytest
from loguru import logger

from src.plugin_history.config import OutputMode
from src.plugin_history.data_models import HistoryResult
from src.plugin_history.output_formatter import PluginHistoryFormatter
from tests.test_plugin_history.test_utils import make_entry


@pytest.fixture
def result(sample_entries):
    """History result with run metadata."""
    return HistoryResult(
        plugin_name="chatgpt-md",
        entries=sample_entries,
        metadata={"filter_policy": "neighbor", "rejected_count": 2},
    )


class TestHistoryDocument:
    """Test the serialized history shapes."""

    def test_timeline(self, result, sample_entries):
        """Test the timeline shape is keyed by commit timestamp."""
        document = PluginHistoryFormatter().to_history_document(result)

        first_key = str(sample_entries[0].timestamp_ms)
        assert list(document) == [str(e.timestamp_ms) for e in sample_entries]
        assert document[first_key] == {
            "date": sample_entries[0].date,
            "data": {"downloads": 100, "dailyGrowth": 100, "1.0.0": 100},
        }

    def test_daily(self, result, sample_entries):
        """Test the daily shape is an ordered array."""
        formatter = PluginHistoryFormatter(output_mode=OutputMode.DAILY)
        document = formatter.to_history_document(result)

        assert isinstance(document, list)
        assert document[1] == {
            "date": sample_entries[1].date,
            "hash": sample_entries[1].revision_id,
            "downloads": 150,
            "versions": {"1.0.0": 120, "1.1.0": 30},
        }

    def test_mode_override(self, result):
        """Test an explicit mode beats the formatter default."""
        document = PluginHistoryFormatter().to_history_document(
            result, OutputMode.DAILY
        )
        assert isinstance(document, list)

    def test_unknown_mode(self, result):
        """Test unsupported modes are rejected."""
        with pytest.raises(ValueError, match="Unsupported output mode"):
            PluginHistoryFormatter().to_history_document(result, "weekly")

    def test_timeline_same_second_keeps_last(self):
        """Test commits sharing a second collapse to the newer one with a warning."""
        result = HistoryResult(
            plugin_name="chatgpt-md",
            entries=[make_entry(100, 0, growth=100), make_entry(120, 0, growth=120)],
        )
        messages = []
        handler_id = logger.add(messages.append, format="{message}", level="WARNING")
        try:
            document = PluginHistoryFormatter().to_history_document(result)
        finally:
            logger.remove(handler_id)

        assert len(document) == 1
        assert next(iter(document.values()))["data"]["downloads"] == 120
        assert any("shared by several commits" in m for m in messages)


class TestFormats:
    """Test the formatter's output formats."""

    def test_json(self, result):
        """Test JSON output parses back to the history document."""
        formatter = PluginHistoryFormatter()
        content = formatter.format(result, "json")

        assert json.loads(content) == formatter.to_history_document(result)

    def test_json_is_deterministic(self, result):
        """Test formatting twice gives identical bytes."""
        formatter = PluginHistoryFormatter()
        assert formatter.format(result, "json") == formatter.format(result, "json")

    def test_table(self, result):
        """Test the console table."""
        content = PluginHistoryFormatter().format(result, "table")

        assert "Download History: chatgpt-md" in content
        assert "Data Points: 4" in content
        assert "Filter Policy: neighbor" in content
        assert "Rejected Count: 2" in content
        assert "Daily Growth" in content

    def test_table_empty(self):
        """Test the table of an empty history."""
        content = PluginHistoryFormatter().format(HistoryResult("p", []), "table")
        assert "No data points." in content

    def test_csv(self, result, sample_entries):
        """Test CSV rows."""
        content = PluginHistoryFormatter().format(result, "csv")
        rows = list(csv.reader(StringIO(content)))

        assert rows[0] == [
            "date",
            "timestamp",
            "revision",
            "downloads",
            "daily_growth",
            "versions",
        ]
        assert len(rows) == 5
        assert rows[2][3] == "150"
        assert rows[2][5] == "1.0.0;1.1.0"

    def test_markdown(self, result):
        """Test Markdown output."""
        content = PluginHistoryFormatter().format(result, "markdown")

        assert content.startswith("# chatgpt-md Download History")
        assert "| Date | Downloads | Daily Growth |" in content

    def test_html(self, result):
        """Test HTML output is the full report."""
        content = PluginHistoryFormatter().format(result, "html")

        assert content.startswith("<!DOCTYPE html>")
        assert "chatgpt-md Download Statistics" in content

    def test_unsupported_format(self, result):
        """Test unknown formats are rejected."""
        with pytest.raises(ValueError):
            PluginHistoryFormatter().format(result, "xml")
