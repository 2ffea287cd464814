"""
Output formatting for plugin history results.
"""

import csv
import json
from io import StringIO
from typing import Any

from ..shared_utilities import BaseOutputFormatter, TableFormatter, get_logger
from .chart_data import build_chart_series
from .config import DEFAULT_ROLLING_WINDOWS, OutputMode
from .data_models import HistoryResult
from .report_renderer import ReportRenderer

logger = get_logger(__name__)


class PluginHistoryFormatter(BaseOutputFormatter):
    """Specialized formatter for plugin history output."""

    def __init__(self, output_mode: str = OutputMode.TIMELINE):
        """Initialize formatter.

        Args:
            output_mode: Default shape of the JSON history document
        """
        super().__init__()
        self.output_mode = output_mode
        self.renderer = ReportRenderer()

    def to_history_document(
        self, result: HistoryResult, output_mode: str | None = None
    ) -> dict[str, Any] | list[dict[str, Any]]:
        """Build the serializable history document.

        Args:
            result: Reconstructed history
            output_mode: ``timeline`` (object keyed by timestamp) or ``daily``
                (array ordered by date); defaults to the formatter's mode
        """
        mode = output_mode or self.output_mode

        if mode == OutputMode.DAILY:
            return [
                {
                    "date": entry.date,
                    "hash": entry.revision_id,
                    "downloads": entry.downloads,
                    "versions": dict(entry.versions),
                }
                for entry in result.entries
            ]

        if mode == OutputMode.TIMELINE:
            timeline: dict[str, Any] = {}
            for entry in result.entries:
                key = str(entry.timestamp_ms)
                # later (newer) entries replace earlier ones at the same second
                if key in timeline:
                    logger.warning(
                        f"Timeline key {key} shared by several commits; "
                        f"keeping {entry.revision_id}"
                    )
                timeline[key] = {
                    "date": entry.date,
                    "data": {
                        "downloads": entry.downloads,
                        "dailyGrowth": entry.daily_growth,
                        **entry.versions,
                    },
                }
            return timeline

        raise ValueError(f"Unsupported output mode: {mode}")

    def _format_json(self, data: HistoryResult, **kwargs) -> str:
        """Format result as the history JSON document."""
        document = self.to_history_document(data, kwargs.get("output_mode"))
        return json.dumps(document, indent=kwargs.get("indent", 2))

    def _format_table(self, data: HistoryResult, **kwargs) -> str:
        """Format result as a table for console display."""
        lines = [f"📦 Download History: {data.plugin_name}"]
        lines.append(f"Data Points: {data.total_points}")

        for key in ("filter_policy", "rejected_count", "duplicates_skipped"):
            if key in data.metadata:
                label = key.replace("_", " ").title()
                lines.append(f"{label}: {data.metadata[key]}")

        lines.append("=" * 60)
        lines.append("")

        if not data.entries:
            lines.append("No data points.")
            return "\n".join(lines)

        rows = [
            [
                entry.date,
                f"{entry.downloads:,}",
                f"{entry.daily_growth:,}",
                str(len(entry.versions)),
            ]
            for entry in data.entries
        ]
        lines.append(
            TableFormatter.create_table(
                ["Date", "Downloads", "Daily Growth", "Versions"], rows
            )
        )
        return "\n".join(lines)

    def _format_csv(self, data: HistoryResult, **kwargs) -> str:
        """Format result as CSV."""
        output = StringIO()
        writer = csv.writer(output)

        writer.writerow(
            ["date", "timestamp", "revision", "downloads", "daily_growth", "versions"]
        )
        for entry in data.entries:
            writer.writerow(
                [
                    entry.date,
                    entry.timestamp_ms,
                    entry.revision_id,
                    entry.downloads,
                    entry.daily_growth,
                    ";".join(entry.versions),
                ]
            )

        return output.getvalue()

    def _format_markdown(self, data: HistoryResult, **kwargs) -> str:
        """Format result as a Markdown table."""
        lines = [f"# {data.plugin_name} Download History", ""]
        lines.append("| Date | Downloads | Daily Growth |")
        lines.append("|------|-----------|--------------|")
        for entry in data.entries:
            lines.append(
                f"| {entry.date} | {entry.downloads:,} | {entry.daily_growth:,} |"
            )
        return "\n".join(lines)

    def _format_html(self, data: HistoryResult, **kwargs) -> str:
        """Format result as the interactive HTML report."""
        windows = kwargs.get("windows", DEFAULT_ROLLING_WINDOWS)
        series = build_chart_series(data.entries, data.plugin_name, windows)
        return self.renderer.render(series, data.entries)
