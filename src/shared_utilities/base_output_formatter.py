"""
Base output formatter for multi-format output generation.

This module provides a base class for output formatting that supports:
- Human-readable formats (table, markdown)
- Machine-readable formats (json, csv)
- Self-contained HTML documents
- A consistent interface across all tools
"""

import json
from abc import ABC, abstractmethod
from typing import Any


class OutputFormat:
    """Enumeration of supported output formats."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"
    MARKDOWN = "markdown"
    HTML = "html"

    @classmethod
    def choices(cls) -> list[str]:
        return [cls.TABLE, cls.JSON, cls.CSV, cls.MARKDOWN, cls.HTML]


class BaseOutputFormatter(ABC):
    """
    Abstract base class for all output formatters.

    Provides a consistent interface and common functionality for formatting
    data into various output formats.
    """

    def __init__(self):
        """Initialize the formatter with format handlers."""
        self._format_handlers = {
            OutputFormat.TABLE: self._format_table,
            OutputFormat.JSON: self._format_json,
            OutputFormat.CSV: self._format_csv,
            OutputFormat.MARKDOWN: self._format_markdown,
            OutputFormat.HTML: self._format_html,
        }

    def format(self, data: Any, format_type: str = OutputFormat.TABLE, **kwargs) -> str:
        """
        Format data according to the specified format type.

        Args:
            data: Data to format
            format_type: Output format type
            **kwargs: Additional format-specific options

        Returns:
            Formatted string output
        """
        handler = self._format_handlers.get(format_type)
        if not handler:
            raise ValueError(f"Unsupported format type: {format_type}")

        return handler(data, **kwargs)

    @abstractmethod
    def _format_table(self, data: Any, **kwargs) -> str:
        """Format data as a human-readable table."""
        pass

    def _format_json(self, data: Any, **kwargs) -> str:
        """Format data as JSON."""
        indent = kwargs.get("indent", 2)
        sort_keys = kwargs.get("sort_keys", False)
        return json.dumps(data, indent=indent, sort_keys=sort_keys, default=str)

    @abstractmethod
    def _format_csv(self, data: Any, **kwargs) -> str:
        """Format data as CSV."""
        pass

    def _format_markdown(self, data: Any, **kwargs) -> str:
        """Format data as Markdown."""
        # Default implementation - tools should override for better formatting
        lines = ["# Output", "", "```json", self._format_json(data), "```"]
        return "\n".join(lines)

    @abstractmethod
    def _format_html(self, data: Any, **kwargs) -> str:
        """Format data as a standalone HTML document."""
        pass


class TableFormatter:
    """Helper class for creating formatted tables."""

    @staticmethod
    def create_table(headers: list[str], rows: list[list[str]]) -> str:
        """
        Create a formatted text table.

        Args:
            headers: Column headers
            rows: Data rows

        Returns:
            Formatted table as string
        """
        column_widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row):
                column_widths[i] = max(column_widths[i], len(str(cell)))

        formats = [f"{{:<{w}}}" for w in column_widths]

        lines = []

        header_row = " | ".join(
            fmt.format(h) for fmt, h in zip(formats, headers, strict=False)
        )
        lines.append(header_row)
        lines.append("-" * len(header_row))

        for row in rows:
            row_str = " | ".join(
                fmt.format(str(cell)) for fmt, cell in zip(formats, row, strict=False)
            )
            lines.append(row_str)

        return "\n".join(lines)
