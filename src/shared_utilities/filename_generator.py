"""
Shared filename generation utilities for consistent naming across tools
"""

import re
from pathlib import Path


def plugin_slug(plugin_name: str) -> str:
    """
    Convert a plugin display name into the slug used for output filenames.

    Args:
        plugin_name: Display name as it appears in the stats file

    Returns:
        Lowercased name with whitespace runs replaced by dashes
    """
    return re.sub(r"\s+", "-", plugin_name.lower())


def generate_output_filename(
    plugin_name: str,
    output_type: str,
    extension: str = "json",
) -> str:
    """
    Generate output filename based on plugin name and output type.

    Args:
        plugin_name: Plugin display name
        output_type: Type of output ("history", "downloads-chart", etc.)
        extension: File extension (default: "json")

    Returns:
        Generated filename string
    """
    return f"{plugin_slug(plugin_name)}-{output_type}.{extension}"


def history_filename(plugin_name: str) -> str:
    """Filename of the serialized history for a plugin."""
    return generate_output_filename(plugin_name, "history", "json")


def chart_filename(plugin_name: str) -> str:
    """Filename of the rendered HTML report for a plugin."""
    return generate_output_filename(plugin_name, "downloads-chart", "html")


def chart_filename_for_history(history_path: str | Path) -> str:
    """
    Derive the report filename from a history file name.

    ``chatgpt-md-history.json`` becomes ``chatgpt-md-downloads-chart.html``.
    """
    stem = Path(history_path).stem
    if stem.endswith("-history"):
        stem = stem[: -len("-history")]
    return f"{stem}-downloads-chart.html"
