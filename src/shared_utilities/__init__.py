"""
Common utilities shared across tools
"""

from .base_output_formatter import BaseOutputFormatter, OutputFormat, TableFormatter
from .filename_generator import (
    chart_filename,
    chart_filename_for_history,
    history_filename,
    plugin_slug,
)
from .logging_config import configure_logging, get_logger, get_logging_manager
from .output_manager import OutputManager, write_atomic
from .telemetry import get_telemetry_manager, trace_function, trace_operation

__all__ = [
    "configure_logging",
    "get_logger",
    "get_logging_manager",
    "get_telemetry_manager",
    "trace_function",
    "trace_operation",
    "BaseOutputFormatter",
    "OutputFormat",
    "TableFormatter",
    "OutputManager",
    "write_atomic",
    "plugin_slug",
    "history_filename",
    "chart_filename",
    "chart_filename_for_history",
]
