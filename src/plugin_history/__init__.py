"""
Plugin download history toolkit.

Reconstructs a plugin's download counts and releases from the git history of
a community stats file and renders them as an interactive chart.
"""

from .anomaly_filter import NeighborFilter, SequentialFilter, get_filter
from .chart_data import build_chart_series
from .commit_source import (
    CachingCommitSource,
    CommitSource,
    GitCommitSource,
    InMemoryCommitSource,
)
from .config import FilterPolicy, HistoryConfig, OutputMode, Variant
from .core import PluginHistoryTracker
from .data_models import ChartSeries, HistoryEntry, HistoryResult, RawDataPoint
from .errors import PluginHistoryError
from .history_builder import HistoryBuilder

__all__ = [
    "PluginHistoryTracker",
    "HistoryConfig",
    "FilterPolicy",
    "OutputMode",
    "Variant",
    "CommitSource",
    "GitCommitSource",
    "InMemoryCommitSource",
    "CachingCommitSource",
    "SequentialFilter",
    "NeighborFilter",
    "get_filter",
    "HistoryBuilder",
    "build_chart_series",
    "ChartSeries",
    "HistoryEntry",
    "HistoryResult",
    "RawDataPoint",
    "PluginHistoryError",
]
