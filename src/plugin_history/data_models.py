"""
Data models for plugin download history reconstruction.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

MS_PER_DAY = 86_400_000


def timestamp_to_date(timestamp_ms: int) -> str:
    """Truncate a millisecond timestamp to its UTC calendar day (YYYY-MM-DD)."""
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%d")


def timestamp_to_iso(timestamp_ms: int) -> str:
    """Format a millisecond timestamp as an ISO-8601 UTC string."""
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{timestamp_ms % 1000:03d}Z"


@dataclass(frozen=True)
class CommitRecord:
    """A revision that touched the stats file."""

    revision_id: str
    timestamp_ms: int

    @property
    def short_id(self) -> str:
        return self.revision_id[:8]


@dataclass
class PluginRecord:
    """One plugin's entry in a stats snapshot."""

    downloads: int = 0
    updated: str | None = None
    versions: dict[str, int] = field(default_factory=dict)


@dataclass
class RawDataPoint:
    """Plugin state recorded at a single commit."""

    revision_id: str
    timestamp_ms: int
    date: str  # YYYY-MM-DD, UTC
    downloads: int
    versions: dict[str, int] = field(default_factory=dict)

    @property
    def short_id(self) -> str:
        return self.revision_id[:8]


@dataclass
class ExtractionResult:
    """Raw series collected from the commit history."""

    points: list[RawDataPoint]
    commits_total: int = 0
    commits_examined: int = 0
    failed_revisions: list[str] = field(default_factory=list)
    stopped_at: str | None = None  # first revision without the plugin


@dataclass
class HistoryEntry:
    """A point of the final emitted history."""

    date: str
    timestamp_ms: int
    revision_id: str
    downloads: int
    daily_growth: int
    versions: dict[str, int] = field(default_factory=dict)


@dataclass
class FilterResult:
    """Outcome of anomaly filtering."""

    retained: list[RawDataPoint]
    rejected: list[RawDataPoint]

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)


@dataclass
class HistoryResult:
    """Complete result from a history reconstruction run."""

    plugin_name: str
    entries: list[HistoryEntry]
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def total_points(self) -> int:
        return len(self.entries)

    @property
    def latest(self) -> HistoryEntry | None:
        return self.entries[-1] if self.entries else None


@dataclass
class VersionRelease:
    """First appearance of a version in the history."""

    version: str
    date: str
    index: int
    downloads: int


@dataclass
class VersionSegment:
    """Contiguous run of points attributed to one release."""

    label: str
    start: int  # inclusive
    end: int  # exclusive
    color: str


@dataclass
class SeriesPoint:
    """An (x, y) pair where x is an ISO timestamp label."""

    x: str
    y: float


@dataclass
class ChartSeries:
    """Plain data structure consumed by the report renderer."""

    title: str
    labels: list[str]
    dates: list[str]
    totals: list[int]
    growth: list[SeriesPoint]
    rolling_averages: dict[int, list[SeriesPoint]]
    releases: list[VersionRelease]
    current_versions: list[str | None]
    segments: list[VersionSegment]
    colors: list[str]

    @property
    def point_count(self) -> int:
        return len(self.labels)

    @property
    def latest_downloads(self) -> int:
        return self.totals[-1] if self.totals else 0

    @property
    def date_range(self) -> tuple[str, str] | None:
        if not self.dates:
            return None
        return self.dates[0], self.dates[-1]
