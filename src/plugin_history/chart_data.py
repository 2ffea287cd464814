"""
Chart series computation.

Turns an ordered history into the plain data the HTML report plots: labels,
totals, growth rate, rolling averages and version release markers.
"""

from ..shared_utilities import get_logger
from .config import DEFAULT_ROLLING_WINDOWS
from .data_models import (
    ChartSeries,
    HistoryEntry,
    SeriesPoint,
    VersionRelease,
    VersionSegment,
    timestamp_to_iso,
)
from .history_builder import daily_growth_rates, rolling_average

logger = get_logger(__name__)

BASE_COLORS = [
    "#0066cc",  # blue
    "#cc0000",  # red
    "#009900",  # green
    "#9900cc",  # purple
    "#ff9900",  # orange
    "#00cccc",  # teal
    "#cc0099",  # pink
    "#666600",  # olive
    "#ff0099",  # magenta
    "#006666",  # dark cyan
]

INITIAL_SEGMENT_LABEL = "Initial"
INITIAL_SEGMENT_COLOR = "#888888"


def version_sort_key(version: str) -> tuple[int, ...]:
    """Numeric sort key for dotted versions; non-numeric parts count as 0."""
    parts = []
    for part in version.split("."):
        try:
            parts.append(int(part))
        except ValueError:
            parts.append(0)
    return tuple(parts)


def _compare_versions(a: str, b: str) -> int:
    a_parts, b_parts = version_sort_key(a), version_sort_key(b)
    for i in range(max(len(a_parts), len(b_parts))):
        a_val = a_parts[i] if i < len(a_parts) else 0
        b_val = b_parts[i] if i < len(b_parts) else 0
        if a_val != b_val:
            return a_val - b_val
    return 0


def newest_version(versions: list[str]) -> str:
    """Highest version of a non-empty list; the first listed wins ties."""
    newest = versions[0]
    for version in versions[1:]:
        if _compare_versions(version, newest) > 0:
            newest = version
    return newest


def generate_colors(count: int) -> list[str]:
    """Cycle through the base palette to get ``count`` colors."""
    return [BASE_COLORS[i % len(BASE_COLORS)] for i in range(count)]


def find_version_releases(entries: list[HistoryEntry]) -> list[VersionRelease]:
    """First appearance of every version, in chronological order."""
    releases: list[VersionRelease] = []
    seen: set[str] = set()
    for index, entry in enumerate(entries):
        for version in entry.versions:
            if version in seen:
                continue
            seen.add(version)
            releases.append(
                VersionRelease(
                    version=version,
                    date=entry.date,
                    index=index,
                    downloads=entry.downloads,
                )
            )
    return releases


def track_current_versions(entries: list[HistoryEntry]) -> list[str | None]:
    """
    Tag each point with the release it belongs to.

    The current version moves to the newest listed version whenever the
    previous current version is still listed at that point.
    """
    current: str | None = None
    tagged: list[str | None] = []
    for entry in entries:
        versions = list(entry.versions)
        if versions and (current is None or current in versions):
            current = newest_version(versions)
        tagged.append(current)
    return tagged


def build_segments(
    point_count: int, releases: list[VersionRelease], colors: list[str]
) -> list[VersionSegment]:
    """Split the series into runs bounded by release indices."""
    palette = colors or BASE_COLORS[:1]
    boundaries = [release.index for release in releases]
    segments: list[VersionSegment] = []

    for i in range(len(boundaries) + 1):
        start = 0 if i == 0 else boundaries[i - 1]
        end = point_count if i == len(boundaries) else boundaries[i]
        if start >= end:
            continue
        if i == 0:
            label, color = INITIAL_SEGMENT_LABEL, INITIAL_SEGMENT_COLOR
        else:
            label, color = releases[i - 1].version, palette[(i - 1) % len(palette)]
        segments.append(VersionSegment(label=label, start=start, end=end, color=color))
    return segments


def build_chart_series(
    entries: list[HistoryEntry],
    title: str,
    windows: tuple[int, ...] = DEFAULT_ROLLING_WINDOWS,
) -> ChartSeries:
    """Compute everything the report needs from an ascending history.

    The growth series starts at the second point: the first point has no
    predecessor to measure against.

    Args:
        entries: History ordered oldest to newest
        title: Plugin name shown on the report
        windows: Rolling average window sizes, in points

    Returns:
        Chart data for the renderer
    """
    labels = [timestamp_to_iso(entry.timestamp_ms) for entry in entries]
    rates = daily_growth_rates(entries)[1:]
    growth = [
        SeriesPoint(x=label, y=rate)
        for label, rate in zip(labels[1:], rates, strict=True)
    ]

    rolling_averages = {}
    for window in windows:
        averages = rolling_average([point.y for point in growth], window)
        rolling_averages[window] = [
            SeriesPoint(x=point.x, y=average)
            for point, average in zip(growth, averages, strict=True)
        ]

    releases = find_version_releases(entries)
    colors = generate_colors(len(releases))

    logger.debug(
        f"Computed chart series: {len(entries)} points, {len(releases)} releases"
    )

    return ChartSeries(
        title=title,
        labels=labels,
        dates=[entry.date for entry in entries],
        totals=[entry.downloads for entry in entries],
        growth=growth,
        rolling_averages=rolling_averages,
        releases=releases,
        current_versions=track_current_versions(entries),
        segments=build_segments(len(entries), releases, colors),
        colors=colors,
    )
