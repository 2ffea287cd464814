"""
History building: day deduplication, growth rates and rolling averages.
"""

from decimal import ROUND_HALF_UP, Decimal

from ..shared_utilities import get_logger
from .data_models import MS_PER_DAY, HistoryEntry, RawDataPoint


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(Decimal(repr(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def daily_growth_rates(points: list[RawDataPoint] | list[HistoryEntry]) -> list[int]:
    """Compute downloads per day between consecutive points.

    Args:
        points: Points ordered oldest to newest

    Returns:
        One rate per point. The oldest point's rate is its own count (growth
        from zero); a zero or negative time gap yields 0.
    """
    rates: list[int] = []
    for i, point in enumerate(points):
        if i == 0:
            rates.append(point.downloads)
            continue

        previous = points[i - 1]
        days_difference = (point.timestamp_ms - previous.timestamp_ms) / MS_PER_DAY
        download_difference = point.downloads - previous.downloads
        if days_difference > 0:
            rate = download_difference / days_difference
            rates.append(round_half_away_from_zero(rate))
        else:
            rates.append(0)
    return rates


def rolling_average(values: list[float], window: int) -> list[float]:
    """Trailing mean over up to ``window`` values ending at each index.

    The window shrinks near the start; there is no padding and no look-ahead.
    """
    if window < 1:
        raise ValueError("window must be positive")

    averages: list[float] = []
    for i in range(len(values)):
        window_values = values[max(0, i - window + 1) : i + 1]
        averages.append(sum(window_values) / len(window_values))
    return averages


class HistoryBuilder:
    """Turns validated data points into the final ordered history."""

    def __init__(self, dedup_by_day: bool = False):
        """Initialize the builder.

        Args:
            dedup_by_day: Keep only the first point seen for each calendar date
        """
        self.logger = get_logger(__name__)
        self.dedup_by_day = dedup_by_day
        self.duplicates_skipped = 0

    def deduplicate(self, points: list[RawDataPoint]) -> list[RawDataPoint]:
        """Keep the first point encountered for each date.

        Args:
            points: Points in processing order (newest first, so the latest
                commit of a day wins)
        """
        seen_dates: set[str] = set()
        unique: list[RawDataPoint] = []
        for point in points:
            if point.date in seen_dates:
                self.logger.info(f"Skipping duplicate date: {point.date}")
                self.duplicates_skipped += 1
                continue
            seen_dates.add(point.date)
            unique.append(point)
        return unique

    def build(self, validated: list[RawDataPoint]) -> list[HistoryEntry]:
        """Build history entries.

        Args:
            validated: Filtered points in processing order (newest first)

        Returns:
            Entries sorted ascending by timestamp
        """
        self.duplicates_skipped = 0
        points = self.deduplicate(validated) if self.dedup_by_day else list(validated)
        points.sort(key=lambda p: p.timestamp_ms)

        rates = daily_growth_rates(points)
        entries = [
            HistoryEntry(
                date=point.date,
                timestamp_ms=point.timestamp_ms,
                revision_id=point.revision_id,
                downloads=point.downloads,
                daily_growth=rate,
                versions=dict(point.versions),
            )
            for point, rate in zip(points, rates, strict=True)
        ]

        self.logger.info(
            f"Built history with {len(entries)} entries "
            f"({self.duplicates_skipped} duplicate dates skipped)"
        )
        return entries
