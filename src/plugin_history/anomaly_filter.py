"""
Anomaly filtering for download series.

Total download counts only ever grow, so any recorded count that breaks the
non-decreasing trend is a data glitch. Two policies are available; both
expect points sorted newest first and return the retained points in the same
order.
"""

from abc import ABC, abstractmethod

from ..shared_utilities import get_logger
from .config import FilterPolicy
from .data_models import FilterResult, RawDataPoint


class AnomalyFilter(ABC):
    """Base class for anomaly filtering policies."""

    policy: str = ""

    def __init__(self):
        self.logger = get_logger(__name__)

    def filter(self, points: list[RawDataPoint]) -> FilterResult:
        """Drop anomalous points.

        Args:
            points: Data points sorted by timestamp, newest first

        Returns:
            Retained and rejected points, each in input order
        """
        result = self._apply(points)
        self.logger.info(
            f"Filtered out {result.rejected_count} anomalous data points "
            f"({self.policy} policy)"
        )
        return result

    @abstractmethod
    def _apply(self, points: list[RawDataPoint]) -> FilterResult:
        pass


class SequentialFilter(AnomalyFilter):
    """
    Running-floor policy.

    The newest point is always accepted and becomes the floor. Walking back in
    time, a point is accepted iff its count is at most the current floor, and
    each accepted point becomes the new floor. Equal counts are accepted. A
    rejected point never moves the floor, so the result is non-increasing
    newest→oldest (non-decreasing forward in time).
    """

    policy = FilterPolicy.SEQUENTIAL

    def _apply(self, points: list[RawDataPoint]) -> FilterResult:
        retained: list[RawDataPoint] = []
        rejected: list[RawDataPoint] = []
        last_valid_downloads: int | None = None

        for point in points:
            if last_valid_downloads is None or point.downloads <= last_valid_downloads:
                retained.append(point)
                last_valid_downloads = point.downloads
                continue

            self.logger.info(
                f"Skipping commit {point.revision_id} - downloads higher than "
                f"newer commit ({point.downloads} > {last_valid_downloads})"
            )
            rejected.append(point)

        return FilterResult(retained=retained, rejected=rejected)


class NeighborFilter(AnomalyFilter):
    """
    Local-consistency policy.

    Each point is compared against its raw neighbours only: it is anomalous if
    it exceeds the next newer point or falls below the next older point. A
    rejection does not influence the checks made for other points, so a single
    spike can also reject its well-behaved neighbour.
    """

    policy = FilterPolicy.NEIGHBOR

    def _apply(self, points: list[RawDataPoint]) -> FilterResult:
        retained: list[RawDataPoint] = []
        rejected: list[RawDataPoint] = []

        for i, current in enumerate(points):
            is_valid = True

            if i > 0:
                newer = points[i - 1]
                if current.downloads > newer.downloads:
                    self.logger.info(
                        f"Anomaly detected: {current.date} ({current.short_id}) "
                        f"has {current.downloads} downloads which is > "
                        f"previous {newer.downloads}"
                    )
                    is_valid = False

            if i < len(points) - 1:
                older = points[i + 1]
                if current.downloads < older.downloads:
                    self.logger.info(
                        f"Anomaly detected: {current.date} ({current.short_id}) "
                        f"has {current.downloads} downloads which is < "
                        f"next {older.downloads}"
                    )
                    is_valid = False

            if is_valid:
                retained.append(current)
            else:
                rejected.append(current)

        return FilterResult(retained=retained, rejected=rejected)


_FILTERS: dict[str, type[AnomalyFilter]] = {
    FilterPolicy.SEQUENTIAL: SequentialFilter,
    FilterPolicy.NEIGHBOR: NeighborFilter,
}


def get_filter(policy: str) -> AnomalyFilter:
    """Instantiate the filter for a policy name."""
    try:
        return _FILTERS[policy]()
    except KeyError:
        raise ValueError(f"Unsupported filter policy: {policy}") from None


def sort_newest_first(points: list[RawDataPoint]) -> list[RawDataPoint]:
    """Order points by timestamp, newest first (stable for equal timestamps)."""
    return sorted(points, key=lambda p: p.timestamp_ms, reverse=True)
