"""
Series extraction: walk the stats file history and collect one plugin's
download counts per commit.
"""

from collections.abc import Callable

from ..shared_utilities import get_logger, trace_operation
from .commit_source import CommitSource
from .data_models import (
    CommitRecord,
    ExtractionResult,
    RawDataPoint,
    timestamp_to_date,
)
from .errors import CommitSourceError, SnapshotParseError
from .snapshot import get_plugin_record, parse_snapshot

ProgressCallback = Callable[[int, int, str], None]


class SeriesExtractor:
    """
    Builds the raw per-commit series for a plugin.

    Commits are processed newest first. The first commit whose snapshot lacks
    the plugin ends the walk: the plugin is assumed not to exist in any older
    revision. A plugin that was removed and later re-added therefore loses the
    part of its history before the removal.
    """

    def __init__(
        self,
        source: CommitSource,
        stats_file: str,
        exclude_beta: bool = False,
    ):
        """Initialize the extractor.

        Args:
            source: Where commits and file contents come from
            stats_file: Path of the stats file inside the repository
            exclude_beta: Drop ``-beta`` version keys from version maps
        """
        self.logger = get_logger(__name__)
        self.source = source
        self.stats_file = stats_file
        self.exclude_beta = exclude_beta

    def list_commits(self) -> list[CommitRecord]:
        """Commits that modified the stats file, newest first."""
        commits = self.source.list_commits(self.stats_file)
        self.logger.info(
            f"Found {len(commits)} commits that modified {self.stats_file}"
        )
        return commits

    def extract(
        self,
        plugin_name: str,
        commits: list[CommitRecord] | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> ExtractionResult:
        """Collect raw data points for ``plugin_name``.

        Args:
            plugin_name: Key of the plugin in the stats file
            commits: Commits to walk (newest first); listed from the source if omitted
            progress_callback: Called with (current, total, message)

        Returns:
            Points in commit order plus bookkeeping about the walk
        """
        if commits is None:
            commits = self.list_commits()

        result = ExtractionResult(points=[], commits_total=len(commits))

        for index, commit in enumerate(commits, start=1):
            result.commits_examined += 1

            try:
                with trace_operation(
                    "extract_commit", {"revision": commit.revision_id}
                ):
                    point = self._extract_point(plugin_name, commit)
            except (CommitSourceError, SnapshotParseError) as e:
                self.logger.error(
                    f"Error processing commit {commit.revision_id}: {e}"
                )
                result.failed_revisions.append(commit.revision_id)
                continue

            if point is None:
                self.logger.info(
                    f'Plugin "{plugin_name}" not found in commit {commit.revision_id}. '
                    "Assuming it was not released yet; "
                    "stopping further processing for older commits."
                )
                result.stopped_at = commit.revision_id
                break

            result.points.append(point)
            message = (
                f"Collected data from {point.date}: {point.downloads} downloads "
                f"with {len(point.versions)} versions"
            )
            self.logger.info(message)
            if progress_callback:
                progress_callback(index, len(commits), message)

        self.logger.info(
            f"Collected {len(result.points)} data points for {plugin_name} "
            f"({len(result.failed_revisions)} commits failed)"
        )
        return result

    def _extract_point(
        self, plugin_name: str, commit: CommitRecord
    ) -> RawDataPoint | None:
        content = self.source.fetch_content(commit.revision_id, self.stats_file)
        snapshot = parse_snapshot(content)
        record = get_plugin_record(snapshot, plugin_name, self.exclude_beta)
        if record is None:
            return None

        return RawDataPoint(
            revision_id=commit.revision_id,
            timestamp_ms=commit.timestamp_ms,
            date=timestamp_to_date(commit.timestamp_ms),
            downloads=record.downloads,
            versions=record.versions,
        )
