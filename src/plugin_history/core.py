"""
Core plugin history reconstruction.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ..shared_utilities import (
    OutputManager,
    chart_filename,
    get_logger,
    get_logging_manager,
    get_telemetry_manager,
    history_filename,
    trace_operation,
)
from .anomaly_filter import get_filter, sort_newest_first
from .commit_source import CachingCommitSource, CommitSource, GitCommitSource
from .config import HistoryConfig
from .data_models import HistoryResult
from .errors import PluginHistoryError, PluginNotFoundError
from .extractor import SeriesExtractor
from .history_builder import HistoryBuilder
from .output_formatter import PluginHistoryFormatter


@dataclass
class RunOutputs:
    """Artifacts written by a full run."""

    result: HistoryResult
    history_path: Path
    chart_path: Path | None = None


class PluginHistoryTracker:
    """
    Reconstructs a plugin's download history from the stats file's commits.

    Stages run strictly in order: extract raw points from every commit, filter
    anomalies, then deduplicate and compute growth. Nothing is persisted
    between runs; every run recomputes the series from version control.
    """

    def __init__(self, config: HistoryConfig, source: CommitSource | None = None):
        """Initialize the tracker.

        Args:
            config: Run configuration
            source: Commit source; defaults to git in ``config.repo_path``
        """
        self.logger = get_logger(__name__)
        self.config = config
        self.source = source or CachingCommitSource(GitCommitSource(config.repo_path))
        self.extractor = SeriesExtractor(
            self.source, config.stats_file, exclude_beta=config.exclude_beta
        )
        self.anomaly_filter = get_filter(config.filter_policy)
        self.builder = HistoryBuilder(dedup_by_day=config.dedup_by_day)
        self.formatter = PluginHistoryFormatter(output_mode=config.output_mode)
        self.output_manager = OutputManager(config.output_dir)

    def reconstruct(
        self, progress_callback: Callable[[int, int, str], None] | None = None
    ) -> HistoryResult:
        """Run extraction, filtering and history building.

        Args:
            progress_callback: Called with (current, total, message) per commit

        Returns:
            Ordered history and run metadata

        Raises:
            StatsFileNotTrackedError: If no commit touched the stats file
            PluginNotFoundError: If the plugin is absent from the newest snapshot
        """
        plugin_name = self.config.plugin_name
        self.logger.info(f'Extracting stats history for "{plugin_name}" plugin...')
        logging_manager = get_logging_manager()
        logging_manager.log_operation_start("reconstruct_history")
        start_time = time.time()

        try:
            with trace_operation("reconstruct_history", {"plugin": plugin_name}):
                commits = self.extractor.list_commits()
                extraction = self.extractor.extract(
                    plugin_name, commits, progress_callback
                )
                if not extraction.points:
                    raise PluginNotFoundError(plugin_name, self.config.stats_file)

                policy = self.anomaly_filter.policy
                with trace_operation("filter_anomalies", {"policy": policy}) as span:
                    filtered = self.anomaly_filter.filter(
                        sort_newest_first(extraction.points)
                    )
                    get_telemetry_manager().add_event(
                        span,
                        "anomalies_filtered",
                        {"rejected": filtered.rejected_count},
                    )

                with trace_operation("build_history"):
                    entries = self.builder.build(filtered.retained)
        except PluginHistoryError as e:
            logging_manager.log_operation_error("reconstruct_history", e)
            raise

        metadata = {
            **self.config.describe(),
            "commits_total": extraction.commits_total,
            "commits_examined": extraction.commits_examined,
            "failed_revisions": list(extraction.failed_revisions),
            "stopped_at": extraction.stopped_at,
            "raw_points": len(extraction.points),
            "rejected_count": filtered.rejected_count,
            "duplicates_skipped": self.builder.duplicates_skipped,
        }

        logging_manager.log_operation_complete(
            "reconstruct_history", time.time() - start_time
        )
        return HistoryResult(
            plugin_name=plugin_name, entries=entries, metadata=metadata
        )

    def save_history(self, result: HistoryResult) -> Path:
        """Write the history JSON document to the output directory."""
        content = self.formatter.format(result, "json")
        path = self.output_manager.save_output(
            content, history_filename(result.plugin_name)
        )
        self.logger.info(f"Saved {result.total_points} data points to {path}")
        return path

    def render_report(self, result: HistoryResult) -> Path:
        """Write the HTML report to the output directory."""
        content = self.formatter.format(
            result, "html", windows=self.config.rolling_windows
        )
        path = self.output_manager.save_output(
            content, chart_filename(result.plugin_name)
        )
        self.logger.info(f"Generated chart: {path}")
        return path

    def run(
        self, progress_callback: Callable[[int, int, str], None] | None = None
    ) -> RunOutputs:
        """Reconstruct the history and write all configured artifacts."""
        result = self.reconstruct(progress_callback)
        outputs = RunOutputs(result=result, history_path=self.save_history(result))
        if self.config.render_chart:
            outputs.chart_path = self.render_report(result)
        return outputs
