"""
Main CLI entry point for plugin download history extraction.
"""

import click
from dotenv import load_dotenv

from ..shared_utilities import OutputFormat, configure_logging, get_logger
from ..shared_utilities.telemetry import trace_function
from .config import ConfigError, FilterPolicy, HistoryConfig, OutputMode, Variant
from .core import PluginHistoryTracker
from .errors import PluginHistoryError

# Load environment variables from .env file
load_dotenv()


class ProgressIndicator:
    """Simple progress indicator for CLI operations."""

    def __init__(self, quiet: bool = False):
        """Initialize progress indicator.

        Args:
            quiet: If True, suppress progress output
        """
        self.quiet = quiet

    def update(self, current: int, total: int, message: str) -> None:
        """Update progress display."""
        if self.quiet:
            return

        if total > 0:
            percentage = (current / total) * 100
            click.echo(f"[{percentage:6.1f}%] {message}", err=True)
        else:
            click.echo(f"[  ---  ] {message}", err=True)


@click.command()
@click.argument("plugin_name")
@click.option(
    "--variant",
    type=click.Choice(Variant.choices()),
    default=Variant.STRICT,
    help="Preset of filter policy, dedup, beta handling and output shape",
    show_default=True,
)
@click.option(
    "--policy",
    "filter_policy",
    type=click.Choice(FilterPolicy.choices()),
    help="Anomaly filter policy (overrides the variant)",
)
@click.option(
    "--dedup-by-day/--no-dedup-by-day",
    default=None,
    help="Keep one data point per calendar day (overrides the variant)",
)
@click.option(
    "--include-beta",
    is_flag=True,
    default=None,
    help="Keep -beta versions in version maps (overrides the variant)",
)
@click.option(
    "--output-mode",
    type=click.Choice(OutputMode.choices()),
    help="Shape of the history JSON (overrides the variant)",
)
@click.option(
    "--stats-file",
    help="Stats file path inside the repository "
    "(default: community-plugin-stats.json or PLUGIN_STATS_FILE)",
)
@click.option(
    "--repo-path",
    type=click.Path(exists=True, file_okay=False),
    help="Git working tree holding the stats file (default: cwd or PLUGIN_REPO_PATH)",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default=".",
    help="Directory for the history file and chart",
    show_default=True,
)
@click.option("--no-chart", is_flag=True, help="Skip generating the HTML chart")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(
        [f for f in OutputFormat.choices() if f != OutputFormat.HTML]
    ),
    help="Also print the history to stdout in this format",
)
@click.option("-q", "--quiet", is_flag=True, help="Suppress progress indicators")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@trace_function("plugin_history_main", include_args=True)
def main(
    plugin_name: str,
    variant: str,
    filter_policy: str | None,
    dedup_by_day: bool | None,
    include_beta: bool | None,
    output_mode: str | None,
    stats_file: str | None,
    repo_path: str | None,
    output_dir: str,
    no_chart: bool,
    output_format: str | None,
    quiet: bool,
    verbose: bool,
) -> None:
    """
    Reconstruct a plugin's download history from the stats file's git history.

    Walks every commit that modified the stats file (newest first), drops
    anomalous download counts, computes daily growth and writes
    <plugin>-history.json plus an interactive <plugin>-downloads-chart.html.

    Examples:

        # Canonical strict pipeline
        plugin-history "chatgpt-md"

        # Sequential filter with one point per day
        plugin-history "chatgpt-md" --variant simple

        # Strict filtering but keep beta versions
        plugin-history "chatgpt-md" --include-beta

        # Print a table of the reconstructed history
        plugin-history "chatgpt-md" --format table
    """
    configure_logging(level="DEBUG" if verbose else ("WARNING" if quiet else None))
    logger = get_logger(__name__)

    try:
        config = HistoryConfig.from_env(
            plugin_name,
            variant=variant,
            filter_policy=filter_policy,
            dedup_by_day=dedup_by_day,
            exclude_beta=(not include_beta) if include_beta else None,
            output_mode=output_mode,
            stats_file=stats_file,
            repo_path=repo_path,
            output_dir=output_dir,
            render_chart=not no_chart,
        )
    except ConfigError as e:
        raise click.BadParameter(str(e)) from e

    progress = ProgressIndicator(quiet=quiet)
    tracker = PluginHistoryTracker(config)

    try:
        outputs = tracker.run(progress_callback=progress.update)
    except PluginHistoryError as e:
        logger.error(f"History extraction failed: {e}")
        click.echo(f"Error: {e}", err=True)
        raise click.Abort() from e

    result = outputs.result
    click.echo(
        f"Saved {result.total_points} data points to {outputs.history_path} "
        f"({result.metadata.get('rejected_count', 0)} anomalies filtered)"
    )
    if outputs.chart_path:
        click.echo(f"Generated chart: {outputs.chart_path}")

    if output_format:
        click.echo(tracker.formatter.format(result, output_format))


if __name__ == "__main__":
    main()
