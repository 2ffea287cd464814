"""
CLI for rendering the download chart from an existing history file.
"""

from pathlib import Path

import click
from dotenv import load_dotenv

from ..shared_utilities import (
    chart_filename_for_history,
    configure_logging,
    get_logger,
    write_atomic,
)
from ..shared_utilities.telemetry import trace_function
from .chart_data import build_chart_series
from .config import DEFAULT_ROLLING_WINDOWS
from .errors import HistoryFileError
from .history_loader import load_history
from .report_renderer import ReportRenderer

load_dotenv()


def render_history_file(
    history_path: str | Path,
    output_path: str | Path | None = None,
    title: str | None = None,
    windows: tuple[int, ...] = DEFAULT_ROLLING_WINDOWS,
) -> Path:
    """Render the HTML report for a history file.

    Args:
        history_path: History JSON written by ``plugin-history``
        output_path: Destination HTML file (default: next to the history file)
        title: Plugin name shown on the report (default: derived from file name)
        windows: Rolling average window sizes

    Returns:
        Path of the written report

    Raises:
        HistoryFileError: If the history file is missing, malformed or empty
    """
    logger = get_logger(__name__)
    history_path = Path(history_path)
    entries = load_history(history_path)
    if not entries:
        raise HistoryFileError(f"No data points in {history_path}")

    if title is None:
        title = history_path.stem.removesuffix("-history")
    if output_path is None:
        output_path = history_path.with_name(chart_filename_for_history(history_path))

    logger.info("Processing data for the chart...")
    series = build_chart_series(entries, title, windows)
    content = ReportRenderer().render(series, entries)

    output_path = Path(output_path)
    logger.info(f"Writing chart to {output_path}...")
    write_atomic(output_path, content)
    return output_path


@click.command()
@click.argument("history_file", type=click.Path(dir_okay=False))
@click.option("--title", help="Plugin name shown on the report")
@click.option(
    "-o",
    "--output",
    "output_file",
    type=click.Path(dir_okay=False),
    help="Output HTML file (default: <plugin>-downloads-chart.html next to input)",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@trace_function("plugin_chart_main")
def main(
    history_file: str, title: str | None, output_file: str | None, verbose: bool
) -> None:
    """
    Render an interactive download chart from a plugin history file.

    Accepts both history shapes written by plugin-history (timeline and daily).

    Examples:

        plugin-chart chatgpt-md-history.json

        plugin-chart chatgpt-md-history.json -o report.html --title "ChatGPT MD"
    """
    configure_logging(level="DEBUG" if verbose else None)

    try:
        output_path = render_history_file(history_file, output_file, title)
    except HistoryFileError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort() from e

    click.echo(f"Done! Open {output_path} in your browser to view the chart.")


if __name__ == "__main__":
    main()
