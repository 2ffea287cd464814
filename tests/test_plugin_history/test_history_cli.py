"""Tests for the plugin-history command line."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from src.plugin_history.main import ProgressIndicator, main
from tests.test_plugin_history.test_utils import PLUGIN


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep CLI runs from reconfiguring global logging."""
    with patch("src.plugin_history.main.configure_logging"):
        yield


class TestHistoryCli:
    """Test the main command."""

    def test_missing_plugin_name(self):
        """Test the plugin name is required."""
        result = CliRunner().invoke(main, [])

        assert result.exit_code == 2
        assert "Missing argument" in result.output

    def test_full_run(self, git_repo, tmp_path):
        """Test a run over a real repository writes both artifacts."""
        out_dir = tmp_path / "out"
        result = CliRunner().invoke(
            main, [PLUGIN, "--repo-path", str(git_repo), "--output-dir", str(out_dir)]
        )

        assert result.exit_code == 0, result.output
        assert "Saved 3 data points" in result.output
        assert "(0 anomalies filtered)" in result.output
        assert "Generated chart:" in result.output

        document = json.loads((out_dir / "chatgpt-md-history.json").read_text())
        totals = [item["data"]["downloads"] for item in document.values()]
        assert sorted(totals) == [100, 150, 250]
        assert (out_dir / "chatgpt-md-downloads-chart.html").exists()

    def test_simple_variant(self, git_repo, tmp_path):
        """Test the simple variant writes the daily shape."""
        result = CliRunner().invoke(
            main,
            [
                PLUGIN,
                "--variant",
                "simple",
                "--repo-path",
                str(git_repo),
                "--output-dir",
                str(tmp_path),
                "--no-chart",
                "-q",
            ],
        )

        assert result.exit_code == 0, result.output
        document = json.loads((tmp_path / "chatgpt-md-history.json").read_text())
        assert [item["downloads"] for item in document] == [100, 150, 250]
        assert not (tmp_path / "chatgpt-md-downloads-chart.html").exists()
        assert "Generated chart" not in result.output

    def test_output_mode_override(self, git_repo, tmp_path):
        """Test --output-mode overrides the variant's shape."""
        result = CliRunner().invoke(
            main,
            [
                PLUGIN,
                "--output-mode",
                "daily",
                "--repo-path",
                str(git_repo),
                "--output-dir",
                str(tmp_path),
                "--no-chart",
            ],
        )

        assert result.exit_code == 0, result.output
        document = json.loads((tmp_path / "chatgpt-md-history.json").read_text())
        assert isinstance(document, list)

    def test_print_format(self, git_repo, tmp_path):
        """Test --format prints the history after saving."""
        result = CliRunner().invoke(
            main,
            [
                PLUGIN,
                "--repo-path",
                str(git_repo),
                "--output-dir",
                str(tmp_path),
                "--no-chart",
                "--format",
                "csv",
            ],
        )

        assert result.exit_code == 0, result.output
        header = "date,timestamp,revision,downloads,daily_growth,versions"
        assert header in result.output

    def test_html_not_printable(self):
        """Test the HTML report is not offered as a print format."""
        result = CliRunner().invoke(main, [PLUGIN, "--format", "html"])
        assert result.exit_code == 2

    def test_unknown_plugin(self, git_repo, tmp_path):
        """Test a plugin missing from the stats file aborts."""
        result = CliRunner().invoke(
            main,
            [
                "no-such-plugin",
                "--repo-path",
                str(git_repo),
                "--output-dir",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "no-such-plugin" in result.output
        assert not (tmp_path / "no-such-plugin-history.json").exists()

    def test_untracked_stats_file(self, git_repo, tmp_path):
        """Test an untracked stats file aborts with an explanation."""
        result = CliRunner().invoke(
            main,
            [
                PLUGIN,
                "--stats-file",
                "nope.json",
                "--repo-path",
                str(git_repo),
                "--output-dir",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 1
        assert "No commits found for nope.json" in result.output

    def test_nonexistent_repo_path(self, tmp_path):
        """Test the repository path must exist."""
        result = CliRunner().invoke(
            main, [PLUGIN, "--repo-path", str(tmp_path / "missing")]
        )
        assert result.exit_code == 2

    def test_invalid_policy(self):
        """Test policy choices are validated."""
        result = CliRunner().invoke(main, [PLUGIN, "--policy", "median"])
        assert result.exit_code == 2


class TestProgressIndicator:
    """Test ProgressIndicator."""

    def test_update(self, capsys):
        """Test progress lines go to stderr."""
        ProgressIndicator().update(1, 4, "working")
        assert "[  25.0%] working" in capsys.readouterr().err

    def test_quiet(self, capsys):
        """Test quiet mode prints nothing."""
        ProgressIndicator(quiet=True).update(1, 4, "working")
        assert capsys.readouterr().err == ""
