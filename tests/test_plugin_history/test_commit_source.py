"""Tests for commit sources."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from src.plugin_history.commit_source import (
    CachingCommitSource,
    GitCommitSource,
    InMemoryCommitSource,
)
from src.plugin_history.data_models import CommitRecord
from src.plugin_history.errors import (
    CommitSourceError,
    RevisionNotFoundError,
    SnapshotParseError,
    StatsFileNotTrackedError,
)
from tests.test_plugin_history.test_utils import (
    BASE_TS,
    DAY_SECONDS,
    PLUGIN,
    STATS_FILE,
    commit_stats,
    plugin_snapshot,
)


class TestInMemoryCommitSource:
    """Test the scripted commit source."""

    def test_list_commits(self, scenario_source):
        """Test commits come back newest first with millisecond timestamps."""
        commits = scenario_source.list_commits(STATS_FILE)

        assert [c.revision_id for c in commits] == ["ccc333", "bbb222", "aaa111"]
        assert commits[0].timestamp_ms == (BASE_TS + 30 * DAY_SECONDS) * 1000

    def test_fetch_content(self, scenario_source):
        """Test content at a revision."""
        assert scenario_source.fetch_content("aaa111", STATS_FILE) == plugin_snapshot(
            100, {"1.0.0": 100}
        )

    def test_untracked_path(self, scenario_source):
        """Test listing another path fails as untracked."""
        with pytest.raises(StatsFileNotTrackedError):
            scenario_source.list_commits("other.json")

    def test_empty_history(self):
        """Test an empty history is untracked."""
        with pytest.raises(StatsFileNotTrackedError):
            InMemoryCommitSource([]).list_commits(STATS_FILE)

    def test_unknown_revision(self, scenario_source):
        """Test unknown revisions raise CommitSourceError."""
        with pytest.raises(CommitSourceError):
            scenario_source.fetch_content("nope", STATS_FILE)

    def test_missing_file_at_revision(self, make_source):
        """Test None content means the file was absent."""
        source = make_source([("abc", 0, None)])
        with pytest.raises(RevisionNotFoundError) as exc_info:
            source.fetch_content("abc", STATS_FILE)

        assert exc_info.value.revision_id == "abc"
        assert exc_info.value.path == STATS_FILE


class TestCachingCommitSource:
    """Test content memoization."""

    def test_fetch_is_memoized(self):
        """Test repeated fetches hit the wrapped source once."""
        inner = MagicMock()
        inner.fetch_content.return_value = "{}"
        source = CachingCommitSource(inner)

        assert source.fetch_content("abc", STATS_FILE) == "{}"
        assert source.fetch_content("abc", STATS_FILE) == "{}"

        inner.fetch_content.assert_called_once_with("abc", STATS_FILE)
        assert source.hits == 1
        assert source.misses == 1

    def test_clear(self):
        """Test clearing forces a refetch."""
        inner = MagicMock()
        inner.fetch_content.return_value = "{}"
        source = CachingCommitSource(inner)

        source.fetch_content("abc", STATS_FILE)
        source.clear()
        source.fetch_content("abc", STATS_FILE)

        assert inner.fetch_content.call_count == 2

    def test_errors_not_cached(self):
        """Test failed fetches are retried."""
        inner = MagicMock()
        inner.fetch_content.side_effect = [CommitSourceError("boom"), "{}"]
        source = CachingCommitSource(inner)

        with pytest.raises(CommitSourceError):
            source.fetch_content("abc", STATS_FILE)
        assert source.fetch_content("abc", STATS_FILE) == "{}"

    def test_list_commits_delegates(self):
        """Test commit listing is passed through."""
        inner = MagicMock()
        inner.list_commits.return_value = [CommitRecord("abc", 1000)]
        source = CachingCommitSource(inner)

        assert source.list_commits(STATS_FILE) == [CommitRecord("abc", 1000)]


class TestGitCommitSource:
    """Test the git-backed commit source against a real repository."""

    def test_list_commits(self, git_repo):
        """Test only commits touching the stats file are listed, newest first."""
        commits = GitCommitSource(git_repo).list_commits(STATS_FILE)

        assert len(commits) == 3
        assert [c.timestamp_ms for c in commits] == [
            (BASE_TS + 15 * DAY_SECONDS) * 1000,
            (BASE_TS + 10 * DAY_SECONDS) * 1000,
            BASE_TS * 1000,
        ]
        assert all(len(c.revision_id) == 40 for c in commits)

    def test_fetch_historical_content(self, git_repo):
        """Test content is read at the requested revision, not the working tree."""
        source = GitCommitSource(git_repo)
        oldest = source.list_commits(STATS_FILE)[-1]

        content = source.fetch_content(oldest.revision_id, STATS_FILE)

        assert '"downloads": 100' in content
        assert PLUGIN in content

    def test_fetch_before_file_existed(self, git_repo):
        """Test a revision predating the file raises RevisionNotFoundError."""
        result = subprocess.run(
            ["git", "-C", str(git_repo), "rev-list", "--max-parents=0", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
        )
        root_revision = result.stdout.strip()

        with pytest.raises(RevisionNotFoundError):
            GitCommitSource(git_repo).fetch_content(root_revision, STATS_FILE)

    def test_untracked_file(self, git_repo):
        """Test a path never committed is reported as untracked."""
        with pytest.raises(StatsFileNotTrackedError):
            GitCommitSource(git_repo).list_commits("missing-stats.json")

    def test_invalid_revision(self, git_repo):
        """Test an unknown revision is a generic commit source error."""
        assert (git_repo / STATS_FILE).exists()
        with pytest.raises(CommitSourceError, match="Unknown revision") as exc_info:
            GitCommitSource(git_repo).fetch_content("0" * 40, STATS_FILE)
        assert not isinstance(exc_info.value, RevisionNotFoundError)

    def test_missing_git_executable(self, git_repo):
        """Test a missing git binary is wrapped in CommitSourceError."""
        source = GitCommitSource(git_repo, git_executable="definitely-not-git-xyz")
        with pytest.raises(CommitSourceError, match="Failed to run"):
            source.list_commits(STATS_FILE)

    def test_git_log_failure(self, tmp_path):
        """Test a failing git log is reported with its stderr."""
        failed = subprocess.CompletedProcess(
            args=[],
            returncode=128,
            stdout=b"",
            stderr=b"fatal: not a git repository",
        )
        with patch("subprocess.run", return_value=failed):
            with pytest.raises(CommitSourceError, match="not a git repository"):
                GitCommitSource(tmp_path).list_commits(STATS_FILE)

    def test_unexpected_log_lines_ignored(self, tmp_path):
        """Test malformed git log lines are skipped."""
        output = subprocess.CompletedProcess(
            args=[], returncode=0, stdout=b"abc 1700000000\ngarbage\n", stderr=b""
        )
        with patch("subprocess.run", return_value=output):
            commits = GitCommitSource(tmp_path).list_commits(STATS_FILE)

        assert commits == [CommitRecord("abc", 1_700_000_000_000)]

    def test_unknown_revision_checked_before_path(self, tmp_path):
        """Test a path-style error for a bad revision is not a missing file."""
        show_failed = subprocess.CompletedProcess(
            args=[],
            returncode=128,
            stdout=b"",
            stderr=b"fatal: path 'stats.json' exists on disk, but not in 'deadbeef'",
        )
        not_a_commit = subprocess.CompletedProcess(
            args=[], returncode=1, stdout=b"", stderr=b""
        )
        with patch("subprocess.run", side_effect=[show_failed, not_a_commit]) as run:
            with pytest.raises(CommitSourceError, match="Unknown revision") as exc_info:
                GitCommitSource(tmp_path).fetch_content("deadbeef", "stats.json")

        assert not isinstance(exc_info.value, RevisionNotFoundError)
        assert run.call_args.args[0][1:] == [
            "rev-parse",
            "--verify",
            "--quiet",
            "deadbeef^{commit}",
        ]

    def test_invalid_utf8_content(self, git_repo):
        """Test undecodable file content is reported as a parse error."""
        commit_stats(git_repo, b'{"chatgpt-md": {"note": "\xff\xfe"}}', 20)
        source = GitCommitSource(git_repo)
        newest = source.list_commits(STATS_FILE)[0]

        with pytest.raises(SnapshotParseError, match="not valid UTF-8"):
            source.fetch_content(newest.revision_id, STATS_FILE)
