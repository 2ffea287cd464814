"""
Pytest configuration and shared fixtures.
"""

import pytest

from src.plugin_history.commit_source import InMemoryCommitSource
from tests.test_plugin_history.test_utils import (
    BASE_TS,
    DAY_SECONDS,
    STATS_FILE,
    commit_stats,
    make_entry,
    plugin_snapshot,
    run_git,
)


@pytest.fixture
def make_source():
    """Build an in-memory commit source from (rev, day, content) tuples."""

    def _make(commits):
        return InMemoryCommitSource(
            [
                (rev, BASE_TS + int(day * DAY_SECONDS), content)
                for rev, day, content in commits
            ],
            path=STATS_FILE,
        )

    return _make


@pytest.fixture
def scenario_source(make_source):
    """Three commits, newest first: 500 (day 30), 300 (day 20), 100 (day 0)."""
    return make_source(
        [
            ("ccc333", 30, plugin_snapshot(500, {"1.0.0": 200, "1.1.0": 300})),
            ("bbb222", 20, plugin_snapshot(300, {"1.0.0": 200, "1.1.0": 100})),
            ("aaa111", 0, plugin_snapshot(100, {"1.0.0": 100})),
        ]
    )


@pytest.fixture
def sample_entries():
    """Four ascending history entries with three releases."""
    return [
        make_entry(100, 0, {"1.0.0": 100}, growth=100),
        make_entry(150, 10, {"1.0.0": 120, "1.1.0": 30}, growth=5),
        make_entry(250, 15, {"1.0.0": 130, "1.1.0": 120}, growth=20),
        make_entry(400, 20, {"1.1.0": 200, "2.0.0": 70}, growth=30),
    ]


@pytest.fixture
def git_repo(tmp_path):
    """Real repository whose stats file changes over four dated commits."""
    repo = tmp_path / "repo"
    repo.mkdir()

    run_git(repo, "init")
    run_git(repo, "config", "user.email", "tester@test.com")
    run_git(repo, "config", "user.name", "Tester")
    run_git(repo, "config", "commit.gpgsign", "false")

    # Commit 1 - repository without the stats file
    (repo / "README.md").write_text("# Stats\n", encoding="utf-8")
    run_git(repo, "add", ".")
    run_git(repo, "commit", "-m", "initial", timestamp=BASE_TS - DAY_SECONDS)

    # Commits 2-4 - stats file appears and grows
    for day, downloads in ((0, 100), (10, 150), (15, 250)):
        snapshot = plugin_snapshot(downloads, {"1.0.0": downloads})
        commit_stats(repo, snapshot.encode("utf-8"), day)

    return repo
