"""
Access to the historical versions of the stats file.

The pipeline only needs two operations from version control: the list of
commits that touched a path (newest first) and the file content at one of
those commits. ``GitCommitSource`` shells out to git; ``InMemoryCommitSource``
serves scripted histories for tests and dry runs.
"""

import subprocess
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

from ..shared_utilities import get_logger
from .data_models import CommitRecord
from .errors import (
    CommitSourceError,
    RevisionNotFoundError,
    SnapshotParseError,
    StatsFileNotTrackedError,
)

logger = get_logger(__name__)

# git show reports these when the path is absent at a revision
_MISSING_PATH_MARKERS = ("does not exist in", "exists on disk, but not in")


class CommitSource(ABC):
    """Interface to a version-controlled file's history."""

    @abstractmethod
    def list_commits(self, path: str) -> list[CommitRecord]:
        """Return commits that modified ``path``, newest first."""
        pass

    @abstractmethod
    def fetch_content(self, revision_id: str, path: str) -> str:
        """Return the content of ``path`` as it existed at ``revision_id``."""
        pass


class GitCommitSource(CommitSource):
    """Commit source backed by the ``git`` command line."""

    def __init__(self, repo_path: str | Path = ".", git_executable: str = "git"):
        """Initialize the git commit source.

        Args:
            repo_path: Working tree of the repository holding the stats file
            git_executable: Name or path of the git binary
        """
        self.repo_path = Path(repo_path)
        self.git_executable = git_executable

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        cmd = [self.git_executable, *args]
        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                cwd=self.repo_path,
                check=False,
            )
        except OSError as e:
            raise CommitSourceError(f"Failed to run {' '.join(cmd)}: {e}") from e

    @staticmethod
    def _stderr(result: subprocess.CompletedProcess) -> str:
        return result.stderr.decode("utf-8", errors="replace").strip()

    def _is_commit(self, revision_id: str) -> bool:
        result = self._run(
            "rev-parse", "--verify", "--quiet", f"{revision_id}^{{commit}}"
        )
        return result.returncode == 0

    def list_commits(self, path: str) -> list[CommitRecord]:
        result = self._run("log", "--pretty=format:%H %at", "--", path)
        if result.returncode != 0:
            raise CommitSourceError(
                f"git log failed for {path}: {self._stderr(result)}"
            )

        commits = []
        output = result.stdout.decode("utf-8", errors="replace")
        for line in output.strip().splitlines():
            parts = line.split()
            if len(parts) != 2:
                logger.warning(f"Ignoring unexpected git log line: {line!r}")
                continue
            revision_id, timestamp = parts
            commits.append(CommitRecord(revision_id, int(timestamp) * 1000))

        if not commits:
            raise StatsFileNotTrackedError(path)

        return commits

    def fetch_content(self, revision_id: str, path: str) -> str:
        result = self._run("show", f"{revision_id}:{path}")
        if result.returncode != 0:
            stderr = self._stderr(result)
            # git words a bad revision like a missing path when the file is on disk
            if not self._is_commit(revision_id):
                raise CommitSourceError(f"Unknown revision {revision_id}: {stderr}")
            if any(marker in stderr for marker in _MISSING_PATH_MARKERS):
                raise RevisionNotFoundError(revision_id, path, stderr)
            raise CommitSourceError(
                f"git show failed for {revision_id}:{path}: {stderr}"
            )
        try:
            return result.stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SnapshotParseError(
                f"{path} at revision {revision_id} is not valid UTF-8: {e}"
            ) from e


class InMemoryCommitSource(CommitSource):
    """Commit source serving a scripted history.

    Commits are given newest first as ``(revision_id, timestamp_seconds,
    content)`` tuples. A ``None`` content means the file did not exist at that
    revision.
    """

    def __init__(
        self,
        commits: Iterable[tuple[str, int, str | None]],
        path: str = "community-plugin-stats.json",
    ):
        self.path = path
        self._commits: list[CommitRecord] = []
        self._contents: dict[str, str | None] = {}
        for revision_id, timestamp_seconds, content in commits:
            self._commits.append(CommitRecord(revision_id, timestamp_seconds * 1000))
            self._contents[revision_id] = content

    def list_commits(self, path: str) -> list[CommitRecord]:
        if path != self.path or not self._commits:
            raise StatsFileNotTrackedError(path)
        return list(self._commits)

    def fetch_content(self, revision_id: str, path: str) -> str:
        if path != self.path or revision_id not in self._contents:
            raise CommitSourceError(f"Unknown revision {revision_id}")
        content = self._contents[revision_id]
        if content is None:
            raise RevisionNotFoundError(revision_id, path)
        return content


class CachingCommitSource(CommitSource):
    """Memoizes file content by revision around another commit source."""

    def __init__(self, source: CommitSource):
        self.source = source
        self._cache: dict[tuple[str, str], str] = {}
        self.hits = 0
        self.misses = 0

    def list_commits(self, path: str) -> list[CommitRecord]:
        return self.source.list_commits(path)

    def fetch_content(self, revision_id: str, path: str) -> str:
        key = (revision_id, path)
        if key in self._cache:
            self.hits += 1
            return self._cache[key]

        self.misses += 1
        content = self.source.fetch_content(revision_id, path)
        self._cache[key] = content
        return content

    def clear(self) -> None:
        """Drop all memoized content."""
        self._cache.clear()
