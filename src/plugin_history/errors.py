"""
Exceptions raised by the plugin history pipeline.
"""


class PluginHistoryError(Exception):
    """Base exception for plugin history operations."""

    pass


class CommitSourceError(PluginHistoryError):
    """A version-control operation failed."""

    pass


class RevisionNotFoundError(CommitSourceError):
    """The file does not exist at the requested revision."""

    def __init__(self, revision_id: str, path: str, detail: str = ""):
        self.revision_id = revision_id
        self.path = path
        message = f"{path} not found at revision {revision_id}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class StatsFileNotTrackedError(CommitSourceError):
    """No commit in the history touched the stats file."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"No commits found for {path}; is it tracked in git?")


class SnapshotParseError(PluginHistoryError):
    """A snapshot blob is not a JSON object."""

    pass


class HistoryFileError(PluginHistoryError):
    """A serialized history file is missing or malformed."""

    pass


class PluginNotFoundError(PluginHistoryError):
    """The plugin has no data points in the stats file history."""

    def __init__(self, plugin_name: str, stats_file: str):
        self.plugin_name = plugin_name
        super().__init__(f'Plugin "{plugin_name}" not found in {stats_file} history')
