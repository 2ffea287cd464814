"""
Parsing of stats file snapshots.

A snapshot maps plugin names to records such as::

    {"downloads": 1500, "updated": 1700000000000, "1.0.0": 900, "1.1.0": 600}

``downloads`` and ``updated`` are reserved keys; every other key is a version
with its own download count.
"""

import json
from typing import Any

from ..shared_utilities import get_logger
from .data_models import PluginRecord
from .errors import SnapshotParseError

logger = get_logger(__name__)

RESERVED_KEYS = frozenset({"downloads", "updated"})
BETA_SUFFIX = "-beta"


def parse_snapshot(content: str) -> dict[str, Any]:
    """Parse a raw stats file blob.

    Args:
        content: File content at one revision

    Returns:
        Mapping of plugin name to its raw record

    Raises:
        SnapshotParseError: If the content is not a JSON object
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise SnapshotParseError(f"Malformed stats JSON: {e}") from e

    if not isinstance(data, dict):
        raise SnapshotParseError(
            f"Stats JSON must be an object, got {type(data).__name__}"
        )
    return data


def extract_versions(
    raw_record: dict[str, Any], exclude_beta: bool = False
) -> dict[str, int]:
    """Collect the per-version download counts of a plugin record.

    Args:
        raw_record: The plugin's entry in the snapshot
        exclude_beta: Drop versions whose key ends with ``-beta``

    Returns:
        Version to download count, in the record's key order
    """
    versions = {}
    for key, value in raw_record.items():
        if key in RESERVED_KEYS:
            continue
        if exclude_beta and key.endswith(BETA_SUFFIX):
            logger.info(f"Skipping beta version: {key}")
            continue
        versions[key] = value
    return versions


def get_plugin_record(
    snapshot: dict[str, Any], plugin_name: str, exclude_beta: bool = False
) -> PluginRecord | None:
    """Look up one plugin in a parsed snapshot.

    Returns ``None`` when the plugin is absent (or has an empty record), which
    callers treat as "not released yet" rather than an error.
    """
    raw_record = snapshot.get(plugin_name)
    if not raw_record:
        return None
    if not isinstance(raw_record, dict):
        raise SnapshotParseError(
            f"Record for {plugin_name!r} must be an object, "
            f"got {type(raw_record).__name__}"
        )

    downloads = raw_record.get("downloads")
    if downloads is None:
        downloads = 0
    elif (
        isinstance(downloads, bool)
        or not isinstance(downloads, int)
        or downloads < 0
    ):
        raise SnapshotParseError(
            f"Download count for {plugin_name!r} must be a non-negative integer, "
            f"got {downloads!r}"
        )

    updated = raw_record.get("updated")
    return PluginRecord(
        downloads=downloads,
        updated=str(updated) if updated is not None else None,
        versions=extract_versions(raw_record, exclude_beta=exclude_beta),
    )
