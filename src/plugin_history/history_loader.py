"""
Reading previously written history files back into entries.

Both history shapes are accepted:

- timeline: ``{"<timestamp ms>": {"date": ..., "data": {"downloads": ...,
  "dailyGrowth": ..., "<version>": <count>, ...}}}``
- daily: ``[{"date": ..., "hash": ..., "downloads": ..., "versions": {...}}]``
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..shared_utilities import get_logger
from .config import OutputMode
from .data_models import HistoryEntry
from .errors import HistoryFileError
from .history_builder import daily_growth_rates
from .snapshot import RESERVED_KEYS

logger = get_logger(__name__)

_TIMELINE_RESERVED = RESERVED_KEYS | {"dailyGrowth"}


def _date_to_timestamp(date: str) -> int:
    dt = datetime.strptime(date, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def detect_output_mode(document: Any) -> str:
    """Tell which history shape a parsed document uses."""
    if isinstance(document, list):
        return OutputMode.DAILY
    if isinstance(document, dict):
        return OutputMode.TIMELINE
    raise ValueError(f"Unrecognized history document type: {type(document).__name__}")


def _entries_from_timeline(document: dict[str, Any]) -> list[HistoryEntry]:
    entries = []
    for key, item in document.items():
        data = item.get("data", {})
        entries.append(
            HistoryEntry(
                date=item["date"],
                timestamp_ms=int(key),
                revision_id="",
                downloads=data.get("downloads") or 0,
                daily_growth=data.get("dailyGrowth", 0),
                versions={
                    k: v for k, v in data.items() if k not in _TIMELINE_RESERVED
                },
            )
        )
    entries.sort(key=lambda e: e.timestamp_ms)
    return entries


def _entries_from_daily(document: list[dict[str, Any]]) -> list[HistoryEntry]:
    entries = [
        HistoryEntry(
            date=item["date"],
            timestamp_ms=_date_to_timestamp(item["date"]),
            revision_id=item.get("hash", ""),
            downloads=item.get("downloads") or 0,
            daily_growth=0,
            versions={
                k: v
                for k, v in item.get("versions", {}).items()
                if k not in RESERVED_KEYS
            },
        )
        for item in document
    ]
    entries.sort(key=lambda e: e.timestamp_ms)

    # Daily files carry no growth figures; recompute them
    for entry, rate in zip(entries, daily_growth_rates(entries), strict=True):
        entry.daily_growth = rate
    return entries


def parse_history(document: Any) -> list[HistoryEntry]:
    """Convert a parsed history document into ascending entries."""
    mode = detect_output_mode(document)
    if mode == OutputMode.DAILY:
        return _entries_from_daily(document)
    return _entries_from_timeline(document)


def load_history(path: str | Path) -> list[HistoryEntry]:
    """Load a history file written by the extractor.

    Args:
        path: History JSON file

    Returns:
        Entries ordered oldest to newest

    Raises:
        HistoryFileError: If the file is missing or not a history document
    """
    path = Path(path)
    logger.info(f"Reading data from {path}...")
    if not path.exists():
        raise HistoryFileError(f"File '{path}' not found.")

    try:
        with open(path, encoding="utf-8") as f:
            document = json.load(f)
        entries = parse_history(document)
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise HistoryFileError(f"Malformed history file {path}: {e}") from e

    logger.info(f"Loaded {len(entries)} history entries from {path}")
    return entries
