"""
Helpers for small JSON documents kept on disk.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def utc_timestamp(now: datetime = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def parse_timestamp(value: Any):
    """Parse a timestamp written by ``utc_timestamp``; None if it cannot be read."""
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def read_json(path: Path, fallback: Any = None) -> Any:
    """
    Load a JSON document.

    Args:
        path: File to read
        fallback: Returned when the file is missing or cannot be parsed

    Returns:
        The parsed document or ``fallback``
    """
    path = Path(path)
    if not path.exists():
        return fallback
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read JSON document {path}: {e}")
        return fallback


def write_json(path: Path, data: Any) -> None:
    """Write a document as pretty-printed JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    logger.debug(f"Wrote JSON document {path}")
