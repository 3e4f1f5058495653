"""
Session notepad.

Three sections survive across conversations:

- ``priority``: a short always-loaded note, overwritten on every write
- ``working``: timestamped entries that expire after a retention window
- ``manual``: timestamped entries kept forever
"""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .exceptions import DocumentValidationError
from .json_files import parse_timestamp, read_json, utc_timestamp, write_json

logger = logging.getLogger(__name__)


class Notepad:
    """File-backed notepad with priority, working and manual sections."""

    SECTIONS = ("priority", "working", "manual")

    def __init__(
        self,
        path: Path,
        priority_max_chars: int = 500,
        working_retention_days: int = 7,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.path = Path(path)
        self.priority_max_chars = priority_max_chars
        self.working_retention = timedelta(days=working_retention_days)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _load(self) -> Dict[str, Any]:
        data = read_json(self.path, None)
        if not isinstance(data, dict):
            data = {}

        priority = data.get("priority")
        working = data.get("working")
        manual = data.get("manual")
        return {
            "priority": priority if isinstance(priority, str) else "",
            "working": working if isinstance(working, list) else [],
            "manual": manual if isinstance(manual, list) else [],
        }

    def _fresh_working(self, entries: List[Any], now: datetime) -> List[Any]:
        """Drop working entries older than the retention window."""
        cutoff = now - self.working_retention
        fresh = []
        for entry in entries:
            timestamp = parse_timestamp(entry.get("timestamp")) if isinstance(entry, dict) else None
            if timestamp is not None and timestamp > cutoff:
                fresh.append(entry)
        return fresh

    def read(self, section: Optional[str] = None) -> Dict[str, Any]:
        """
        Read one section, or every section when ``section`` is None or ``"all"``.

        Expired working entries are never returned, even before the next
        write removes them from disk.
        """
        section = section or "all"
        if section != "all" and section not in self.SECTIONS:
            raise DocumentValidationError("invalid section.")

        notepad = self._load()
        notepad["working"] = self._fresh_working(notepad["working"], self._clock())

        if section == "all":
            return notepad
        return {section: notepad[section]}

    def write(self, section: str, content: str) -> None:
        """
        Write to a section.

        ``priority`` is replaced and truncated, ``working`` and ``manual`` get
        a new timestamped entry. Expired working entries are pruned on disk.
        """
        if not section or not isinstance(content, str) or not content:
            raise DocumentValidationError("section and content required.")
        if section not in self.SECTIONS:
            raise DocumentValidationError("section must be priority, working, or manual.")

        now = self._clock()
        notepad = self._load()

        if section == "priority":
            notepad["priority"] = content[: self.priority_max_chars]
        else:
            notepad[section].append({"content": content, "timestamp": utc_timestamp(now)})

        notepad["working"] = self._fresh_working(notepad["working"], now)
        write_json(self.path, notepad)
        logger.debug(f"Wrote notepad section {section}")
