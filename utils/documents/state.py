"""
Per-mode workflow state documents.

Each workflow mode (autopilot, plan, research, ...) owns one JSON file under
the state directory. Writes merge into the existing document by default.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import DocumentValidationError
from .json_files import read_json, utc_timestamp, write_json

logger = logging.getLogger(__name__)

MODE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class WorkflowStateStore:
    """File-backed store with one state document per workflow mode."""

    def __init__(self, state_dir: Path):
        self.state_dir = Path(state_dir)

    def _path(self, mode: Any) -> Path:
        if not mode or not isinstance(mode, str):
            raise DocumentValidationError("mode is required.")
        if not MODE_NAME_PATTERN.match(mode):
            raise DocumentValidationError(
                f"Invalid mode name: {mode!r}. Use letters, digits, '_', '-' or '.'."
            )
        return self.state_dir / f"{mode}.json"

    def read(self, mode: str) -> Optional[Any]:
        """Return the state document of a mode, None if it has none."""
        return read_json(self._path(mode), None)

    def write(self, mode: str, data: Dict[str, Any], replace: bool = False) -> Dict[str, Any]:
        """
        Merge ``data`` into the mode's state, or replace it entirely.

        The stored document always carries ``_mode`` and ``_updatedAt``.

        Returns:
            The document as written
        """
        path = self._path(mode)
        if not isinstance(data, dict):
            raise DocumentValidationError("mode and data are required.")

        state: Dict[str, Any] = {}
        if not replace:
            existing = read_json(path, {})
            if isinstance(existing, dict):
                state.update(existing)
        state.update(data)
        state["_mode"] = mode
        state["_updatedAt"] = utc_timestamp()

        write_json(path, state)
        logger.info(f"Wrote state for mode {mode} (replace={replace})")
        return state

    def clear(self, mode: str) -> bool:
        """Delete the mode's state. Returns whether a document existed."""
        path = self._path(mode)
        if not path.exists():
            return False
        path.unlink()
        logger.info(f"Cleared state for mode {mode}")
        return True

    def list_modes(self) -> List[Dict[str, Any]]:
        """Summaries of every stored mode, ordered by mode name."""
        if not self.state_dir.is_dir():
            return []

        modes = []
        for path in sorted(self.state_dir.glob("*.json")):
            data = read_json(path, {})
            if not isinstance(data, dict):
                data = {}
            modes.append(
                {
                    "mode": path.stem,
                    "active": data.get("active") is not False,
                    "phase": data.get("phase") or data.get("current_phase") or None,
                    "updatedAt": data.get("_updatedAt") or None,
                }
            )
        return modes
