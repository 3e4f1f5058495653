"""
Per-project memory kept inside the project at ``.omx/memory.json``.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import DocumentValidationError
from .json_files import read_json, utc_timestamp, write_json

logger = logging.getLogger(__name__)


class ProjectMemoryStore:
    """Reads and merges the memory document of a project folder."""

    MEMORY_RELATIVE_PATH = Path(".omx") / "memory.json"

    def memory_path(self, work_folder: Any) -> Path:
        if not work_folder or not isinstance(work_folder, str):
            raise DocumentValidationError("workFolder is required.")
        if not os.path.isabs(work_folder):
            raise DocumentValidationError(
                f"workFolder must be an absolute path: {work_folder}"
            )
        return Path(work_folder) / self.MEMORY_RELATIVE_PATH

    def read(self, work_folder: str) -> Optional[Any]:
        """Return the project's memory, None if there is none."""
        return read_json(self.memory_path(work_folder), None)

    def write(self, work_folder: str, data: Dict[str, Any], replace: bool = False) -> Dict[str, Any]:
        """
        Merge ``data`` into the project's memory, or replace it entirely.

        When both the stored and the new ``notes`` are lists, the new notes
        are appended instead of overwriting the old ones.
        """
        path = self.memory_path(work_folder)
        if not isinstance(data, dict):
            raise DocumentValidationError("workFolder and data required.")

        memory: Dict[str, Any] = {}
        existing: Any = {}
        if not replace:
            existing = read_json(path, {})
            if isinstance(existing, dict):
                memory.update(existing)
        memory.update(data)
        memory["_updatedAt"] = utc_timestamp()

        if (
            isinstance(existing, dict)
            and isinstance(existing.get("notes"), list)
            and isinstance(data.get("notes"), list)
        ):
            memory["notes"] = existing["notes"] + data["notes"]

        write_json(path, memory)
        logger.info(f"Wrote project memory for {work_folder} (replace={replace})")
        return memory
