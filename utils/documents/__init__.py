"""
Persistent JSON documents: workflow state, session notepad and project memory.
"""

from .exceptions import DocumentValidationError
from .json_files import read_json, write_json, utc_timestamp, parse_timestamp
from .state import WorkflowStateStore
from .notepad import Notepad
from .project_memory import ProjectMemoryStore

__all__ = [
    "DocumentValidationError",
    "read_json",
    "write_json",
    "utc_timestamp",
    "parse_timestamp",
    "WorkflowStateStore",
    "Notepad",
    "ProjectMemoryStore",
]
