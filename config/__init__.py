"""
omx Configuration Package.

This package contains the centralized settings of the omx server.
"""

from config.manager import EnvironmentManager, env_manager
from config.types import JobSettings, NotepadSettings

# Re-export the singleton instance for easy access
env = env_manager

__all__ = [
    "EnvironmentManager",
    "env_manager",
    "env",
    "JobSettings",
    "NotepadSettings",
]
