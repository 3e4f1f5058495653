"""Interfaces for MCP tools.

This module defines the core interfaces that tools must implement
to be compatible with the MCP system.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any


class ToolInterface(ABC):
    """Base interface for all tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the tool name."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Get the tool description."""
        pass

    @property
    @abstractmethod
    def input_schema(self) -> Dict[str, Any]:
        """Get the JSON schema for the tool input."""
        pass

    @abstractmethod
    async def execute_tool(self, arguments: Dict[str, Any]) -> Any:
        """Execute the tool with the provided arguments.

        Args:
            arguments: Dictionary of arguments for the tool

        Returns:
            Tool execution result. A dict with ``success: False`` and an
            ``error`` message reports a failed call.
        """
        pass


class JobToolInterface(ToolInterface):
    """Interface for tools that drive background jobs through a job manager."""

    @property
    @abstractmethod
    def job_manager(self) -> Any:
        """Get the job manager the tool operates on."""
        pass
