"""MCP tools for delegating work to the Claude CLI and keeping workflow documents.

Tools are registered with the plugin registry when their modules are imported;
``discover_and_register_tools`` imports every module of this package.
"""

from omx_tools.interfaces import ToolInterface, JobToolInterface
from omx_tools.plugin import registry, register_tool, discover_and_register_tools

__all__ = [
    "ToolInterface",
    "JobToolInterface",
    "registry",
    "register_tool",
    "discover_and_register_tools",
]
