"""Tool result processing utilities.

This module converts tool execution results into MCP text content. Structured
results are rendered as pretty-printed JSON, failed results as ``Error: ...``.
"""

import json
from typing import Any, List

from mcp.types import TextContent


def process_tool_result(result: Any) -> List[TextContent]:
    """Process a tool execution result into MCP content types.

    Args:
        result: The result from a tool execution. Can be:
            - Single TextContent object (wrapped in list)
            - List of TextContent objects (returned as-is)
            - Dictionary with ``success: False`` (rendered as an error)
            - Dictionary or list (rendered as JSON)
            - Any other type (converted to string)

    Returns:
        List of TextContent objects
    """
    if isinstance(result, TextContent):
        return [result]
    if isinstance(result, list) and result and all(
        isinstance(item, TextContent) for item in result
    ):
        return result
    return [TextContent(type="text", text=format_result_as_text(result))]


def format_result_as_text(result: Any) -> str:
    """Format a tool result as text.

    Args:
        result: Tool execution result

    Returns:
        Text representation of the result
    """
    if isinstance(result, str):
        return result
    if isinstance(result, dict) and result.get("success") is False:
        return f"Error: {result.get('error') or result.get('message') or 'Unknown error'}"
    if isinstance(result, (dict, list)):
        return json.dumps(result, indent=2, ensure_ascii=False, default=str)
    return str(result)
