"""Utility modules for the omx MCP server."""
