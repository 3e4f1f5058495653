"""MCP server exposing the omx tools over stdio or SSE."""
