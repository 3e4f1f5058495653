"""Per-project memory tools."""
