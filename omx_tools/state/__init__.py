"""Per-mode workflow state tools."""
