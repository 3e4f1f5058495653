"""Session notepad tools."""
