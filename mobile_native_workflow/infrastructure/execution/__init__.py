"""Command and tool execution."""
