"""Application layer - MCP tools and the orchestrator."""
