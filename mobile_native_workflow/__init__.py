"""Mobile native app workflow - MCP tools and LangGraph orchestration."""
