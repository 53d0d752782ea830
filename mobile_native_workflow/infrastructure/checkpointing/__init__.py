"""LangGraph checkpointers and their lifecycle."""
