"""Well-known directory, workflow state and env var persistence."""
