"""Domain layer - workflow state, property metadata and ports."""
