"""Workflow graph nodes."""
