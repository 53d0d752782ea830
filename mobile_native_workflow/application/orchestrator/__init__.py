"""Workflow orchestrator tool."""
