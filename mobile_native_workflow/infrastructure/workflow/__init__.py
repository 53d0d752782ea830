"""Workflow graph - LangGraph."""

from mobile_native_workflow.infrastructure.workflow.graph import (
    build_mobile_native_graph,
    compile_workflow_graph,
)

__all__ = ["build_mobile_native_graph", "compile_workflow_graph"]
