"""Tests for tool metadata and invocation payloads."""

from mobile_native_workflow.domain.entities.tool_metadata import (
    MCPToolInvocationData,
    WorkflowStateData,
)
from mobile_native_workflow.domain.entities.tool_schemas import (
    BUILD_TOOL,
    DEPLOYMENT_TOOL,
    ORCHESTRATOR_TOOL,
    DeploymentInput,
    OrchestratorInput,
)


class TestInvocationPayload:
    """Tests for invocation payload."""

    def test_payload_carries_metadata_and_input(self):
        invocation = MCPToolInvocationData(
            metadata=BUILD_TOOL,
            input={"platform": "iOS", "projectPath": "/tmp/App", "projectName": "App"},
        )
        payload = invocation.to_payload()

        assert payload["llmMetadata"]["name"] == BUILD_TOOL.tool_id
        assert payload["llmMetadata"]["description"] == BUILD_TOOL.description
        assert "projectPath" in payload["llmMetadata"]["inputSchema"]["properties"]
        assert payload["input"]["projectName"] == "App"


class TestSchemas:
    """Tests for schemas."""

    def test_orchestrator_input_defaults(self):
        request = OrchestratorInput.model_validate({})
        assert request.userInput is None
        assert request.workflowStateData == WorkflowStateData()

    def test_workflow_state_data_ignores_unknown_keys(self):
        data = WorkflowStateData.model_validate({"thread_id": "mmw-1-abc", "extra": 1})
        assert data.thread_id == "mmw-1-abc"

    def test_deployment_input_defaults_to_debug(self):
        tool_input = DeploymentInput(platform="Android", projectPath="/tmp/App")
        assert tool_input.buildType == "debug"
        assert tool_input.targetDevice is None

    def test_tool_ids(self):
        assert ORCHESTRATOR_TOOL.tool_id == "sfmobile-native-project-manager"
        assert DEPLOYMENT_TOOL.tool_id == "sfmobile-native-deployment"
