"""Tests for the nodes and services that collect properties from the user."""

import json
import os

import pytest

from conftest import FakeToolExecutor
from mobile_native_workflow.domain.entities.property_metadata import WORKFLOW_USER_INPUT_PROPERTIES
from mobile_native_workflow.domain.entities.tool_schemas import (
    GET_INPUT_TOOL,
    INPUT_EXTRACTION_TOOL,
    USER_INPUT_TRIAGE_TOOL,
)
from mobile_native_workflow.infrastructure.persistence.env_config import load_env_vars
from mobile_native_workflow.infrastructure.workflow.nodes.input import (
    ExtractAndroidSetupNode,
    GetUserInputNode,
    UserInputExtractionNode,
    UserInputTriageNode,
)
from mobile_native_workflow.infrastructure.workflow.services import GetInputService, InputExtractionService


class TestInputExtractionService:
    """Tests for InputExtractionService."""

    def test_sends_properties_and_result_schema(self, tool_executor):
        tool_executor.queue({"extractedProperties": {"platform": "iOS"}})
        InputExtractionService(tool_executor).extract_properties("an iOS app", WORKFLOW_USER_INPUT_PROPERTIES)

        invocation = tool_executor.invocations[0]
        assert invocation.metadata is INPUT_EXTRACTION_TOOL
        assert invocation.input["userUtterance"] == "an iOS app"
        assert [p["propertyName"] for p in invocation.input["propertiesToExtract"]] == list(
            WORKFLOW_USER_INPUT_PROPERTIES
        )
        schema = json.loads(invocation.input["resultSchema"])
        assert "extractedProperties" in schema["properties"]

    def test_drops_invalid_unknown_and_null_values(self, tool_executor):
        tool_executor.queue(
            {
                "extractedProperties": {
                    "platform": "Windows",
                    "projectName": "MyApp",
                    "organization": None,
                    "favoriteColor": "blue",
                }
            }
        )
        extracted = InputExtractionService(tool_executor).extract_properties("...", WORKFLOW_USER_INPUT_PROPERTIES)
        assert extracted == {"projectName": "MyApp"}


class TestUserInputExtractionNode:
    """Tests for UserInputExtractionNode."""

    def test_returns_extracted_properties(self, tool_executor):
        tool_executor.queue({"extractedProperties": {"platform": "Android", "packageName": "com.acme.app"}})
        node = UserInputExtractionNode(extraction_service=InputExtractionService(tool_executor))

        patch = node.execute({"userInput": "Android app com.acme.app"})
        assert patch == {"platform": "Android", "packageName": "com.acme.app"}


class TestGetUserInputNode:
    """Tests for GetUserInputNode."""

    def test_requests_only_unfulfilled_properties(self, tool_executor):
        tool_executor.queue({"userUtterance": "It's called Acme"})
        node = GetUserInputNode(get_input_service=GetInputService(tool_executor))
        state = {"platform": "iOS", "projectName": "App", "packageName": "com.acme", "loginHost": "login"}

        patch = node.execute(state)

        assert patch == {"userInput": "It's called Acme"}
        invocation = tool_executor.invocations[0]
        assert invocation.metadata is GET_INPUT_TOOL
        assert [p["propertyName"] for p in invocation.input["propertiesRequiringInput"]] == ["organization"]


class TestUserInputTriageNode:
    """Tests for UserInputTriageNode."""

    def test_keeps_only_extracted_values(self, tool_executor):
        tool_executor.queue(
            {
                "extractedProperties": {"platform": "iOS", "projectName": "Contacts", "packageName": None},
                "confidenceLevel": 0.8,
                "missingInformation": ["organization"],
                "assumptions": [],
            }
        )
        patch = UserInputTriageNode(tool_executor).execute({"userInput": "iOS contacts app"})

        assert patch == {
            "platform": "iOS",
            "projectName": "Contacts",
            "triageConfidence": 0.8,
            "triageMissingInformation": ["organization"],
            "triageAssumptions": [],
        }
        assert tool_executor.tool_ids == [USER_INPUT_TRIAGE_TOOL.tool_id]

    def test_invalid_confidence_raises(self, tool_executor):
        tool_executor.queue({"confidenceLevel": 4})
        with pytest.raises(ValueError):
            UserInputTriageNode(tool_executor).execute({"userInput": "x"})


class TestExtractAndroidSetupNode:
    """Tests for ExtractAndroidSetupNode."""

    def test_applies_and_saves_existing_paths(self, tool_executor, tmp_path, isolated_home, monkeypatch):
        monkeypatch.delenv("ANDROID_HOME", raising=False)
        monkeypatch.delenv("JAVA_HOME", raising=False)
        sdk, jdk = tmp_path / "sdk", tmp_path / "jdk"
        sdk.mkdir()
        jdk.mkdir()
        tool_executor.queue({"extractedProperties": {"androidHome": str(sdk), "javaHome": str(jdk)}})

        patch = ExtractAndroidSetupNode(InputExtractionService(tool_executor)).execute({"userInput": "paths"})

        assert patch == {"androidHome": str(sdk), "javaHome": str(jdk)}
        assert os.environ["ANDROID_HOME"] == str(sdk)
        assert load_env_vars(isolated_home / ".magen" / "env_vars") == {
            "ANDROID_HOME": str(sdk),
            "JAVA_HOME": str(jdk),
        }

    def test_missing_and_nonexistent_paths_are_fatal(self, tool_executor, tmp_path):
        tool_executor.queue({"extractedProperties": {"androidHome": str(tmp_path / "nope")}})

        patch = ExtractAndroidSetupNode(InputExtractionService(tool_executor)).execute({"userInput": "paths"})

        assert patch["workflowFatalErrorMessages"] == [
            f"ANDROID_HOME path does not exist: {tmp_path / 'nope'}",
            "JAVA_HOME was not provided",
        ]
        assert "androidHome" not in patch
