"""Tool-backed services used by workflow nodes.

Each service wraps one MCP tool invocation: it builds the tool input, runs it
through the ToolExecutor and validates the result.
"""

import json
import logging
from typing import Any, Optional

from pydantic import Field, ValidationError, create_model

from mobile_native_workflow.domain.entities.property_metadata import (
    PropertyMetadata,
    PropertyMetadataCollection,
)
from mobile_native_workflow.domain.entities.tool_metadata import MCPToolInvocationData
from mobile_native_workflow.domain.entities.tool_schemas import (
    BUILD_RECOVERY_TOOL,
    BUILD_TOOL,
    GET_INPUT_TOOL,
    INPUT_EXTRACTION_TOOL,
    BuildRecoveryResult,
    BuildResult,
    GetInputResult,
    InputExtractionResult,
)
from mobile_native_workflow.domain.ports.tool_executor import ToolExecutor
from mobile_native_workflow.infrastructure.execution.tool_executor import (
    LangGraphToolExecutor,
    execute_tool_with_logging,
)


class _ToolService:
    def __init__(self, tool_executor: ToolExecutor | None = None, logger: logging.Logger | None = None) -> None:
        self.tool_executor = tool_executor or LangGraphToolExecutor()
        self.logger = logger or logging.getLogger(f"{__name__}.{type(self).__name__}")


class InputExtractionService(_ToolService):
    """Extracts property values from free-form user input."""

    def extract_properties(self, user_input: Any, properties: PropertyMetadataCollection) -> dict[str, Any]:
        """Return validated values for the properties found in user_input.

        Values that are null, belong to unknown properties or fail the
        property's validator are dropped.
        """
        extracted_model = create_model(
            "ExtractedProperties",
            **{
                name: (Optional[prop.validator], Field(default=None, description=prop.description))
                for name, prop in properties.items()
            },
        )
        result_schema = create_model("InputExtractionResult", extractedProperties=(extracted_model, ...))

        invocation = MCPToolInvocationData(
            metadata=INPUT_EXTRACTION_TOOL,
            input={
                "userUtterance": user_input,
                "propertiesToExtract": [
                    {"propertyName": name, "description": prop.description} for name, prop in properties.items()
                ],
                "resultSchema": json.dumps(result_schema.model_json_schema()),
            },
        )

        def validate(raw: Any) -> InputExtractionResult:
            result = InputExtractionResult.model_validate(raw)
            return InputExtractionResult(
                extractedProperties=self._filter_valid(result.extractedProperties, properties)
            )

        result = execute_tool_with_logging(
            self.tool_executor, self.logger, invocation, InputExtractionResult, validator=validate
        )
        return result.extractedProperties

    def _filter_valid(self, values: dict[str, Any], properties: PropertyMetadataCollection) -> dict[str, Any]:
        valid: dict[str, Any] = {}
        for name, value in values.items():
            prop = properties.get(name)
            if prop is None:
                self.logger.debug("Ignoring unknown extracted property %s", name)
                continue
            if value is None:
                continue
            try:
                valid[name] = prop.validate(value)
            except ValidationError:
                self.logger.warning("Dropping invalid value for %s: %r", name, value)
        return valid


class GetInputService(_ToolService):
    """Asks the user for properties that are still missing."""

    def get_input(self, unfulfilled: list[PropertyMetadata]) -> Any:
        invocation = MCPToolInvocationData(
            metadata=GET_INPUT_TOOL,
            input={
                "propertiesRequiringInput": [
                    {
                        "propertyName": prop.property_name,
                        "friendlyName": prop.friendly_name,
                        "description": prop.description,
                        "reason": f"Property '{prop.property_name}' is missing from the workflow state.",
                    }
                    for prop in unfulfilled
                ]
            },
        )
        result = execute_tool_with_logging(self.tool_executor, self.logger, invocation, GetInputResult)
        return result.userUtterance


class BuildValidationService(_ToolService):
    """Runs a single build attempt. Retries are decided by the graph."""

    def execute_build(self, platform: str, project_path: str, project_name: str) -> BuildResult:
        self.logger.info("Starting build for %s project at %s", platform, project_path)
        invocation = MCPToolInvocationData(
            metadata=BUILD_TOOL,
            input={"platform": platform, "projectPath": project_path, "projectName": project_name},
        )
        result = execute_tool_with_logging(self.tool_executor, self.logger, invocation, BuildResult)
        self.logger.info("Build finished: successful=%s", result.buildSuccessful)
        return result


class BuildRecoveryService(_ToolService):
    """Analyzes a failed build and applies fixes."""

    def attempt_recovery(
        self,
        platform: str,
        project_path: str,
        project_name: str,
        build_output_file_path: str,
        attempt_number: int,
    ) -> BuildRecoveryResult:
        self.logger.info("Attempting build recovery #%d for %s", attempt_number, platform)
        invocation = MCPToolInvocationData(
            metadata=BUILD_RECOVERY_TOOL,
            input={
                "platform": platform,
                "projectPath": project_path,
                "projectName": project_name,
                "buildOutputFilePath": build_output_file_path,
                "attemptNumber": attempt_number,
            },
        )
        result = execute_tool_with_logging(self.tool_executor, self.logger, invocation, BuildRecoveryResult)
        self.logger.info(
            "Build recovery completed: fixes=%s readyForRetry=%s", result.fixesAttempted, result.readyForRetry
        )
        return result
