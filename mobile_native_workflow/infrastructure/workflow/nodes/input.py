"""Nodes that collect project properties from the user."""

import logging
import os
from pathlib import Path

from mobile_native_workflow.domain.entities.property_metadata import (
    ANDROID_SETUP_PROPERTIES,
    WORKFLOW_USER_INPUT_PROPERTIES,
    PropertyMetadataCollection,
    unfulfilled_properties,
)
from mobile_native_workflow.domain.entities.tool_metadata import MCPToolInvocationData
from mobile_native_workflow.domain.entities.tool_schemas import (
    USER_INPUT_TRIAGE_TOOL,
    UserInputTriageResult,
)
from mobile_native_workflow.domain.entities.workflow_state import MobileNativeState
from mobile_native_workflow.domain.ports.tool_executor import ToolExecutor
from mobile_native_workflow.infrastructure.persistence.env_config import save_env_vars
from mobile_native_workflow.infrastructure.workflow.nodes.base import AbstractToolNode, BaseNode
from mobile_native_workflow.infrastructure.workflow.services import GetInputService, InputExtractionService


class UserInputExtractionNode(BaseNode):
    """Extracts the required properties from state.userInput."""

    def __init__(
        self,
        properties: PropertyMetadataCollection = WORKFLOW_USER_INPUT_PROPERTIES,
        extraction_service: InputExtractionService | None = None,
        name: str = "userInputExtraction",
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(name, logger)
        self.properties = properties
        self.extraction_service = extraction_service or InputExtractionService()

    def execute(self, state: MobileNativeState) -> MobileNativeState:
        extracted = self.extraction_service.extract_properties(state.get("userInput"), self.properties)
        self.logger.debug("Extracted properties: %s", sorted(extracted))
        return extracted


class GetUserInputNode(BaseNode):
    """Asks the user only for the properties that are still unfulfilled."""

    def __init__(
        self,
        properties: PropertyMetadataCollection = WORKFLOW_USER_INPUT_PROPERTIES,
        get_input_service: GetInputService | None = None,
        name: str = "getUserInput",
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(name, logger)
        self.properties = properties
        self.get_input_service = get_input_service or GetInputService()

    def execute(self, state: MobileNativeState) -> MobileNativeState:
        unfulfilled = unfulfilled_properties(state, self.properties)
        self.logger.debug("Requesting input for: %s", [p.property_name for p in unfulfilled])
        user_response = self.get_input_service.get_input(unfulfilled)
        return {"userInput": user_response}


class UserInputTriageNode(AbstractToolNode):
    """Single-pass analysis of the initial request.

    Only extracted properties with a value make it into the patch, alongside
    the triage confidence, missing information and assumptions.
    """

    def __init__(
        self,
        tool_executor: ToolExecutor | None = None,
        name: str = "triageUserInput",
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(name, tool_executor, logger)

    def execute(self, state: MobileNativeState) -> MobileNativeState:
        invocation = MCPToolInvocationData(
            metadata=USER_INPUT_TRIAGE_TOOL,
            input={"userInput": state.get("userInput")},
        )
        result = self.execute_tool_with_logging(invocation, UserInputTriageResult)

        patch: MobileNativeState = {
            key: value for key, value in result.extractedProperties.model_dump().items() if value
        }
        patch["triageConfidence"] = result.confidenceLevel
        patch["triageMissingInformation"] = list(result.missingInformation)
        patch["triageAssumptions"] = list(result.assumptions)
        self.logger.info(
            "Triage extracted %s (confidence %.2f)", sorted(k for k in patch if not k.startswith("triage")),
            result.confidenceLevel,
        )
        return patch


class ExtractAndroidSetupNode(BaseNode):
    """Extracts ANDROID_HOME/JAVA_HOME from the user's answer and applies them.

    Valid paths are exported to the process environment and saved to the env
    vars file so later sessions pick them up.
    """

    ENV_NAMES = {"androidHome": "ANDROID_HOME", "javaHome": "JAVA_HOME"}

    def __init__(
        self,
        extraction_service: InputExtractionService | None = None,
        name: str = "extractAndroidSetup",
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(name, logger)
        self.extraction_service = extraction_service or InputExtractionService()

    def execute(self, state: MobileNativeState) -> MobileNativeState:
        extracted = self.extraction_service.extract_properties(state.get("userInput"), ANDROID_SETUP_PROPERTIES)

        patch: MobileNativeState = {}
        errors: list[str] = []
        to_save: dict[str, str] = {}
        for property_name, env_name in self.ENV_NAMES.items():
            value = extracted.get(property_name)
            if not value:
                errors.append(f"{env_name} was not provided")
                continue
            if not Path(value).expanduser().exists():
                errors.append(f"{env_name} path does not exist: {value}")
                continue
            os.environ[env_name] = value
            patch[property_name] = value
            to_save[env_name] = value

        if to_save:
            try:
                save_env_vars(to_save)
            except OSError as e:
                self.logger.warning("Could not save Android env vars: %s", e)
        if errors:
            patch.update(self.fatal_error_patch(state, *errors))
        return patch
