"""Template discovery, template selection and project generation nodes."""

import json
import logging
from typing import Any

from mobile_native_workflow.domain.entities.property_metadata import (
    template_property_collection,
    unfulfilled_properties,
)
from mobile_native_workflow.domain.entities.tool_metadata import MCPToolInvocationData
from mobile_native_workflow.domain.entities.tool_schemas import (
    PROJECT_GENERATION_TOOL,
    TEMPLATE_SELECTION_TOOL,
    ProjectGenerationResult,
    TemplateSelectionResult,
)
from mobile_native_workflow.domain.entities.workflow_state import MobileNativeState, TemplatePropertyMetadata
from mobile_native_workflow.domain.ports.command_runner import CommandRunner, CommandSpawnError
from mobile_native_workflow.domain.ports.tool_executor import ToolExecutor
from mobile_native_workflow.infrastructure.execution.command_runner import AsyncCommandRunner
from mobile_native_workflow.infrastructure.workflow.nodes.base import AbstractToolNode, BaseNode
from mobile_native_workflow.infrastructure.workflow.services import GetInputService, InputExtractionService

LIST_TEMPLATES_TIMEOUT = 30.0


class TemplateOptionsFetchNode(BaseNode):
    """Lists the Mobile SDK templates available for the platform."""

    def __init__(
        self,
        command_runner: CommandRunner | None = None,
        template_source: str = "",
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__("fetchTemplateOptions", logger)
        self.command_runner = command_runner or AsyncCommandRunner()
        self.template_source = template_source

    async def execute(self, state: MobileNativeState) -> MobileNativeState:
        if state.get("templateOptions"):
            self.logger.debug("Template options already present, skipping fetch")
            return {}

        platform = (state.get("platform") or "").lower()
        args = ["mobilesdk", platform, "listtemplates"]
        if self.template_source:
            args.append(f"--templatesource={self.template_source}")
        args.extend(["--doc", "--json"])

        try:
            result = await self.command_runner.execute(
                "sf", args, timeout=LIST_TEMPLATES_TIMEOUT, command_name="List templates"
            )
            if not result.success:
                raise RuntimeError(result.stderr.strip() or f"exit code {result.exit_code}")
            options = json.loads(result.stdout)
        except (RuntimeError, ValueError, CommandSpawnError) as e:
            self.logger.warning("Template fetch failed: %s", e)
            return self.fatal_error_patch(state, f"Failed to fetch template options: {e}")

        return {"templateOptions": options}


class TemplateSelectionNode(AbstractToolNode):
    """Has the LLM pick the template best suited to the user's request."""

    def __init__(
        self,
        tool_executor: ToolExecutor | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__("selectTemplate", tool_executor, logger)

    def execute(self, state: MobileNativeState) -> MobileNativeState:
        if state.get("selectedTemplate"):
            self.logger.debug("Template already selected: %s", state["selectedTemplate"])
            return {}
        if not state.get("templateOptions"):
            return self.fatal_error_patch(state, "No template options available for selection")

        invocation = MCPToolInvocationData(
            metadata=TEMPLATE_SELECTION_TOOL,
            input={"platform": state.get("platform"), "templateOptions": state.get("templateOptions")},
        )
        result = self.execute_tool_with_logging(invocation, TemplateSelectionResult)
        if not result.selectedTemplate:
            return self.fatal_error_patch(state, "Template selection did not return a selectedTemplate")

        patch: MobileNativeState = {"selectedTemplate": result.selectedTemplate}
        metadata = self.template_properties_metadata(state.get("templateOptions"), result.selectedTemplate)
        if metadata:
            self.logger.info("Template %s declares properties: %s", result.selectedTemplate, sorted(metadata))
            patch["templatePropertiesMetadata"] = metadata
        return patch

    def template_properties_metadata(
        self, template_options: Any, selected_template: str
    ) -> dict[str, TemplatePropertyMetadata] | None:
        """Read the custom properties the selected template declares in its listing.

        Entries that are not objects are treated as optional with no
        description. Returns None when the template declares nothing.
        """
        try:
            template = next(
                (t for t in template_options.get("templates", []) if t.get("path") == selected_template),
                None,
            )
            if template is None:
                return None
            declared = template.get("metadata") or {}
            for key in ("properties", "templatePrerequisites", "properties", "templateProperties", "properties"):
                declared = declared.get(key) or {}
            if not isinstance(declared, dict):
                return None
        except Exception as e:
            self.logger.warning("Could not read template properties for %s: %s", selected_template, e)
            return None

        metadata: dict[str, TemplatePropertyMetadata] = {}
        for name, entry in declared.items():
            if not isinstance(entry, dict):
                metadata[name] = {"value": None, "required": False, "description": ""}
                continue
            value = entry.get("value")
            metadata[name] = {
                "value": None if value is None else str(value),
                "required": bool(entry.get("required", False)),
                "description": entry.get("description") or "",
            }
        return metadata or None


class TemplatePropertiesUserInputNode(BaseNode):
    """Asks the user for the selected template's properties that are still missing."""

    def __init__(
        self,
        get_input_service: GetInputService | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__("getTemplatePropertiesInput", logger)
        self.get_input_service = get_input_service or GetInputService()

    def execute(self, state: MobileNativeState) -> MobileNativeState:
        properties = template_property_collection(state.get("templatePropertiesMetadata"))
        if not properties:
            self.logger.debug("Selected template declares no properties")
            return {}

        unfulfilled = unfulfilled_properties(state.get("templateProperties") or {}, properties)
        self.logger.debug("Requesting template properties: %s", [p.property_name for p in unfulfilled])
        user_response = self.get_input_service.get_input(unfulfilled)
        return {"templatePropertiesUserInput": user_response}


class TemplatePropertiesExtractionNode(BaseNode):
    """Extracts template property values from the user's answer.

    Newly extracted values are merged over the ones already collected.
    """

    def __init__(
        self,
        extraction_service: InputExtractionService | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__("extractTemplateProperties", logger)
        self.extraction_service = extraction_service or InputExtractionService()

    def execute(self, state: MobileNativeState) -> MobileNativeState:
        properties = template_property_collection(state.get("templatePropertiesMetadata"))
        if not properties:
            return {"templateProperties": {}}
        user_input = state.get("templatePropertiesUserInput")
        if not user_input:
            return {}

        extracted = self.extraction_service.extract_properties(user_input, properties)
        values = dict(state.get("templateProperties") or {})
        values.update({name: value for name, value in extracted.items() if isinstance(value, str) and value})
        self.logger.debug("Template properties collected: %s", sorted(values))
        return {"templateProperties": values}


class ProjectGenerationNode(AbstractToolNode):
    """Maps the collected properties 1:1 into the project generation tool."""

    INPUT_FIELDS = (
        "selectedTemplate",
        "projectName",
        "platform",
        "packageName",
        "organization",
        "connectedAppClientId",
        "connectedAppCallbackUri",
        "loginHost",
        "templateProperties",
    )

    def __init__(
        self,
        tool_executor: ToolExecutor | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__("generateProject", tool_executor, logger)

    def execute(self, state: MobileNativeState) -> MobileNativeState:
        invocation = MCPToolInvocationData(
            metadata=PROJECT_GENERATION_TOOL,
            input={field: state.get(field) for field in self.INPUT_FIELDS},
        )
        result = self.execute_tool_with_logging(invocation, ProjectGenerationResult)
        return result.model_dump()
