"""Plan-phase workflow tools: gather properties, pick a template, generate and build the project."""

import json

from mobile_native_workflow.application.tools import prompts
from mobile_native_workflow.application.tools.base import AbstractWorkflowTool
from mobile_native_workflow.domain.entities.tool_metadata import WorkflowToolOutput
from mobile_native_workflow.domain.entities.tool_schemas import (
    BUILD_RECOVERY_TOOL,
    BUILD_TOOL,
    GET_INPUT_TOOL,
    INPUT_EXTRACTION_TOOL,
    PROJECT_GENERATION_TOOL,
    TEMPLATE_SELECTION_TOOL,
    USER_INPUT_TRIAGE_TOOL,
    BuildInput,
    BuildRecoveryInput,
    GetInputInput,
    InputExtractionInput,
    ProjectGenerationInput,
    TemplateSelectionInput,
    UserInputTriageInput,
)
from mobile_native_workflow.infrastructure.persistence.temp_directory import (
    TempDirectoryManager,
    temp_directory_manager,
)
from mobile_native_workflow.infrastructure.workflow.nodes.environment import PLATFORM_API_LEVELS


class InputExtractionTool(AbstractWorkflowTool):
    """Extracts property values from a user utterance.

    The result schema is built per call by the extraction service, so it
    comes in with the input instead of from the tool metadata.
    """

    def __init__(self) -> None:
        super().__init__(INPUT_EXTRACTION_TOOL)

    async def handle_request(self, tool_input: InputExtractionInput) -> WorkflowToolOutput:
        prompt = prompts.INPUT_EXTRACTION_PROMPT.format(
            user_utterance=json.dumps(tool_input.userUtterance),
            properties=json.dumps([p.model_dump() for p in tool_input.propertiesToExtract], indent=2),
        )
        return self.finalize_workflow_tool_output(prompt, tool_input.workflowStateData, tool_input.resultSchema)


class GetInputTool(AbstractWorkflowTool):
    def __init__(self) -> None:
        super().__init__(GET_INPUT_TOOL)

    async def handle_request(self, tool_input: GetInputInput) -> WorkflowToolOutput:
        properties = "\n".join(
            f"- **{p.friendlyName}** (`{p.propertyName}`): {p.description}. {p.reason}"
            for p in tool_input.propertiesRequiringInput
        )
        prompt = prompts.GET_INPUT_PROMPT.format(properties=properties)
        return self.finalize_workflow_tool_output(prompt, tool_input.workflowStateData)


class UserInputTriageTool(AbstractWorkflowTool):
    def __init__(self) -> None:
        super().__init__(USER_INPUT_TRIAGE_TOOL)

    async def handle_request(self, tool_input: UserInputTriageInput) -> WorkflowToolOutput:
        prompt = prompts.USER_INPUT_TRIAGE_PROMPT.format(user_input=json.dumps(tool_input.userInput))
        return self.finalize_workflow_tool_output(prompt, tool_input.workflowStateData)


class TemplateSelectionTool(AbstractWorkflowTool):
    def __init__(self) -> None:
        super().__init__(TEMPLATE_SELECTION_TOOL)

    async def handle_request(self, tool_input: TemplateSelectionInput) -> WorkflowToolOutput:
        prompt = prompts.TEMPLATE_SELECTION_PROMPT.format(
            platform=tool_input.platform,
            template_options=json.dumps(tool_input.templateOptions, indent=2),
        )
        return self.finalize_workflow_tool_output(prompt, tool_input.workflowStateData)


class ProjectGenerationTool(AbstractWorkflowTool):
    """Guides project creation with `sf mobilesdk ... createwithtemplate` and OAuth setup."""

    def __init__(self, template_source: str = "") -> None:
        super().__init__(PROJECT_GENERATION_TOOL)
        self.template_source = template_source

    async def handle_request(self, tool_input: ProjectGenerationInput) -> WorkflowToolOutput:
        template_properties = ", ".join(
            f"{name}={value}" for name, value in (tool_input.templateProperties or {}).items()
        )
        prompt = prompts.PROJECT_GENERATION_PROMPT.format(
            selected_template=tool_input.selectedTemplate,
            project_name=tool_input.projectName,
            platform=tool_input.platform,
            platform_lower=tool_input.platform.lower(),
            package_name=tool_input.packageName,
            organization=tool_input.organization,
            login_host=tool_input.loginHost or "Default (production)",
            template_properties=template_properties or "None",
            template_source_arg=f'--templatesource="{self.template_source}" ' if self.template_source else "",
            oauth_step=self._oauth_step(tool_input),
        )
        return self.finalize_workflow_tool_output(prompt, tool_input.workflowStateData)

    @staticmethod
    def _oauth_step(tool_input: ProjectGenerationInput) -> str:
        callback = tool_input.connectedAppCallbackUri
        url_scheme = callback.split("://")[0] if "://" in callback else "myapp"
        login_host = tool_input.loginHost
        if tool_input.platform == "iOS":
            login_host_step = (
                prompts.IOS_LOGIN_HOST_STEP.format(project_name=tool_input.projectName, login_host=login_host)
                if login_host
                else ""
            )
            return prompts.IOS_OAUTH_STEP.format(
                client_id=tool_input.connectedAppClientId,
                callback_uri=callback,
                url_scheme=url_scheme,
                login_host_step=login_host_step,
            )
        login_host_line = f'\n<string name="oauthLoginDomain">{login_host}</string>' if login_host else ""
        return prompts.ANDROID_OAUTH_STEP.format(
            client_id=tool_input.connectedAppClientId,
            callback_uri=callback,
            url_scheme=url_scheme,
            login_host_line=login_host_line,
        )


class BuildTool(AbstractWorkflowTool):
    """iOS builds place the .app bundle where the install node looks for it."""

    def __init__(self, temp_directory: TempDirectoryManager | None = None) -> None:
        super().__init__(BUILD_TOOL)
        self.temp_directory = temp_directory or temp_directory_manager

    async def handle_request(self, tool_input: BuildInput) -> WorkflowToolOutput:
        if tool_input.platform == "iOS":
            environment_step = prompts.IOS_BUILD_ENVIRONMENT.format(min_ios=PLATFORM_API_LEVELS["iOS"])
            artifact_root = self.temp_directory.get_app_artifact_path(tool_input.projectName).parent
            build_command = (
                f"xcodebuild -workspace {tool_input.projectName}.xcworkspace -scheme {tool_input.projectName} "
                "-sdk iphonesimulator -destination <simulator-destination> "
                f"CONFIGURATION_BUILD_DIR=\"{artifact_root}\" clean build"
            )
            success_marker = "BUILD SUCCEEDED"
        else:
            environment_step = prompts.ANDROID_BUILD_ENVIRONMENT
            build_command = "./gradlew build"
            success_marker = "BUILD SUCCESSFUL"

        prompt = prompts.BUILD_PROMPT.format(
            platform=tool_input.platform,
            project_path=tool_input.projectPath,
            environment_step=environment_step,
            build_command=build_command,
            success_marker=success_marker,
        )
        return self.finalize_workflow_tool_output(prompt, tool_input.workflowStateData)


class BuildRecoveryTool(AbstractWorkflowTool):
    def __init__(self) -> None:
        super().__init__(BUILD_RECOVERY_TOOL)

    async def handle_request(self, tool_input: BuildRecoveryInput) -> WorkflowToolOutput:
        is_ios = tool_input.platform == "iOS"
        prompt = prompts.BUILD_RECOVERY_PROMPT.format(
            attempt_number=tool_input.attemptNumber,
            platform=tool_input.platform,
            build_output_file_path=tool_input.buildOutputFilePath,
            project_path=tool_input.projectPath,
            common_issues=prompts.IOS_COMMON_BUILD_ISSUES if is_ios else prompts.ANDROID_COMMON_BUILD_ISSUES,
            common_files=prompts.IOS_COMMON_BUILD_FILES if is_ios else prompts.ANDROID_COMMON_BUILD_FILES,
        )
        return self.finalize_workflow_tool_output(prompt, tool_input.workflowStateData)
