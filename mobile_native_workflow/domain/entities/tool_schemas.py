"""Input/result schemas and metadata for the mobile native MCP tools."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from mobile_native_workflow.domain.entities.tool_metadata import (
    ToolMetadata,
    WorkflowStateData,
    WorkflowToolInput,
)

Platform = Literal["iOS", "Android"]

ORCHESTRATOR_TOOL_ID = "sfmobile-native-project-manager"


# Orchestrator


class OrchestratorInput(BaseModel):
    userInput: Any = Field(
        default=None,
        description="User input, either the initial request or the structured result of the previous tool",
    )
    workflowStateData: WorkflowStateData = Field(
        default_factory=WorkflowStateData,
        description="Opaque workflow state data. Omit or leave empty when starting a new workflow.",
    )


class OrchestratorOutput(BaseModel):
    orchestrationInstructionsPrompt: str


ORCHESTRATOR_TOOL = ToolMetadata(
    tool_id=ORCHESTRATOR_TOOL_ID,
    title="Salesforce Mobile Native Project Manager",
    description=(
        "Orchestrates the end-to-end workflow for generating, building and deploying "
        "Salesforce mobile native apps. Start here."
    ),
    input_model=OrchestratorInput,
    result_model=OrchestratorOutput,
)


# Input extraction


class PropertyToExtract(BaseModel):
    propertyName: str
    description: str


class InputExtractionInput(WorkflowToolInput):
    userUtterance: Any = Field(description="Raw user input to extract properties from")
    propertiesToExtract: list[PropertyToExtract] = Field(
        description="Properties to look for in the user input"
    )
    resultSchema: str = Field(description="JSON schema the extracted properties must conform to")


class InputExtractionResult(BaseModel):
    extractedProperties: dict[str, Any] = Field(
        default_factory=dict,
        description="Extracted property values keyed by property name. Use null when not found.",
    )


INPUT_EXTRACTION_TOOL = ToolMetadata(
    tool_id="sfmobile-native-input-extraction",
    title="Salesforce Mobile Native Input Extraction",
    description="Parses user input and extracts structured project properties",
    input_model=InputExtractionInput,
    result_model=InputExtractionResult,
)


# Get input


class UnfulfilledProperty(BaseModel):
    propertyName: str
    friendlyName: str
    description: str
    reason: str


class GetInputInput(WorkflowToolInput):
    propertiesRequiringInput: list[UnfulfilledProperty] = Field(
        description="Properties that still need a value from the user"
    )


class GetInputResult(BaseModel):
    userUtterance: Any = Field(description="The user's response to the question")


GET_INPUT_TOOL = ToolMetadata(
    tool_id="sfmobile-native-get-input",
    title="Salesforce Mobile Native Get Input",
    description="Asks the user for the project properties the workflow is still missing",
    input_model=GetInputInput,
    result_model=GetInputResult,
)


# User input triage


class UserInputTriageInput(WorkflowToolInput):
    userInput: Any = Field(description="The user's initial request")


class TriageExtractedProperties(BaseModel):
    platform: Platform | None = None
    projectName: str | None = None
    packageName: str | None = None
    organization: str | None = None
    loginHost: str | None = None


class UserInputTriageResult(BaseModel):
    extractedProperties: TriageExtractedProperties = Field(default_factory=TriageExtractedProperties)
    confidenceLevel: float = Field(ge=0.0, le=1.0, description="Confidence in the extraction, 0 to 1")
    missingInformation: list[str] = Field(default_factory=list)
    assumptions: list[str] = Field(default_factory=list)


USER_INPUT_TRIAGE_TOOL = ToolMetadata(
    tool_id="sfmobile-native-user-input-triage",
    title="Salesforce Mobile Native User Input Triage",
    description="Analyzes the initial user request and extracts every project property it can",
    input_model=UserInputTriageInput,
    result_model=UserInputTriageResult,
)


# Template selection


class TemplateSelectionInput(WorkflowToolInput):
    platform: Platform = Field(description="Target mobile platform")
    templateOptions: Any = Field(description="Template options reported by the Mobile SDK CLI")


class TemplateSelectionResult(BaseModel):
    selectedTemplate: str = Field(description="Name of the selected template")


TEMPLATE_SELECTION_TOOL = ToolMetadata(
    tool_id="sfmobile-native-template-selection",
    title="Salesforce Mobile Native Template Selection",
    description="Guides the selection of the best Mobile SDK template for the user's app",
    input_model=TemplateSelectionInput,
    result_model=TemplateSelectionResult,
)


# Project generation


class ProjectGenerationInput(WorkflowToolInput):
    selectedTemplate: str = Field(description="The template selected for the project")
    projectName: str = Field(description="Name of the project")
    platform: Platform = Field(description="Target mobile platform")
    packageName: str = Field(description="Package identifier of the app")
    organization: str = Field(description="Organization or company name")
    connectedAppClientId: str = Field(description="Connected app consumer key")
    connectedAppCallbackUri: str = Field(description="Connected app callback URI")
    loginHost: str | None = Field(default=None, description="Salesforce login host")
    templateProperties: dict[str, str] | None = Field(
        default=None, description="Custom template-specific properties required by the selected template"
    )


class ProjectGenerationResult(BaseModel):
    projectPath: str = Field(description="Absolute path to the generated project")


PROJECT_GENERATION_TOOL = ToolMetadata(
    tool_id="sfmobile-native-project-generation",
    title="Salesforce Mobile Native Project Generation",
    description="Generates a Mobile SDK project from the selected template",
    input_model=ProjectGenerationInput,
    result_model=ProjectGenerationResult,
)


# Build


class BuildInput(WorkflowToolInput):
    platform: Platform = Field(description="Target mobile platform")
    projectPath: str = Field(description="Path to the project")
    projectName: str = Field(description="Name of the project")


class BuildResult(BaseModel):
    buildSuccessful: bool = Field(description="Whether the build succeeded")
    buildOutputFilePath: str | None = Field(
        default=None, description="Path to the file holding the full build output"
    )


BUILD_TOOL = ToolMetadata(
    tool_id="sfmobile-native-build",
    title="Salesforce Mobile Native Build",
    description="Guides the LLM through building a Salesforce mobile app for the target platform",
    input_model=BuildInput,
    result_model=BuildResult,
)


# Build recovery


class BuildRecoveryInput(WorkflowToolInput):
    platform: Platform = Field(description="Target mobile platform")
    projectPath: str = Field(description="Path to the project")
    projectName: str = Field(description="Name of the project")
    buildOutputFilePath: str = Field(description="Path to the file holding the failed build output")
    attemptNumber: int = Field(ge=1, description="Current recovery attempt number")


class BuildRecoveryResult(BaseModel):
    fixesAttempted: list[str] = Field(default_factory=list, description="Fixes applied to the project")
    readyForRetry: bool = Field(description="Whether the build should be retried")


BUILD_RECOVERY_TOOL = ToolMetadata(
    tool_id="sfmobile-native-build-recovery",
    title="Salesforce Mobile Native Build Recovery",
    description="Analyzes build failures and applies fixes so the build can be retried",
    input_model=BuildRecoveryInput,
    result_model=BuildRecoveryResult,
)


# Completion / failure


class CompletionInput(WorkflowToolInput):
    projectPath: str = Field(description="Path to the generated project")
    platform: Platform = Field(description="Target mobile platform")


COMPLETION_TOOL = ToolMetadata(
    tool_id="sfmobile-native-completion",
    title="Salesforce Mobile Native Completion",
    description="Summarizes a successfully completed workflow for the user",
    input_model=CompletionInput,
)


class FailureInput(WorkflowToolInput):
    messages: list[str] = Field(description="Messages describing why the workflow failed")


FAILURE_TOOL = ToolMetadata(
    tool_id="sfmobile-native-failure",
    title="Salesforce Mobile Native Failure",
    description="Describes an unrecoverable workflow failure to the user",
    input_model=FailureInput,
)


# Deployment guide (standalone, not part of the orchestrated workflow)


class DeploymentInput(BaseModel):
    platform: Platform = Field(description="Target mobile platform")
    projectPath: str = Field(description="Path to the mobile project directory")
    buildType: Literal["debug", "release"] = Field(default="debug", description="Build type for deployment")
    targetDevice: str | None = Field(default=None, description="Target device identifier (optional)")


DEPLOYMENT_TOOL = ToolMetadata(
    tool_id="sfmobile-native-deployment",
    title="Salesforce Mobile Native Deployment Guide",
    description="Guides the LLM through deploying Salesforce mobile native apps to devices or simulators",
    input_model=DeploymentInput,
)
