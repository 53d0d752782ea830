"""Workflow state schema for LangGraph.

Keys are camelCase: they double as tool input/result property names and
PropertyMetadata.property_name values.
"""

from typing import Any, TypedDict


class TemplatePropertyMetadata(TypedDict):
    """A custom property declared by the selected template."""

    value: str | None  # Template default
    required: bool
    description: str


class MobileNativeState(TypedDict, total=False):
    """State passed between workflow nodes. All fields optional for incremental build."""

    # Input
    userInput: Any  # Raw utterance or tool result fed back by the orchestrator
    userInputQuestion: str

    # Project properties collected from the user
    platform: str  # "iOS" | "Android"
    projectName: str
    packageName: str
    organization: str
    loginHost: str

    # Triage metadata
    triageConfidence: float
    triageMissingInformation: list[str]
    triageAssumptions: list[str]

    # Environment and setup checks
    validEnvironment: bool
    invalidEnvironmentMessages: list[str]
    connectedAppClientId: str
    connectedAppCallbackUri: str
    validPluginSetup: bool
    validPlatformSetup: bool
    androidHome: str
    javaHome: str

    # Templates and generation
    templateOptions: Any
    selectedTemplate: str
    templatePropertiesMetadata: dict[str, TemplatePropertyMetadata]
    templateProperties: dict[str, str]
    templatePropertiesUserInput: Any
    projectPath: str

    # Build
    buildType: str  # "debug" | "release"
    buildSuccessful: bool
    buildAttemptCount: int  # Consecutive failures in the current build cycle
    maxBuildRetries: int
    buildOutputFilePath: str
    buildErrorMessages: list[str]
    recoveryReadyForRetry: bool

    # Deployment
    targetDevice: str
    androidEmulatorName: str
    deploymentStatus: str

    # Errors
    workflowFatalErrorMessages: list[str]
