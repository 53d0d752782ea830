"""LangGraph workflow - triage → setup checks → template → template properties → generate → build/recover → deploy."""

from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.checkpoint.memory import MemorySaver
from langgraph.graph import END, START, StateGraph

from mobile_native_workflow.domain.entities.property_metadata import (
    ANDROID_SETUP_PROPERTIES,
    WORKFLOW_USER_INPUT_PROPERTIES,
)
from mobile_native_workflow.domain.entities.workflow_state import MobileNativeState
from mobile_native_workflow.domain.ports.command_runner import CommandRunner
from mobile_native_workflow.domain.ports.tool_executor import ToolExecutor
from mobile_native_workflow.infrastructure.execution.command_runner import AsyncCommandRunner
from mobile_native_workflow.infrastructure.execution.tool_executor import LangGraphToolExecutor
from mobile_native_workflow.infrastructure.workflow.nodes.build import BuildRecoveryNode, BuildValidationNode
from mobile_native_workflow.infrastructure.workflow.nodes.completion import CompletionNode, FailureNode
from mobile_native_workflow.infrastructure.workflow.nodes.deployment.android import (
    AndroidCreateEmulatorNode,
    AndroidInstallAppNode,
    AndroidLaunchAppNode,
    AndroidSelectEmulatorNode,
    AndroidStartEmulatorNode,
)
from mobile_native_workflow.infrastructure.workflow.nodes.deployment.ios import (
    IOSBootSimulatorNode,
    IOSInstallAppNode,
    IOSLaunchAppNode,
    IOSSelectSimulatorNode,
)
from mobile_native_workflow.infrastructure.workflow.nodes.environment import (
    EnvironmentValidationNode,
    PlatformCheckNode,
    PluginCheckNode,
)
from mobile_native_workflow.infrastructure.workflow.nodes.input import (
    ExtractAndroidSetupNode,
    GetUserInputNode,
    UserInputExtractionNode,
    UserInputTriageNode,
)
from mobile_native_workflow.infrastructure.workflow.nodes.project import (
    ProjectGenerationNode,
    TemplateOptionsFetchNode,
    TemplatePropertiesExtractionNode,
    TemplatePropertiesUserInputNode,
    TemplateSelectionNode,
)
from mobile_native_workflow.infrastructure.workflow.routers import (
    DEFAULT_MAX_BUILD_RETRIES,
    CheckAndroidSetupExtractedRouter,
    CheckBuildSuccessfulRouter,
    CheckDeploymentPlatformRouter,
    CheckEmulatorCreatedRouter,
    CheckEmulatorFoundRouter,
    CheckEnvironmentValidatedRouter,
    CheckFatalErrorsRouter,
    CheckPluginValidatedRouter,
    CheckProjectGenerationRouter,
    CheckPropertiesFulfilledRouter,
    CheckSetupValidatedRouter,
    CheckTemplatePropertiesFulfilledRouter,
)
from mobile_native_workflow.infrastructure.workflow.services import (
    BuildRecoveryService,
    BuildValidationService,
    GetInputService,
    InputExtractionService,
)

# Build succeeded; the platform router picks the deployment branch
_DEPLOY = "deploy"
# No fatal error; the next router decides
_CONTINUE = "continue"


def build_mobile_native_graph(
    command_runner: CommandRunner | None = None,
    tool_executor: ToolExecutor | None = None,
    max_build_retries: int = DEFAULT_MAX_BUILD_RETRIES,
    template_source: str = "",
) -> StateGraph:
    """Build the mobile native app workflow with injected collaborators."""
    runner = command_runner or AsyncCommandRunner()
    executor = tool_executor or LangGraphToolExecutor()
    extraction = InputExtractionService(executor)

    environment = EnvironmentValidationNode()
    triage = UserInputTriageNode(executor)
    get_user_input = GetUserInputNode(WORKFLOW_USER_INPUT_PROPERTIES, GetInputService(executor))
    extract_user_input = UserInputExtractionNode(WORKFLOW_USER_INPUT_PROPERTIES, extraction)
    plugin_check = PluginCheckNode(runner)
    platform_check = PlatformCheckNode(runner)
    get_android_setup = GetUserInputNode(ANDROID_SETUP_PROPERTIES, GetInputService(executor), name="getAndroidSetup")
    extract_android_setup = ExtractAndroidSetupNode(extraction)
    fetch_templates = TemplateOptionsFetchNode(runner, template_source)
    select_template = TemplateSelectionNode(executor)
    get_template_properties = TemplatePropertiesUserInputNode(GetInputService(executor))
    extract_template_properties = TemplatePropertiesExtractionNode(extraction)
    generate_project = ProjectGenerationNode(executor)
    validate_build = BuildValidationNode(BuildValidationService(executor))
    build_recovery = BuildRecoveryNode(BuildRecoveryService(executor))
    ios_select = IOSSelectSimulatorNode(runner)
    ios_boot = IOSBootSimulatorNode(runner)
    ios_install = IOSInstallAppNode(runner)
    ios_launch = IOSLaunchAppNode(runner)
    android_select = AndroidSelectEmulatorNode(runner)
    android_create = AndroidCreateEmulatorNode(runner)
    android_start = AndroidStartEmulatorNode(runner)
    android_install = AndroidInstallAppNode(runner)
    android_launch = AndroidLaunchAppNode(runner)
    completion = CompletionNode(executor)
    failure = FailureNode(executor)

    builder = StateGraph(MobileNativeState)
    for node in (
        environment, triage, get_user_input, extract_user_input, plugin_check, platform_check,
        get_android_setup, extract_android_setup, fetch_templates, select_template,
        get_template_properties, extract_template_properties, generate_project,
        validate_build, build_recovery, ios_select, ios_boot, ios_install, ios_launch,
        android_select, android_create, android_start, android_install, android_launch,
        completion, failure,
    ):
        builder.add_node(node.name, node.execute)

    def add_router(source: str, router) -> None:
        builder.add_conditional_edges(source, router.execute, path_map=router.destinations)

    def continue_unless_fatal(source: str, target: str) -> None:
        add_router(source, CheckFatalErrorsRouter(target, failure.name))

    fatal_router = CheckFatalErrorsRouter(_CONTINUE, failure.name)

    def add_router_unless_fatal(source: str, router) -> None:
        def route(state: MobileNativeState) -> str:
            next_node = fatal_router.execute(state)
            return router.execute(state) if next_node == _CONTINUE else next_node

        builder.add_conditional_edges(source, route, path_map={**router.destinations, failure.name: failure.name})

    # Plan: environment, user input, tooling setup
    builder.add_edge(START, environment.name)
    add_router(environment.name, CheckEnvironmentValidatedRouter(triage.name, failure.name))
    properties_router = CheckPropertiesFulfilledRouter(
        plugin_check.name, get_user_input.name, WORKFLOW_USER_INPUT_PROPERTIES
    )
    add_router(triage.name, properties_router)
    builder.add_edge(get_user_input.name, extract_user_input.name)
    add_router(extract_user_input.name, properties_router)
    add_router(plugin_check.name, CheckPluginValidatedRouter(platform_check.name, failure.name))
    add_router(
        platform_check.name,
        CheckSetupValidatedRouter(fetch_templates.name, get_android_setup.name, failure.name),
    )
    builder.add_edge(get_android_setup.name, extract_android_setup.name)
    add_router(extract_android_setup.name, CheckAndroidSetupExtractedRouter(platform_check.name, failure.name))

    # Design: template and project generation
    continue_unless_fatal(fetch_templates.name, select_template.name)
    template_properties_router = CheckTemplatePropertiesFulfilledRouter(
        generate_project.name, get_template_properties.name
    )
    add_router_unless_fatal(select_template.name, template_properties_router)
    builder.add_edge(get_template_properties.name, extract_template_properties.name)
    add_router_unless_fatal(extract_template_properties.name, template_properties_router)
    add_router(generate_project.name, CheckProjectGenerationRouter(validate_build.name, failure.name))

    # Build with bounded recovery, then deploy for the chosen platform
    build_router = CheckBuildSuccessfulRouter(_DEPLOY, build_recovery.name, failure.name, max_build_retries)
    platform_router = CheckDeploymentPlatformRouter(ios_select.name, android_select.name, failure.name)

    def route_after_build(state: MobileNativeState) -> str:
        next_node = build_router.execute(state)
        return platform_router.execute(state) if next_node == _DEPLOY else next_node

    builder.add_conditional_edges(
        validate_build.name,
        route_after_build,
        path_map={n: n for n in (build_recovery.name, failure.name, ios_select.name, android_select.name)},
    )
    builder.add_edge(build_recovery.name, validate_build.name)

    continue_unless_fatal(ios_select.name, ios_boot.name)
    continue_unless_fatal(ios_boot.name, ios_install.name)
    continue_unless_fatal(ios_install.name, ios_launch.name)
    continue_unless_fatal(ios_launch.name, completion.name)

    add_router_unless_fatal(android_select.name, CheckEmulatorFoundRouter(android_start.name, android_create.name))
    add_router(android_create.name, CheckEmulatorCreatedRouter(android_start.name, failure.name))
    continue_unless_fatal(android_start.name, android_install.name)
    continue_unless_fatal(android_install.name, android_launch.name)
    continue_unless_fatal(android_launch.name, completion.name)

    builder.add_edge(completion.name, END)
    builder.add_edge(failure.name, END)

    return builder


def compile_workflow_graph(
    builder: StateGraph,
    *,
    checkpointer: BaseCheckpointSaver | None = None,
):
    """Compile graph with a checkpointer; interrupts need one to resume."""
    return builder.compile(checkpointer=checkpointer or MemorySaver())
