"""Standalone deployment guide tool."""

from mobile_native_workflow.application.tools import prompts
from mobile_native_workflow.application.tools.base import AbstractTool
from mobile_native_workflow.domain.entities.tool_schemas import DEPLOYMENT_TOOL, DeploymentInput

DEPLOYMENT_PREAMBLE = (
    "You are a technology-adept agent working on behalf of a user who has less familiarity with the "
    "technical details of application deployment than you do, and needs your assistance to deploy the "
    "app to the target device.\n"
    "Please execute the instructions of the following plan on behalf of the user, providing them "
    "information on the outcomes that they may need to know.\n\n"
)


class DeploymentTool(AbstractTool):
    """Renders device setup, install and launch commands for the target platform."""

    def __init__(self) -> None:
        super().__init__(DEPLOYMENT_TOOL)

    async def handle_request(self, tool_input: DeploymentInput) -> str:
        return self.generate_guidance(tool_input)

    def generate_guidance(self, tool_input: DeploymentInput) -> str:
        if tool_input.platform == "iOS":
            target_device = tool_input.targetDevice or "<simulator-name>"
            device_title = "Prepare the iOS Simulator"
            device_step = prompts.IOS_DEVICE_STEP.format(target_device=target_device)
            install_step = prompts.IOS_INSTALL_STEP.format(
                target_device=target_device, project_path=tool_input.projectPath
            )
            launch_step = prompts.IOS_LAUNCH_STEP.format(target_device=target_device)
        else:
            device_title = "Prepare the Android Emulator"
            device_step = prompts.ANDROID_DEVICE_STEP
            install_step = prompts.ANDROID_INSTALL_STEP.format(
                project_path=tool_input.projectPath,
                build_type=tool_input.buildType,
                variant=tool_input.buildType.capitalize(),
            )
            launch_step = prompts.ANDROID_LAUNCH_STEP

        return DEPLOYMENT_PREAMBLE + prompts.DEPLOYMENT_PROMPT.format(
            platform=tool_input.platform,
            device_step_title=device_title,
            device_step=device_step,
            install_step=install_step,
            launch_step=launch_step,
        )
