"""iOS deployment nodes: select and boot a simulator, install and launch the app."""

import logging

from mobile_native_workflow.domain.entities.workflow_state import MobileNativeState
from mobile_native_workflow.domain.ports.command_runner import CommandRunner
from mobile_native_workflow.infrastructure.execution.command_runner import AsyncCommandRunner
from mobile_native_workflow.infrastructure.execution.progress_reporter import LoggingProgressReporter
from mobile_native_workflow.infrastructure.persistence.temp_directory import (
    TempDirectoryManager,
    temp_directory_manager,
)
from mobile_native_workflow.infrastructure.workflow.nodes.base import BaseNode
from mobile_native_workflow.infrastructure.workflow.nodes.deployment.ios_simulator import (
    POST_INSTALL_DELAY,
    boot_simulator,
    fetch_simulator_devices,
    install_ios_app,
    launch_ios_app,
    open_simulator_app,
    read_bundle_id,
    select_best_simulator,
    wait_for_simulator_ready,
)

MISSING_TARGET_DEVICE = "Target device must be specified for iOS deployment"


class _IOSNode(BaseNode):
    def __init__(
        self,
        name: str,
        command_runner: CommandRunner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(name, logger)
        self.command_runner = command_runner or AsyncCommandRunner()

    def _skip(self, state: MobileNativeState) -> bool:
        if state.get("platform") != "iOS":
            self.logger.debug("Skipping %s for non-iOS platform", self.name)
            return True
        return False


class IOSSelectSimulatorNode(_IOSNode):
    def __init__(self, command_runner: CommandRunner | None = None, logger: logging.Logger | None = None) -> None:
        super().__init__("iosSelectSimulator", command_runner, logger)

    async def execute(self, state: MobileNativeState) -> MobileNativeState:
        if self._skip(state):
            return {}
        if state.get("targetDevice"):
            self.logger.debug("Target device already set: %s", state["targetDevice"])
            return {}

        try:
            result = await fetch_simulator_devices(
                self.command_runner, progress_reporter=LoggingProgressReporter("List iOS simulators", self.logger)
            )
        except Exception as e:
            self.logger.error("Error selecting iOS simulator: %s", e)
            return self.fatal_error_patch(
                state, f"Failed to select iOS simulator: {e}. Please ensure Xcode is properly installed."
            )
        if not result.success:
            return self.fatal_error_patch(
                state, f"Failed to list iOS simulators: {result.error}. Please ensure Xcode is properly installed."
            )

        selected = select_best_simulator(result.devices)
        if selected is None:
            return self.fatal_error_patch(state, "No iOS simulators found. Please install simulators via Xcode.")
        self.logger.info("Selected iOS simulator %s (iOS %s, %s)", selected.name, selected.iosVersion, selected.state)
        return {"targetDevice": selected.name}


class IOSBootSimulatorNode(_IOSNode):
    """Boots the target simulator, waits for it, then opens the Simulator app."""

    def __init__(self, command_runner: CommandRunner | None = None, logger: logging.Logger | None = None) -> None:
        super().__init__("iosBootSimulator", command_runner, logger)

    async def execute(self, state: MobileNativeState) -> MobileNativeState:
        if self._skip(state):
            return {}
        device_name = state.get("targetDevice")
        if not device_name:
            return self.fatal_error_patch(state, MISSING_TARGET_DEVICE)

        try:
            booted = await boot_simulator(
                self.command_runner,
                device_name=device_name,
                progress_reporter=LoggingProgressReporter("Boot iOS simulator", self.logger),
            )
            if not booted.success:
                return self.fatal_error_patch(state, booted.error)
            ready = await wait_for_simulator_ready(self.command_runner, device_name=device_name)
            if not ready.success:
                return self.fatal_error_patch(state, ready.error or "Simulator did not become ready")
        except Exception as e:
            self.logger.error("Error booting iOS simulator: %s", e)
            return self.fatal_error_patch(state, f"Failed to boot iOS simulator: {e}")

        await open_simulator_app(self.command_runner)
        return {}


class IOSInstallAppNode(_IOSNode):
    """Installs the .app bundle the build tool left in the temp directory."""

    def __init__(
        self,
        command_runner: CommandRunner | None = None,
        temp_directory: TempDirectoryManager | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__("iosInstallApp", command_runner, logger)
        self.temp_directory = temp_directory or temp_directory_manager

    async def execute(self, state: MobileNativeState) -> MobileNativeState:
        if self._skip(state):
            return {}
        device_name = state.get("targetDevice")
        if not device_name:
            return self.fatal_error_patch(state, MISSING_TARGET_DEVICE)
        project_name = state.get("projectName")
        if not project_name:
            return self.fatal_error_patch(state, "Project name must be specified for iOS deployment")

        app_path = self.temp_directory.get_app_artifact_path(project_name)
        try:
            result = await install_ios_app(
                self.command_runner,
                device_name=device_name,
                app_path=app_path,
                progress_reporter=LoggingProgressReporter("Install iOS app", self.logger),
            )
        except Exception as e:
            self.logger.error("Error installing iOS app: %s", e)
            return self.fatal_error_patch(state, f"Failed to install iOS app: {e}")
        if not result.success:
            return self.fatal_error_patch(state, result.error)
        return {}


class IOSLaunchAppNode(_IOSNode):
    def __init__(self, command_runner: CommandRunner | None = None, logger: logging.Logger | None = None) -> None:
        super().__init__("iosLaunchApp", command_runner, logger)

    async def execute(self, state: MobileNativeState) -> MobileNativeState:
        if self._skip(state):
            return {}
        device_name = state.get("targetDevice")
        if not device_name:
            return self.fatal_error_patch(state, MISSING_TARGET_DEVICE)
        if not state.get("packageName") or not state.get("projectName"):
            return self.fatal_error_patch(state, "Package name and project name must be specified for iOS app launch")
        project_path = state.get("projectPath")
        if not project_path:
            return self.fatal_error_patch(state, "Project path must be specified for iOS app launch")

        try:
            bundle_id = read_bundle_id(project_path)
            result = await launch_ios_app(
                self.command_runner,
                device_name=device_name,
                bundle_id=bundle_id,
                post_install_delay=POST_INSTALL_DELAY,
                progress_reporter=LoggingProgressReporter("Launch iOS app", self.logger),
            )
        except Exception as e:
            self.logger.error("Error launching iOS app: %s", e)
            return self.fatal_error_patch(state, f"Failed to launch iOS app: {e}")
        if not result.success:
            return self.fatal_error_patch(state, result.error)
        return {"deploymentStatus": "success"}
