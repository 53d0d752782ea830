"""Android deployment nodes: select or create an emulator, start it, install and launch the app."""

import logging

from mobile_native_workflow.domain.entities.workflow_state import MobileNativeState
from mobile_native_workflow.domain.ports.command_runner import CommandRunner
from mobile_native_workflow.infrastructure.execution.command_runner import AsyncCommandRunner
from mobile_native_workflow.infrastructure.execution.progress_reporter import LoggingProgressReporter
from mobile_native_workflow.infrastructure.workflow.nodes.base import BaseNode
from mobile_native_workflow.infrastructure.workflow.nodes.deployment.android_emulator import (
    create_android_emulator,
    fetch_android_emulators,
    get_apk_path,
    install_android_app,
    launch_android_app,
    read_application_id,
    read_launcher_activity,
    sanitize_emulator_name,
    select_best_emulator,
    start_android_emulator,
    wait_for_emulator_ready,
)
from mobile_native_workflow.infrastructure.workflow.nodes.environment import PLATFORM_API_LEVELS

MISSING_PROJECT_PATH = "Project path must be specified for Android deployment"


class _AndroidNode(BaseNode):
    """Shared wiring for nodes that only act on Android projects."""

    def __init__(
        self,
        name: str,
        command_runner: CommandRunner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(name, logger)
        self.command_runner = command_runner or AsyncCommandRunner()

    def _skip(self, state: MobileNativeState) -> bool:
        if state.get("platform") != "Android":
            self.logger.debug("Skipping %s for non-Android platform", self.name)
            return True
        return False

    def _progress(self, operation: str) -> LoggingProgressReporter:
        return LoggingProgressReporter(operation, self.logger)


class AndroidSelectEmulatorNode(_AndroidNode):
    """Chooses an existing emulator; leaves androidEmulatorName unset when there is none."""

    def __init__(self, command_runner: CommandRunner | None = None, logger: logging.Logger | None = None) -> None:
        super().__init__("androidSelectEmulator", command_runner, logger)

    async def execute(self, state: MobileNativeState) -> MobileNativeState:
        if self._skip(state):
            return {}
        if state.get("androidEmulatorName"):
            self.logger.debug("Android emulator already set: %s", state["androidEmulatorName"])
            return {}

        try:
            result = await fetch_android_emulators(
                self.command_runner,
                min_sdk=int(PLATFORM_API_LEVELS["Android"]),
                progress_reporter=self._progress("List Android emulators"),
            )
        except Exception as e:
            self.logger.error("Error selecting Android emulator: %s", e)
            return self.fatal_error_patch(state, f"Failed to select Android emulator: {e}")

        if not result.success:
            return self.fatal_error_patch(
                state,
                f"Failed to list Android emulators: {result.error}. Please ensure Android SDK is properly installed.",
            )

        selected = select_best_emulator(result.emulators)
        if selected is None:
            self.logger.info("No emulators found, one will be created")
            return {}

        self.logger.info("Selected Android emulator %s (API %s)", selected.name, selected.api_level)
        return {"androidEmulatorName": selected.name}


class AndroidCreateEmulatorNode(_AndroidNode):
    def __init__(self, command_runner: CommandRunner | None = None, logger: logging.Logger | None = None) -> None:
        super().__init__("androidCreateEmulator", command_runner, logger)

    async def execute(self, state: MobileNativeState) -> MobileNativeState:
        if self._skip(state):
            return {}

        api_level = PLATFORM_API_LEVELS["Android"]
        emulator_name = f"Pixel_API_{api_level}_{sanitize_emulator_name(state.get('projectName') or 'App')}"
        try:
            result = await create_android_emulator(
                self.command_runner,
                emulator_name=emulator_name,
                api_level=api_level,
                project_path=state.get("projectPath"),
                progress_reporter=self._progress("Create Android emulator"),
            )
        except Exception as e:
            self.logger.error("Error creating Android emulator: %s", e)
            return self.fatal_error_patch(state, f"Failed to create Android emulator: {e}")

        if not result.success:
            return self.fatal_error_patch(state, result.error)
        return {"androidEmulatorName": result.emulator_name}


class AndroidStartEmulatorNode(_AndroidNode):
    """Starts the selected emulator and waits until it has finished booting."""

    def __init__(self, command_runner: CommandRunner | None = None, logger: logging.Logger | None = None) -> None:
        super().__init__("androidStartEmulator", command_runner, logger)

    async def execute(self, state: MobileNativeState) -> MobileNativeState:
        if self._skip(state):
            return {}
        emulator_name = state.get("androidEmulatorName")
        if not emulator_name:
            return self.fatal_error_patch(
                state,
                "Emulator name must be selected before starting. Ensure an emulator was selected or created.",
            )

        try:
            result = await start_android_emulator(
                self.command_runner,
                emulator_name=emulator_name,
                progress_reporter=self._progress("Start Android emulator"),
            )
            if not result.success:
                return self.fatal_error_patch(state, result.error)

            ready = await wait_for_emulator_ready(self.command_runner, emulator_name=emulator_name)
        except Exception as e:
            self.logger.error("Error starting Android emulator: %s", e)
            return self.fatal_error_patch(state, f"Failed to start Android emulator: {e}")

        if not ready.success:
            return self.fatal_error_patch(state, ready.error or "Emulator did not become ready")
        return {}


class AndroidInstallAppNode(_AndroidNode):
    def __init__(self, command_runner: CommandRunner | None = None, logger: logging.Logger | None = None) -> None:
        super().__init__("androidInstallApp", command_runner, logger)

    async def execute(self, state: MobileNativeState) -> MobileNativeState:
        if self._skip(state):
            return {}
        project_path = state.get("projectPath")
        if not project_path:
            return self.fatal_error_patch(state, MISSING_PROJECT_PATH)
        device_name = state.get("androidEmulatorName")
        if not device_name:
            return self.fatal_error_patch(
                state,
                "Emulator name must be specified for Android deployment. Ensure an emulator was selected or created.",
            )

        apk_path = get_apk_path(project_path, state.get("buildType") or "debug")
        try:
            result = await install_android_app(
                self.command_runner,
                device_name=device_name,
                apk_path=apk_path,
                project_path=project_path,
                progress_reporter=self._progress("Install Android app"),
            )
        except Exception as e:
            self.logger.error("Error installing Android app: %s", e)
            return self.fatal_error_patch(state, f"Failed to install Android app: {e}")

        if not result.success:
            return self.fatal_error_patch(state, result.error)
        self.logger.info("Installed %s on %s", apk_path, device_name)
        return {}


class AndroidLaunchAppNode(_AndroidNode):
    """Launches the installed app's LAUNCHER activity on the emulator."""

    def __init__(self, command_runner: CommandRunner | None = None, logger: logging.Logger | None = None) -> None:
        super().__init__("androidLaunchApp", command_runner, logger)

    async def execute(self, state: MobileNativeState) -> MobileNativeState:
        if self._skip(state):
            return {}
        project_path = state.get("projectPath")
        if not project_path:
            return self.fatal_error_patch(state, MISSING_PROJECT_PATH)

        application_id = read_application_id(project_path) or state.get("packageName")
        if not application_id:
            return self.fatal_error_patch(
                state,
                "Application ID must be specified for Android app launch. "
                "Please ensure build.gradle contains applicationId.",
            )
        device_name = state.get("androidEmulatorName")
        if not device_name:
            return self.fatal_error_patch(
                state,
                "Emulator name must be specified for Android app launch. Please ensure an emulator is selected.",
            )
        activity_class = read_launcher_activity(project_path)
        if not activity_class:
            return self.fatal_error_patch(
                state,
                "Launcher activity must be specified in AndroidManifest.xml with android.intent.category.LAUNCHER.",
            )

        try:
            result = await launch_android_app(
                self.command_runner,
                device_name=device_name,
                application_id=application_id,
                activity_class=activity_class,
                progress_reporter=self._progress("Launch Android app"),
            )
        except Exception as e:
            self.logger.error("Error launching Android app: %s", e)
            return self.fatal_error_patch(state, f"Failed to launch Android app: {e}")

        if not result.success:
            return self.fatal_error_patch(state, result.error)
        self.logger.info("Launched %s on %s", application_id, device_name)
        return {"deploymentStatus": "success"}
