"""Environment, CLI plugin and platform setup checks."""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from mobile_native_workflow.domain.entities.workflow_state import MobileNativeState
from mobile_native_workflow.domain.ports.command_runner import CommandRunner, CommandSpawnError
from mobile_native_workflow.infrastructure.execution.command_runner import AsyncCommandRunner
from mobile_native_workflow.infrastructure.persistence.env_config import load_and_set_env_vars
from mobile_native_workflow.infrastructure.workflow.nodes.base import BaseNode
from mobile_native_workflow.infrastructure.workflow.versioning import version_gte

CONNECTED_APP_HELP_URL = (
    "https://help.salesforce.com/s/articleView?id=xcloud.connected_app_create_mobile.htm&type=5"
)


class EnvironmentValidationNode(BaseNode):
    """Checks that the connected app settings are present in the environment."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        super().__init__("validateEnvironment", logger)

    def execute(self, state: MobileNativeState) -> MobileNativeState:
        client_id = os.getenv("CONNECTED_APP_CONSUMER_KEY")
        callback_uri = os.getenv("CONNECTED_APP_CALLBACK_URL")

        messages: list[str] = []
        if not client_id:
            messages.append(
                "You must set the CONNECTED_APP_CONSUMER_KEY environment variable, with your Salesforce "
                "Connected App Consumer Key associated with the mobile app. See "
                f"{CONNECTED_APP_HELP_URL} for information on how to create a Connected App for mobile apps."
            )
        if not callback_uri:
            messages.append(
                "You must set the CONNECTED_APP_CALLBACK_URL environment variable, with your Salesforce "
                "Connected App Callback URL associated with the mobile app. See "
                f"{CONNECTED_APP_HELP_URL} for information on how to create a Connected App for mobile apps."
            )

        if messages:
            self.logger.warning("Environment validation failed: %d issue(s)", len(messages))
            return {
                "validEnvironment": False,
                "invalidEnvironmentMessages": messages,
                **self.fatal_error_patch(state, *messages),
            }
        return {
            "validEnvironment": True,
            "invalidEnvironmentMessages": [],
            "connectedAppClientId": client_id,
            "connectedAppCallbackUri": callback_uri,
        }


@dataclass(frozen=True)
class PluginConfig:
    name: str
    minimum_version: str
    install_tag: str


REQUIRED_PLUGINS = (
    PluginConfig(name="sfdx-mobilesdk-plugin", minimum_version="13.2.0-alpha.1", install_tag="@alpha"),
    PluginConfig(name="@salesforce/lwc-dev-mobile", minimum_version="3.0.0-alpha.3", install_tag="@alpha"),
)

INSPECT_TIMEOUT = 10.0
INSTALL_TIMEOUT = 60.0


class PluginInfo(BaseModel):
    name: str
    version: str


class PluginError(Exception):
    """A plugin could not be inspected, installed or upgraded."""


class PluginCheckNode(BaseNode):
    """Ensures the sf CLI plugins the workflow drives are installed at a sufficient version.

    Missing plugins are installed and outdated ones upgraded before giving up.
    """

    def __init__(
        self,
        command_runner: CommandRunner | None = None,
        plugins: tuple[PluginConfig, ...] = REQUIRED_PLUGINS,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__("checkPluginSetup", logger)
        self.command_runner = command_runner or AsyncCommandRunner()
        self.plugins = plugins

    async def execute(self, state: MobileNativeState) -> MobileNativeState:
        errors: list[str] = []
        for plugin in self.plugins:
            errors.extend(await self._check_plugin(plugin))
        if not errors:
            return {"validPluginSetup": True}
        return {"validPluginSetup": False, **self.fatal_error_patch(state, *errors)}

    async def _check_plugin(self, plugin: PluginConfig) -> list[str]:
        try:
            info = await self._inspect(plugin)
        except PluginError as e:
            self.logger.info("Plugin %s not installed (%s), installing", plugin.name, e)
            return await self._install(plugin, action="install")

        if not self._is_sufficient(info.version, plugin.minimum_version):
            self.logger.info(
                "Plugin %s version %s is below minimum %s, upgrading",
                plugin.name, info.version, plugin.minimum_version,
            )
            return await self._install(plugin, action="upgrade")

        self.logger.debug("Plugin %s %s OK", plugin.name, info.version)
        return []

    async def _install(self, plugin: PluginConfig, action: str) -> list[str]:
        verb = "installed" if action == "install" else "upgraded"
        try:
            result = await self.command_runner.execute(
                "sf",
                ["plugins", "install", f"{plugin.name}{plugin.install_tag}"],
                timeout=INSTALL_TIMEOUT,
                command_name=f"sf plugins install {plugin.name}",
            )
            if not result.success:
                raise PluginError(result.stderr.strip() or f"exit code {result.exit_code}")
            info = await self._inspect(plugin)
        except (PluginError, CommandSpawnError) as e:
            return [f"{plugin.name}: Failed to {action} plugin: {e}"]

        if not self._is_sufficient(info.version, plugin.minimum_version):
            still = " still" if action == "upgrade" else ""
            return [
                f"{plugin.name}: Plugin {verb} but version {info.version} is{still} below minimum "
                f"{plugin.minimum_version}"
            ]
        self.logger.info("Plugin %s %s at version %s", plugin.name, verb, info.version)
        return []

    async def _inspect(self, plugin: PluginConfig) -> PluginInfo:
        try:
            result = await self.command_runner.execute(
                "sf",
                ["plugins", "inspect", plugin.name, "--json"],
                timeout=INSPECT_TIMEOUT,
                command_name=f"sf plugins inspect {plugin.name}",
            )
        except CommandSpawnError as e:
            raise PluginError(str(e)) from e
        if not result.success:
            raise PluginError(result.stderr.strip() or f"exit code {result.exit_code}")
        return parse_plugin_output(result.stdout)

    def _is_sufficient(self, version: str, minimum: str) -> bool:
        try:
            return version_gte(version, minimum)
        except ValueError:
            self.logger.warning("Failed to parse version for comparison: %s", version)
            return False


def parse_plugin_output(output: str) -> PluginInfo:
    """Extract {name, version} from `sf plugins inspect --json` output."""
    try:
        data: Any = json.loads(output)
        if isinstance(data, dict) and data.get("result"):
            data = data["result"]
        if isinstance(data, list):
            data = data[0]
        return PluginInfo.model_validate(data)
    except (ValueError, IndexError, ValidationError) as e:
        raise PluginError(f"Failed to parse plugin info: {e}") from e


PLATFORM_API_LEVELS = {"iOS": "17.0", "Android": "35"}
PLATFORM_CHECK_TIMEOUT = 20.0


class RequirementResult(BaseModel):
    title: str
    hasPassed: bool
    duration: str | None = None
    message: str


class PlatformCheckResult(BaseModel):
    hasMetAllRequirements: bool
    totalDuration: str | None = None
    tests: list[RequirementResult]


class PlatformCheckNode(BaseNode):
    """Runs `sf force lightning local setup` for the target platform."""

    def __init__(
        self,
        command_runner: CommandRunner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__("checkPlatformSetup", logger)
        self.command_runner = command_runner or AsyncCommandRunner()

    async def execute(self, state: MobileNativeState) -> MobileNativeState:
        platform = state.get("platform")
        api_level = PLATFORM_API_LEVELS.get(platform or "")
        if api_level is None:
            return {"validPlatformSetup": False, **self.fatal_error_patch(state, f"Invalid platform: {platform}")}

        patch: MobileNativeState = {}
        if platform == "Android":
            if not os.getenv("ANDROID_HOME") or not os.getenv("JAVA_HOME"):
                load_and_set_env_vars()
            android_home, java_home = os.getenv("ANDROID_HOME"), os.getenv("JAVA_HOME")
            if not android_home or not java_home:
                self.logger.info("ANDROID_HOME/JAVA_HOME not configured, requesting Android setup")
                return {"validPlatformSetup": False}
            patch.update(androidHome=android_home, javaHome=java_home)

        args = ["force", "lightning", "local", "setup", "-p", platform.lower(), "-l", api_level, "--json"]
        command = "sf " + " ".join(args)
        try:
            result = await self.command_runner.execute(
                "sf", args, timeout=PLATFORM_CHECK_TIMEOUT, command_name="Platform setup check"
            )
        except CommandSpawnError as e:
            return {
                **patch,
                "validPlatformSetup": False,
                **self.fatal_error_patch(state, f"Error executing platform check command: {e}"),
            }

        all_met, errors = self._parse_output(result.stdout, command)
        patch["validPlatformSetup"] = all_met
        if errors:
            patch.update(self.fatal_error_patch(state, *errors))
        return patch

    @staticmethod
    def _parse_output(output: str, command: str) -> tuple[bool, list[str]]:
        # The report is {"outputContent": {...}, "outputSchema": ...}; only outputContent matters
        try:
            report = json.loads(output)
            check = PlatformCheckResult.model_validate(report.get("outputContent"))
        except (ValueError, AttributeError, ValidationError) as e:
            return False, [f"Command output is not valid JSON: {e}"]
        errors = [
            f'Platform setup check for "{command}" failed: {test.message}'
            for test in check.tests
            if not test.hasPassed
        ]
        return check.hasMetAllRequirements, errors
