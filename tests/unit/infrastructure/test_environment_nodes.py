"""Tests for environment, plugin and platform setup nodes."""

import json

import pytest

from conftest import FakeCommandRunner, failed, ok
from mobile_native_workflow.domain.ports.command_runner import CommandSpawnError
from mobile_native_workflow.infrastructure.workflow.nodes.environment import (
    EnvironmentValidationNode,
    PlatformCheckNode,
    PluginCheckNode,
    PluginConfig,
    PluginError,
    parse_plugin_output,
)

PLUGIN = PluginConfig(name="sfdx-mobilesdk-plugin", minimum_version="13.2.0-alpha.1", install_tag="@alpha")
INSPECT = "sf plugins inspect sfdx-mobilesdk-plugin"
INSTALL = "sf plugins install sfdx-mobilesdk-plugin@alpha"


def inspect_output(version: str) -> str:
    return json.dumps({"status": 0, "result": [{"name": PLUGIN.name, "version": version}]})


class TestEnvironmentValidationNode:
    """Tests for EnvironmentValidationNode."""

    def test_valid_environment(self, monkeypatch):
        monkeypatch.setenv("CONNECTED_APP_CONSUMER_KEY", "client-id")
        monkeypatch.setenv("CONNECTED_APP_CALLBACK_URL", "myapp://callback")
        patch = EnvironmentValidationNode().execute({})

        assert patch == {
            "validEnvironment": True,
            "invalidEnvironmentMessages": [],
            "connectedAppClientId": "client-id",
            "connectedAppCallbackUri": "myapp://callback",
        }

    def test_missing_variables(self, monkeypatch):
        monkeypatch.delenv("CONNECTED_APP_CONSUMER_KEY", raising=False)
        monkeypatch.delenv("CONNECTED_APP_CALLBACK_URL", raising=False)
        patch = EnvironmentValidationNode().execute({})

        assert patch["validEnvironment"] is False
        assert len(patch["invalidEnvironmentMessages"]) == 2
        assert patch["workflowFatalErrorMessages"] == patch["invalidEnvironmentMessages"]
        assert "CONNECTED_APP_CONSUMER_KEY" in patch["invalidEnvironmentMessages"][0]


class TestParsePluginOutput:
    """Tests for parse_plugin_output function."""

    def test_result_list(self):
        info = parse_plugin_output(inspect_output("13.2.0"))
        assert (info.name, info.version) == (PLUGIN.name, "13.2.0")

    def test_plain_object(self):
        assert parse_plugin_output(json.dumps({"name": "x", "version": "1.0.0"})).version == "1.0.0"

    @pytest.mark.parametrize("output", ["not json", "[]", json.dumps({"result": [{"name": "x"}]})])
    def test_invalid(self, output):
        with pytest.raises(PluginError):
            parse_plugin_output(output)


class TestPluginCheckNode:
    """Tests for PluginCheckNode."""

    async def test_sufficient_version(self):
        runner = FakeCommandRunner().on(INSPECT, ok(inspect_output("13.2.0")))
        patch = await PluginCheckNode(runner, plugins=(PLUGIN,)).execute({})

        assert patch == {"validPluginSetup": True}
        assert runner.lines == [INSPECT + " --json"]

    async def test_missing_plugin_is_installed(self):
        runner = FakeCommandRunner().on(INSPECT, failed(stderr="not installed"), ok(inspect_output("13.2.0")))
        patch = await PluginCheckNode(runner, plugins=(PLUGIN,)).execute({})

        assert patch == {"validPluginSetup": True}
        assert INSTALL in runner.lines

    async def test_outdated_plugin_upgrade_still_too_old(self):
        runner = FakeCommandRunner().on(INSPECT, ok(inspect_output("12.0.0")))
        patch = await PluginCheckNode(runner, plugins=(PLUGIN,)).execute({})

        assert patch["validPluginSetup"] is False
        assert patch["workflowFatalErrorMessages"] == [
            "sfdx-mobilesdk-plugin: Plugin upgraded but version 12.0.0 is still below minimum 13.2.0-alpha.1"
        ]

    async def test_install_failure(self):
        runner = FakeCommandRunner().on(INSPECT, failed(stderr="not installed")).on(INSTALL, failed(stderr="offline"))
        patch = await PluginCheckNode(runner, plugins=(PLUGIN,)).execute({})

        assert patch["workflowFatalErrorMessages"] == ["sfdx-mobilesdk-plugin: Failed to install plugin: offline"]

    async def test_sf_missing(self):
        runner = FakeCommandRunner().on("sf", CommandSpawnError("sf: not found"))
        patch = await PluginCheckNode(runner, plugins=(PLUGIN,)).execute({})

        assert patch["validPluginSetup"] is False
        assert "Failed to install plugin" in patch["workflowFatalErrorMessages"][0]


def setup_report(met: bool, failures: list[str] = ()) -> str:
    tests = [{"title": f"check {i}", "hasPassed": False, "message": m} for i, m in enumerate(failures)]
    return json.dumps({"outputContent": {"hasMetAllRequirements": met, "tests": tests}, "outputSchema": {}})


class TestPlatformCheckNode:
    """Tests for PlatformCheckNode."""

    async def test_ios_requirements_met(self):
        runner = FakeCommandRunner().on("sf force lightning local setup", ok(setup_report(True)))
        patch = await PlatformCheckNode(runner).execute({"platform": "iOS"})

        assert patch == {"validPlatformSetup": True}
        assert runner.calls[0]["args"] == [
            "force", "lightning", "local", "setup", "-p", "ios", "-l", "17.0", "--json",
        ]

    async def test_failed_requirements_become_fatal_errors(self):
        runner = FakeCommandRunner().on("sf force lightning local setup", ok(setup_report(False, ["Xcode missing"])))
        patch = await PlatformCheckNode(runner).execute({"platform": "iOS"})

        assert patch["validPlatformSetup"] is False
        assert patch["workflowFatalErrorMessages"][0].endswith("failed: Xcode missing")

    async def test_invalid_json(self):
        runner = FakeCommandRunner().on("sf force lightning local setup", ok("oops"))
        patch = await PlatformCheckNode(runner).execute({"platform": "iOS"})

        assert patch["validPlatformSetup"] is False
        assert patch["workflowFatalErrorMessages"][0].startswith("Command output is not valid JSON")

    async def test_invalid_platform(self, command_runner):
        patch = await PlatformCheckNode(command_runner).execute({"platform": "Windows"})
        assert patch["workflowFatalErrorMessages"] == ["Invalid platform: Windows"]

    async def test_android_without_homes_requests_setup(self, monkeypatch, command_runner):
        monkeypatch.delenv("ANDROID_HOME", raising=False)
        monkeypatch.delenv("JAVA_HOME", raising=False)
        patch = await PlatformCheckNode(command_runner).execute({"platform": "Android"})

        assert patch == {"validPlatformSetup": False}
        assert command_runner.calls == []

    async def test_android_with_homes(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ANDROID_HOME", str(tmp_path / "sdk"))
        monkeypatch.setenv("JAVA_HOME", str(tmp_path / "jdk"))
        runner = FakeCommandRunner().on("sf force lightning local setup", ok(setup_report(True)))
        patch = await PlatformCheckNode(runner).execute({"platform": "Android"})

        assert patch == {
            "androidHome": str(tmp_path / "sdk"),
            "javaHome": str(tmp_path / "jdk"),
            "validPlatformSetup": True,
        }
        assert runner.calls[0]["args"][5:8] == ["android", "-l", "35"]
