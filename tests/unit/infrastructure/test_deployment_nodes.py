"""Tests for Android and iOS deployment nodes."""

import json
from pathlib import Path

import pytest

from conftest import FakeCommandRunner, failed, ok
from mobile_native_workflow.domain.ports.command_runner import CommandSpawnError
from mobile_native_workflow.infrastructure.persistence.temp_directory import TempDirectoryManager
from mobile_native_workflow.infrastructure.workflow.nodes.deployment.android import (
    MISSING_PROJECT_PATH,
    AndroidCreateEmulatorNode,
    AndroidInstallAppNode,
    AndroidLaunchAppNode,
    AndroidSelectEmulatorNode,
    AndroidStartEmulatorNode,
)
from mobile_native_workflow.infrastructure.workflow.nodes.deployment.ios import (
    MISSING_TARGET_DEVICE,
    IOSBootSimulatorNode,
    IOSInstallAppNode,
    IOSLaunchAppNode,
    IOSSelectSimulatorNode,
)

ANDROID = {"platform": "Android", "projectName": "My App", "packageName": "com.acme.app"}
IOS = {"platform": "iOS", "projectName": "App", "packageName": "com.acme"}


@pytest.fixture(autouse=True)
def no_post_install_delay(monkeypatch):
    monkeypatch.setattr("mobile_native_workflow.infrastructure.workflow.nodes.deployment.ios.POST_INSTALL_DELAY", 0.0)


def device_list(*devices: tuple[str, int]) -> str:
    return json.dumps({"outputContent": [{"id": name, "osVersion": {"major": api}} for name, api in devices]})


class TestPlatformSkip:
    """Nodes for the other platform return an empty patch without running commands."""

    @pytest.mark.parametrize(
        "node_cls",
        [
            AndroidSelectEmulatorNode,
            AndroidCreateEmulatorNode,
            AndroidStartEmulatorNode,
            AndroidInstallAppNode,
            AndroidLaunchAppNode,
        ],
    )
    async def test_android_nodes_skip_ios(self, node_cls, command_runner):
        assert await node_cls(command_runner).execute({**IOS, "projectPath": "/p"}) == {}
        assert command_runner.calls == []

    @pytest.mark.parametrize(
        "node_cls",
        [IOSSelectSimulatorNode, IOSBootSimulatorNode, IOSInstallAppNode, IOSLaunchAppNode],
    )
    async def test_ios_nodes_skip_android(self, node_cls, command_runner):
        assert await node_cls(command_runner).execute({**ANDROID, "projectPath": "/p"}) == {}
        assert command_runner.calls == []


class TestAndroidSelectEmulatorNode:
    """Tests for AndroidSelectEmulatorNode."""

    async def test_selects_highest_compatible(self):
        runner = FakeCommandRunner().on("sf force lightning local device list", ok(device_list(("A", 34), ("B", 35))))
        patch = await AndroidSelectEmulatorNode(runner).execute(ANDROID)
        assert patch == {"androidEmulatorName": "B"}

    async def test_keeps_existing_selection(self, command_runner):
        patch = await AndroidSelectEmulatorNode(command_runner).execute({**ANDROID, "androidEmulatorName": "Mine"})
        assert patch == {}
        assert command_runner.calls == []

    async def test_no_emulators_leaves_name_unset(self):
        runner = FakeCommandRunner().on("sf force lightning local device list", ok(device_list()))
        assert await AndroidSelectEmulatorNode(runner).execute(ANDROID) == {}

    async def test_list_failure_is_fatal(self):
        runner = FakeCommandRunner().on("sf force lightning local device list", failed(exit_code=1))
        patch = await AndroidSelectEmulatorNode(runner).execute({**ANDROID, "workflowFatalErrorMessages": ["old"]})

        messages = patch["workflowFatalErrorMessages"]
        assert messages[0] == "old"
        assert messages[1].startswith("Failed to list Android emulators:")
        assert messages[1].endswith("Please ensure Android SDK is properly installed.")

    async def test_spawn_error_is_fatal(self):
        runner = FakeCommandRunner().on("sf", CommandSpawnError("sf not found"))
        patch = await AndroidSelectEmulatorNode(runner).execute(ANDROID)
        assert patch["workflowFatalErrorMessages"] == ["Failed to select Android emulator: sf not found"]


class TestAndroidCreateEmulatorNode:
    """Tests for AndroidCreateEmulatorNode."""

    async def test_creates_named_emulator(self, command_runner):
        patch = await AndroidCreateEmulatorNode(command_runner).execute(ANDROID)

        assert patch == {"androidEmulatorName": "Pixel_API_35_My_App"}
        args = command_runner.calls[0]["args"]
        assert args[args.index("-n") + 1] == "Pixel_API_35_My_App"
        assert args[args.index("-l") + 1] == "35"

    async def test_failure_is_fatal(self):
        runner = FakeCommandRunner().on("sf force lightning local device create", failed(stderr="no system image"))
        patch = await AndroidCreateEmulatorNode(runner).execute(ANDROID)
        assert patch["workflowFatalErrorMessages"] == [
            'Failed to create Android emulator "Pixel_API_35_My_App": no system image'
        ]


class TestAndroidStartEmulatorNode:
    """Tests for AndroidStartEmulatorNode."""

    async def test_requires_emulator_name(self, command_runner):
        patch = await AndroidStartEmulatorNode(command_runner).execute(ANDROID)
        assert "Emulator name must be selected" in patch["workflowFatalErrorMessages"][0]

    async def test_starts_and_waits(self):
        runner = FakeCommandRunner().on("adb shell getprop", ok("1"))
        patch = await AndroidStartEmulatorNode(runner).execute({**ANDROID, "androidEmulatorName": "Pixel"})

        assert patch == {}
        assert runner.lines[0] == "sf force lightning local device start -p android -t Pixel"


class TestAndroidInstallAppNode:
    """Tests for AndroidInstallAppNode."""

    async def test_requires_project_path(self, command_runner):
        patch = await AndroidInstallAppNode(command_runner).execute({**ANDROID, "androidEmulatorName": "Pixel"})
        assert patch["workflowFatalErrorMessages"] == [MISSING_PROJECT_PATH]
        assert command_runner.calls == []

    async def test_installs_build_type_apk(self, command_runner):
        state = {**ANDROID, "androidEmulatorName": "Pixel", "projectPath": "/p", "buildType": "release"}
        patch = await AndroidInstallAppNode(command_runner).execute(state)

        assert patch == {}
        args = command_runner.calls[0]["args"]
        assert args[args.index("-a") + 1] == str(Path("/p/app/build/outputs/apk/release/app-release.apk"))
        assert command_runner.calls[0]["cwd"] == "/p"

    async def test_install_failure_is_fatal(self):
        runner = FakeCommandRunner().on("sf force lightning local app install", failed(stderr="INSTALL_FAILED_NO_SPACE"))
        state = {**ANDROID, "androidEmulatorName": "Pixel", "projectPath": "/p", "workflowFatalErrorMessages": ["old"]}
        patch = await AndroidInstallAppNode(runner).execute(state)

        assert patch == {
            "workflowFatalErrorMessages": ["old", "Failed to install Android app: INSTALL_FAILED_NO_SPACE"]
        }
        assert state["workflowFatalErrorMessages"] == ["old"]

    async def test_runner_exception_is_fatal(self):
        runner = FakeCommandRunner().on("sf", RuntimeError("adb daemon crashed"))
        state = {**ANDROID, "androidEmulatorName": "Pixel", "projectPath": "/p"}
        patch = await AndroidInstallAppNode(runner).execute(state)

        assert patch == {"workflowFatalErrorMessages": ["Failed to install Android app: adb daemon crashed"]}


class TestAndroidLaunchAppNode:
    """Tests for AndroidLaunchAppNode."""

    @pytest.fixture
    def project(self, tmp_path: Path) -> Path:
        main = tmp_path / "app" / "src" / "main"
        main.mkdir(parents=True)
        (main / "AndroidManifest.xml").write_text(
            '<manifest><application><activity android:name="com.acme.app.MainActivity">'
            '<intent-filter><category android:name="android.intent.category.LAUNCHER" /></intent-filter>'
            "</activity></application></manifest>"
        )
        return tmp_path

    async def test_launches_with_package_fallback(self, project, command_runner):
        state = {**ANDROID, "androidEmulatorName": "Pixel", "projectPath": str(project)}
        patch = await AndroidLaunchAppNode(command_runner).execute(state)

        assert patch == {"deploymentStatus": "success"}
        assert command_runner.calls[0]["args"][-1] == "com.acme.app/com.acme.app.MainActivity"

    async def test_missing_launcher_activity(self, tmp_path, command_runner):
        state = {**ANDROID, "androidEmulatorName": "Pixel", "projectPath": str(tmp_path)}
        patch = await AndroidLaunchAppNode(command_runner).execute(state)
        assert "Launcher activity" in patch["workflowFatalErrorMessages"][0]


class TestIOSNodes:
    """Tests for iOS deployment nodes."""

    async def test_select_prefers_booted(self):
        output = json.dumps(
            {
                "devices": {
                    "com.apple.CoreSimulator.SimRuntime.iOS-18-0": [
                        {"name": "iPhone 16", "udid": "A", "state": "Shutdown"},
                    ],
                    "com.apple.CoreSimulator.SimRuntime.iOS-17-0": [
                        {"name": "iPhone 15", "udid": "B", "state": "Booted"},
                    ],
                }
            }
        )
        runner = FakeCommandRunner().on("xcrun simctl list", ok(output))
        assert await IOSSelectSimulatorNode(runner).execute(IOS) == {"targetDevice": "iPhone 15"}

    async def test_select_without_simulators_is_fatal(self):
        runner = FakeCommandRunner().on("xcrun simctl list", ok(json.dumps({"devices": {}})))
        patch = await IOSSelectSimulatorNode(runner).execute(IOS)
        assert patch["workflowFatalErrorMessages"] == ["No iOS simulators found. Please install simulators via Xcode."]

    async def test_boot_requires_target(self, command_runner):
        patch = await IOSBootSimulatorNode(command_runner).execute(IOS)
        assert patch["workflowFatalErrorMessages"] == [MISSING_TARGET_DEVICE]

    async def test_install_uses_temp_artifact(self, command_runner):
        temp_directory = TempDirectoryManager()
        node = IOSInstallAppNode(command_runner, temp_directory)
        patch = await node.execute({**IOS, "targetDevice": "iPhone 16"})

        assert patch == {}
        assert command_runner.calls[0]["args"] == [
            "simctl",
            "install",
            "iPhone 16",
            str(temp_directory.get_app_artifact_path("App")),
        ]
        temp_directory.cleanup()

    async def test_launch_reads_bundle_id(self, tmp_path, command_runner):
        (tmp_path / "App.xcodeproj").mkdir()
        (tmp_path / "App.xcodeproj" / "project.pbxproj").write_text("PRODUCT_BUNDLE_IDENTIFIER = com.acme.App;")
        state = {**IOS, "targetDevice": "iPhone 16", "projectPath": str(tmp_path)}
        patch = await IOSLaunchAppNode(command_runner).execute(state)

        assert patch == {"deploymentStatus": "success"}
        assert command_runner.lines == ["xcrun simctl launch iPhone 16 com.acme.App"]

    async def test_launch_bundle_id_error_is_fatal(self, tmp_path, command_runner):
        state = {**IOS, "targetDevice": "iPhone 16", "projectPath": str(tmp_path)}
        patch = await IOSLaunchAppNode(command_runner).execute(state)

        assert patch["workflowFatalErrorMessages"][0].startswith("Failed to launch iOS app: No .xcodeproj")
        assert command_runner.calls == []


class TestRunnerExceptions:
    """Any exception raised by the command runner becomes a fatal-error patch."""

    @pytest.fixture
    def crashing_runner(self) -> FakeCommandRunner:
        return FakeCommandRunner().on("", RuntimeError("adb daemon crashed"))

    @pytest.mark.parametrize(
        ("node_cls", "state", "message"),
        [
            (AndroidSelectEmulatorNode, ANDROID, "Failed to select Android emulator: adb daemon crashed"),
            (AndroidCreateEmulatorNode, ANDROID, "Failed to create Android emulator: adb daemon crashed"),
            (
                AndroidStartEmulatorNode,
                {**ANDROID, "androidEmulatorName": "Pixel"},
                "Failed to start Android emulator: adb daemon crashed",
            ),
            (
                IOSSelectSimulatorNode,
                IOS,
                "Failed to select iOS simulator: adb daemon crashed. Please ensure Xcode is properly installed.",
            ),
            (
                IOSBootSimulatorNode,
                {**IOS, "targetDevice": "iPhone 16"},
                "Failed to boot iOS simulator: adb daemon crashed",
            ),
            (
                IOSInstallAppNode,
                {**IOS, "targetDevice": "iPhone 16"},
                "Failed to install iOS app: adb daemon crashed",
            ),
        ],
    )
    async def test_node_returns_fatal_patch(self, node_cls, state, message, crashing_runner):
        patch = await node_cls(crashing_runner).execute(state)
        assert patch == {"workflowFatalErrorMessages": [message]}

    async def test_android_launch(self, tmp_path, crashing_runner):
        main = tmp_path / "app" / "src" / "main"
        main.mkdir(parents=True)
        (main / "AndroidManifest.xml").write_text(
            '<activity android:name=".MainActivity"><intent-filter>'
            '<category android:name="android.intent.category.LAUNCHER" /></intent-filter></activity>'
        )
        state = {**ANDROID, "androidEmulatorName": "Pixel", "projectPath": str(tmp_path)}
        patch = await AndroidLaunchAppNode(crashing_runner).execute(state)

        assert patch == {"workflowFatalErrorMessages": ["Failed to launch Android app: adb daemon crashed"]}

    async def test_ios_launch(self, tmp_path, crashing_runner):
        (tmp_path / "App.xcodeproj").mkdir()
        (tmp_path / "App.xcodeproj" / "project.pbxproj").write_text("PRODUCT_BUNDLE_IDENTIFIER = com.acme.App;")
        state = {**IOS, "targetDevice": "iPhone 16", "projectPath": str(tmp_path)}
        patch = await IOSLaunchAppNode(crashing_runner).execute(state)

        assert patch == {"workflowFatalErrorMessages": ["Failed to launch iOS app: adb daemon crashed"]}

    async def test_simulator_app_failure_is_not_fatal(self):
        booted = {"devices": {"iOS-18-0": [{"name": "iPhone 16", "udid": "A", "state": "Booted"}]}}
        runner = (
            FakeCommandRunner()
            .on("xcrun simctl list", ok(json.dumps(booted)))
            .on("open -a Simulator", RuntimeError("no window server"))
        )
        patch = await IOSBootSimulatorNode(runner).execute({**IOS, "targetDevice": "iPhone 16"})
        assert patch == {}
