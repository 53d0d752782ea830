"""iOS simulator helpers built on `xcrun simctl`."""

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ValidationError

from mobile_native_workflow.domain.ports.command_runner import (
    CommandRunner,
    CommandSpawnError,
    ProgressReporter,
)

logger = logging.getLogger(__name__)

LIST_TIMEOUT = 30.0
BOOT_TIMEOUT = 60.0
INSTALL_TIMEOUT = 120.0
LAUNCH_TIMEOUT = 30.0
PROBE_TIMEOUT = 10.0

READY_POLL_INTERVAL = 2.0
READY_MAX_WAIT = 120.0
POST_INSTALL_DELAY = 2.0

ALREADY_BOOTED = "Unable to boot device in current state: Booted"
RUNTIME_VERSION_PATTERN = re.compile(r"iOS-(\d+)-(\d+)")
BUNDLE_ID_PATTERN = re.compile(r"""PRODUCT_BUNDLE_IDENTIFIER\s*=\s*["']?([^"'\s;]+)["']?;""")


class SimulatorDevice(BaseModel):
    name: str
    udid: str
    state: str
    isAvailable: bool | None = None
    runtimeIdentifier: str = ""
    iosVersion: str | None = None


class SimctlDevicesOutput(BaseModel):
    devices: dict[str, list[SimulatorDevice]]


class BundleIdError(Exception):
    """PRODUCT_BUNDLE_IDENTIFIER could not be resolved from the Xcode project."""


@dataclass
class SimulatorListResult:
    success: bool
    devices: list[SimulatorDevice]
    error: str | None = None


@dataclass
class SimulatorOperationResult:
    success: bool
    error: str | None = None


def extract_ios_version(runtime_identifier: str) -> str | None:
    """com.apple.CoreSimulator.SimRuntime.iOS-18-0 -> 18.0"""
    match = RUNTIME_VERSION_PATTERN.search(runtime_identifier)
    return f"{match.group(1)}.{match.group(2)}" if match else None


def _version_key(version: str | None) -> tuple[int, ...]:
    if not version:
        return (0,)
    return tuple(int(part) for part in version.split(".") if part.isdigit())


def parse_simctl_devices(output: str) -> list[SimulatorDevice]:
    """Flatten `simctl list devices --json` output, tagging each device with its runtime."""
    try:
        parsed = SimctlDevicesOutput.model_validate(json.loads(output))
    except (ValueError, ValidationError) as e:
        logger.debug("Failed to parse simctl device list: %s", e)
        return []

    devices = []
    for runtime, runtime_devices in parsed.devices.items():
        version = extract_ios_version(runtime)
        for device in runtime_devices:
            devices.append(device.model_copy(update={"runtimeIdentifier": runtime, "iosVersion": version}))
    return devices


async def fetch_simulator_devices(
    command_runner: CommandRunner,
    *,
    timeout: float = LIST_TIMEOUT,
    progress_reporter: ProgressReporter | None = None,
) -> SimulatorListResult:
    result = await command_runner.execute(
        "xcrun",
        ["simctl", "list", "devices", "available", "--json"],
        timeout=timeout,
        command_name="List iOS simulators",
        progress_reporter=progress_reporter,
    )
    if not result.success:
        error = result.stderr.strip() or f"Failed to list simulators: exit code {result.exit_code}"
        return SimulatorListResult(success=False, devices=[], error=error)
    return SimulatorListResult(success=True, devices=parse_simctl_devices(result.stdout))


def select_best_simulator(devices: list[SimulatorDevice]) -> SimulatorDevice | None:
    """A booted simulator if there is one, else the newest iOS version (then highest name)."""
    if not devices:
        return None
    for device in devices:
        if device.state == "Booted":
            return device
    return max(devices, key=lambda d: (_version_key(d.iosVersion), d.name))


async def boot_simulator(
    command_runner: CommandRunner,
    *,
    device_name: str,
    progress_reporter: ProgressReporter | None = None,
) -> SimulatorOperationResult:
    result = await command_runner.execute(
        "xcrun",
        ["simctl", "boot", device_name],
        timeout=BOOT_TIMEOUT,
        command_name="Boot iOS simulator",
        progress_reporter=progress_reporter,
    )
    if result.success or ALREADY_BOOTED in result.stderr:
        return SimulatorOperationResult(success=True)
    error = result.stderr.strip() or f"exit code {result.exit_code}"
    return SimulatorOperationResult(
        success=False, error=f'Failed to boot iOS simulator "{device_name}": {error}'
    )


async def _is_responsive(command_runner: CommandRunner, device_name: str) -> bool:
    try:
        result = await command_runner.execute(
            "xcrun",
            ["simctl", "spawn", device_name, "launchctl", "print", "system"],
            timeout=PROBE_TIMEOUT,
            command_name="Probe iOS simulator",
        )
    except CommandSpawnError:
        return False
    return result.success


async def wait_for_simulator_ready(
    command_runner: CommandRunner,
    *,
    device_name: str,
    max_wait: float = READY_MAX_WAIT,
    poll_interval: float = READY_POLL_INTERVAL,
) -> SimulatorOperationResult:
    """Poll until the device is Booted and accepts commands."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + max_wait
    last_error = None
    while loop.time() < deadline:
        listing = await fetch_simulator_devices(command_runner, timeout=PROBE_TIMEOUT)
        if not listing.success:
            last_error = listing.error
        else:
            device = next((d for d in listing.devices if d.name == device_name), None)
            if device is not None and device.state == "Booted" and await _is_responsive(command_runner, device_name):
                return SimulatorOperationResult(success=True)
        await asyncio.sleep(poll_interval)

    return SimulatorOperationResult(
        success=False,
        error=(
            f'Simulator "{device_name}" did not become ready within {max_wait:.0f} seconds. '
            f"Last error: {last_error or 'Unknown'}"
        ),
    )


async def open_simulator_app(command_runner: CommandRunner) -> None:
    """Bring up the Simulator GUI. Failure is logged only; the device is already booted."""
    try:
        result = await command_runner.execute(
            "open", ["-a", "Simulator"], timeout=PROBE_TIMEOUT, command_name="Open Simulator app"
        )
    except Exception as e:
        logger.warning("Error opening Simulator.app: %s", e)
        return
    if not result.success:
        logger.warning("Failed to open Simulator.app (exit code %s): %s", result.exit_code, result.stderr.strip())


async def install_ios_app(
    command_runner: CommandRunner,
    *,
    device_name: str,
    app_path: Path,
    progress_reporter: ProgressReporter | None = None,
) -> SimulatorOperationResult:
    result = await command_runner.execute(
        "xcrun",
        ["simctl", "install", device_name, str(app_path)],
        timeout=INSTALL_TIMEOUT,
        command_name="Install iOS app",
        progress_reporter=progress_reporter,
    )
    if not result.success:
        error = result.stderr.strip() or f"Failed to install app: exit code {result.exit_code}"
        return SimulatorOperationResult(
            success=False, error=f'Failed to install iOS app to simulator "{device_name}": {error}'
        )
    return SimulatorOperationResult(success=True)


async def launch_ios_app(
    command_runner: CommandRunner,
    *,
    device_name: str,
    bundle_id: str,
    post_install_delay: float = 0.0,
    progress_reporter: ProgressReporter | None = None,
) -> SimulatorOperationResult:
    if post_install_delay > 0:
        await asyncio.sleep(post_install_delay)
    result = await command_runner.execute(
        "xcrun",
        ["simctl", "launch", device_name, bundle_id],
        timeout=LAUNCH_TIMEOUT,
        command_name="Launch iOS app",
        progress_reporter=progress_reporter,
    )
    if not result.success:
        error = result.stderr.strip() or f"Failed to launch app: exit code {result.exit_code}"
        return SimulatorOperationResult(
            success=False, error=f'Failed to launch iOS app on simulator "{device_name}": {error}'
        )
    return SimulatorOperationResult(success=True)


def read_bundle_id(project_path: str) -> str:
    """PRODUCT_BUNDLE_IDENTIFIER from the first *.xcodeproj under project_path.

    Raises BundleIdError when the project file is missing or the identifier
    still contains build-setting variables.
    """
    try:
        pbxproj = next(
            (p / "project.pbxproj" for p in sorted(Path(project_path).iterdir()) if p.suffix == ".xcodeproj"),
            None,
        )
    except OSError as e:
        raise BundleIdError(f"Failed to read project directory at {project_path}: {e}") from e
    if pbxproj is None:
        raise BundleIdError(f"No .xcodeproj directory found in project path: {project_path}")

    try:
        content = pbxproj.read_text(encoding="utf-8")
    except OSError as e:
        raise BundleIdError(f"Failed to read project.pbxproj file at {pbxproj}: {e}") from e

    match = BUNDLE_ID_PATTERN.search(content)
    if not match:
        raise BundleIdError(f"Could not find PRODUCT_BUNDLE_IDENTIFIER in project file: {pbxproj}")
    bundle_id = match.group(1)
    if "${" in bundle_id or "$(" in bundle_id:
        raise BundleIdError(
            f"Bundle ID contains unresolved variables in project file {pbxproj}: {bundle_id}. "
            "The bundle identifier must be fully resolved."
        )
    return bundle_id
