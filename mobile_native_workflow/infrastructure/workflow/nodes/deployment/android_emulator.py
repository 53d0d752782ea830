"""Android emulator and app helpers built on the sf lightning local device commands.

Every helper takes a CommandRunner so nodes and tests can swap the process
layer. Helpers report expected failures through their return values; only
CommandSpawnError escapes.
"""

import asyncio
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from mobile_native_workflow.domain.ports.command_runner import CommandRunner, ProgressReporter

logger = logging.getLogger(__name__)

LIST_TIMEOUT = 30.0
CREATE_TIMEOUT = 300.0
START_TIMEOUT = 120.0
INSTALL_TIMEOUT = 300.0
LAUNCH_TIMEOUT = 30.0
ADB_TIMEOUT = 10.0

BOOT_POLL_INTERVAL = 3.0
BOOT_MAX_WAIT = 120.0

APPLICATION_ID_PATTERN = re.compile(r"""applicationId\s*[=:]\s*["']([^"']+)["']""")
ACTIVITY_BLOCK_PATTERN = re.compile(r"(<activity\b[^>]*?)(?:/>|>(.*?)</activity>)", re.DOTALL)
ACTIVITY_NAME_PATTERN = re.compile(r"""android:name\s*=\s*["']([^"']+)["']""")
LAUNCHER_CATEGORY = "android.intent.category.LAUNCHER"


@dataclass
class EmulatorInfo:
    """One Android virtual device as reported by the device list command."""

    name: str
    api_level: int | None = None
    is_running: bool = False
    is_compatible: bool = True


@dataclass
class EmulatorListResult:
    success: bool
    emulators: list[EmulatorInfo] = field(default_factory=list)
    error: str | None = None


@dataclass
class EmulatorOperationResult:
    success: bool
    emulator_name: str | None = None
    error: str | None = None


def _error_text(stderr: str, stdout: str, exit_code: int | None) -> str:
    return stderr.strip() or stdout.strip() or f"exit code {exit_code}"


def _parse_api_level(os_version: object) -> int | None:
    # osVersion is either a display string or {"major": .., "minor": .., "patch": ..}
    if isinstance(os_version, dict) and isinstance(os_version.get("major"), int):
        return os_version["major"]
    return None


def parse_emulator_list(output: str, min_sdk: int | None = None) -> list[EmulatorInfo]:
    """Parse `sf force lightning local device list -p android --json` output."""
    data = json.loads(output)
    devices = (data.get("outputContent") if isinstance(data, dict) else None) or []
    emulators = []
    for device in devices:
        if not isinstance(device, dict) or not device.get("id"):
            continue
        api_level = _parse_api_level(device.get("osVersion"))
        emulators.append(
            EmulatorInfo(
                name=device["id"],
                api_level=api_level,
                # The device list never reports whether an emulator is running
                is_running=False,
                is_compatible=api_level is None or min_sdk is None or api_level >= min_sdk,
            )
        )
    return emulators


async def fetch_android_emulators(
    command_runner: CommandRunner,
    *,
    min_sdk: int | None = None,
    progress_reporter: ProgressReporter | None = None,
) -> EmulatorListResult:
    result = await command_runner.execute(
        "sf",
        ["force", "lightning", "local", "device", "list", "-p", "android", "--json", "-o", "all"],
        timeout=LIST_TIMEOUT,
        command_name="List Android devices",
        progress_reporter=progress_reporter,
    )
    if not result.success:
        return EmulatorListResult(
            success=False, error=f"Failed to list Android devices: exit code {result.exit_code}"
        )
    try:
        emulators = parse_emulator_list(result.stdout, min_sdk)
    except (ValueError, AttributeError) as e:
        return EmulatorListResult(success=False, error=f"Failed to parse device list JSON: {e}")
    logger.debug("Found %d Android emulator(s)", len(emulators))
    return EmulatorListResult(success=True, emulators=emulators)


def select_best_emulator(emulators: list[EmulatorInfo]) -> EmulatorInfo | None:
    """Pick the emulator to deploy to.

    Among compatible emulators a running one wins, otherwise the highest API
    level. With no compatible emulator the same rule applies to all of them.
    """
    if not emulators:
        return None

    def rank(emulator: EmulatorInfo) -> tuple[bool, int]:
        return emulator.is_running, emulator.api_level if emulator.api_level is not None else -1

    compatible = [e for e in emulators if e.is_compatible]
    return max(compatible or emulators, key=rank)


def sanitize_emulator_name(project_name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", project_name)


async def create_android_emulator(
    command_runner: CommandRunner,
    *,
    emulator_name: str,
    api_level: str,
    project_path: str | None = None,
    progress_reporter: ProgressReporter | None = None,
) -> EmulatorOperationResult:
    result = await command_runner.execute(
        "sf",
        [
            "force", "lightning", "local", "device", "create",
            "-n", emulator_name, "-d", "pixel", "-p", "android", "-l", api_level,
        ],
        timeout=CREATE_TIMEOUT,
        cwd=project_path,
        command_name="Create Android emulator",
        progress_reporter=progress_reporter,
    )
    if not result.success:
        error = _error_text(result.stderr, result.stdout, result.exit_code)
        return EmulatorOperationResult(
            success=False, error=f'Failed to create Android emulator "{emulator_name}": {error}'
        )
    logger.info("Created Android emulator %s", emulator_name)
    return EmulatorOperationResult(success=True, emulator_name=emulator_name)


async def start_android_emulator(
    command_runner: CommandRunner,
    *,
    emulator_name: str,
    progress_reporter: ProgressReporter | None = None,
) -> EmulatorOperationResult:
    result = await command_runner.execute(
        "sf",
        ["force", "lightning", "local", "device", "start", "-p", "android", "-t", emulator_name],
        timeout=START_TIMEOUT,
        command_name="Start Android emulator",
        progress_reporter=progress_reporter,
    )
    if result.success:
        return EmulatorOperationResult(success=True, emulator_name=emulator_name)

    stderr, stdout = result.stderr.lower(), result.stdout.lower()
    if "already running" in stderr or "already running" in stdout or "already booted" in stderr:
        logger.debug("Emulator %s is already running", emulator_name)
        return EmulatorOperationResult(success=True, emulator_name=emulator_name)

    error = _error_text(result.stderr, result.stdout, result.exit_code)
    return EmulatorOperationResult(
        success=False, error=f'Failed to start Android emulator "{emulator_name}": {error}'
    )


async def wait_for_emulator_ready(
    command_runner: CommandRunner,
    *,
    emulator_name: str,
    max_wait: float = BOOT_MAX_WAIT,
    poll_interval: float = BOOT_POLL_INTERVAL,
) -> EmulatorOperationResult:
    """Block until the emulator reports sys.boot_completed=1 or max_wait elapses."""
    await command_runner.execute(
        "adb", ["wait-for-device"], timeout=max_wait, command_name="adb wait-for-device"
    )

    loop = asyncio.get_running_loop()
    deadline = loop.time() + max_wait
    while True:
        result = await command_runner.execute(
            "adb",
            ["shell", "getprop", "sys.boot_completed"],
            timeout=ADB_TIMEOUT,
            command_name="adb getprop sys.boot_completed",
        )
        if result.success and result.stdout.strip() == "1":
            logger.info("Emulator %s is ready", emulator_name)
            return EmulatorOperationResult(success=True, emulator_name=emulator_name)
        if loop.time() + poll_interval > deadline:
            break
        await asyncio.sleep(poll_interval)

    return EmulatorOperationResult(
        success=False,
        error=f'Emulator did not become ready within {max_wait:.0f} seconds: "{emulator_name}"',
    )


def get_apk_path(project_path: str, build_type: str = "debug") -> Path:
    return Path(project_path) / "app" / "build" / "outputs" / "apk" / build_type / f"app-{build_type}.apk"


async def install_android_app(
    command_runner: CommandRunner,
    *,
    device_name: str,
    apk_path: Path,
    project_path: str,
    progress_reporter: ProgressReporter | None = None,
) -> EmulatorOperationResult:
    result = await command_runner.execute(
        "sf",
        ["force", "lightning", "local", "app", "install", "-p", "android", "-t", device_name, "-a", str(apk_path)],
        timeout=INSTALL_TIMEOUT,
        cwd=project_path,
        command_name="Install Android app",
        progress_reporter=progress_reporter,
    )
    if not result.success:
        error = _error_text(result.stderr, result.stdout, result.exit_code)
        return EmulatorOperationResult(success=False, error=f"Failed to install Android app: {error}")
    return EmulatorOperationResult(success=True, emulator_name=device_name)


async def launch_android_app(
    command_runner: CommandRunner,
    *,
    device_name: str,
    application_id: str,
    activity_class: str,
    progress_reporter: ProgressReporter | None = None,
) -> EmulatorOperationResult:
    result = await command_runner.execute(
        "sf",
        [
            "force", "lightning", "local", "app", "launch",
            "-p", "android", "-t", device_name, "-i", f"{application_id}/{activity_class}",
        ],
        timeout=LAUNCH_TIMEOUT,
        command_name="Launch Android app",
        progress_reporter=progress_reporter,
    )
    if not result.success:
        error = _error_text(result.stderr, result.stdout, result.exit_code)
        return EmulatorOperationResult(
            success=False, error=f'Failed to launch Android app "{application_id}": {error}'
        )
    return EmulatorOperationResult(success=True, emulator_name=device_name)


def read_application_id(project_path: str) -> str | None:
    """applicationId from app/build.gradle, then app/build.gradle.kts."""
    for filename in ("build.gradle", "build.gradle.kts"):
        gradle_file = Path(project_path) / "app" / filename
        try:
            content = gradle_file.read_text(encoding="utf-8")
        except OSError:
            continue
        match = APPLICATION_ID_PATTERN.search(content)
        if match:
            return match.group(1)
    logger.debug("No applicationId found under %s", project_path)
    return None


def read_launcher_activity(project_path: str) -> str | None:
    """Class name of the activity declaring the LAUNCHER category."""
    manifest = Path(project_path) / "app" / "src" / "main" / "AndroidManifest.xml"
    try:
        content = manifest.read_text(encoding="utf-8")
    except OSError as e:
        logger.debug("Cannot read %s: %s", manifest, e)
        return None

    for block in ACTIVITY_BLOCK_PATTERN.finditer(content):
        opening_tag, body = block.group(1), block.group(2) or ""
        if LAUNCHER_CATEGORY not in body:
            continue
        name = ACTIVITY_NAME_PATTERN.search(opening_tag)
        if name:
            return name.group(1)
    return None
