"""Async command runner - executes external CLI tools (sf, xcrun, adb)."""

import asyncio
import logging
import os
import signal
import time
from collections.abc import Mapping

from mobile_native_workflow.domain.ports.command_runner import (
    CommandResult,
    CommandSpawnError,
    ProgressReporter,
)

logger = logging.getLogger(__name__)


def _signal_name(returncode: int | None) -> str | None:
    if returncode is None or returncode >= 0:
        return None
    try:
        return signal.Signals(-returncode).name
    except ValueError:
        return f"SIG{-returncode}"


class AsyncCommandRunner:
    """CommandRunner backed by asyncio subprocesses (no shell)."""

    def __init__(self, default_timeout: float = 60.0) -> None:
        self._default_timeout = default_timeout

    async def execute(
        self,
        command: str,
        args: list[str],
        *,
        timeout: float | None = None,
        cwd: str | None = None,
        command_name: str | None = None,
        progress_reporter: ProgressReporter | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        """Run command with args.

        Non-zero exit, signal termination and timeout all produce a failed
        CommandResult. Raises CommandSpawnError if the process cannot start.
        """
        name = command_name or command
        cmd_timeout = timeout or self._default_timeout
        proc_env = {**os.environ, **env} if env else None

        logger.debug("Running %s: %s %s (timeout=%ss)", name, command, " ".join(args), cmd_timeout)
        if progress_reporter is not None:
            progress_reporter.report(0, message=f"Starting: {name}")

        started = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                command,
                *args,
                cwd=cwd,
                env=proc_env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise CommandSpawnError(f"Failed to start {name}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=cmd_timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            duration = time.monotonic() - started
            logger.warning("Command timed out after %ss: %s", cmd_timeout, name)
            if progress_reporter is not None:
                progress_reporter.report(100, message=f"Timed out: {name}")
            return CommandResult(
                success=False,
                stderr=f"Command timed out after {cmd_timeout}s",
                exit_code=proc.returncode,
                signal="SIGKILL",
                duration=duration,
            )

        duration = time.monotonic() - started
        result = CommandResult(
            success=proc.returncode == 0,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
            exit_code=proc.returncode,
            signal=_signal_name(proc.returncode),
            duration=duration,
        )
        if result.success:
            logger.debug("%s completed in %.1fs", name, duration)
        else:
            logger.warning("%s failed (exit=%s) in %.1fs", name, proc.returncode, duration)
        if progress_reporter is not None:
            progress_reporter.report(100, message=f"{'Completed' if result.success else 'Failed'}: {name}")
        return result
