"""Command Runner Port - interface for running external OS commands."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol


class CommandSpawnError(Exception):
    """The command could not be started at all (missing executable, bad cwd)."""


@dataclass
class CommandResult:
    """Result of command execution."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    exit_code: int | None = 0
    signal: str | None = None
    duration: float = 0.0  # seconds


class ProgressReporter(Protocol):
    """Receives progress updates from long-running commands."""

    def report(self, progress: float, total: float = 100, message: str | None = None) -> None:
        """Report progress (0..total) with an optional status message."""
        ...


class CommandRunner(Protocol):
    """Interface for running external commands with timeout and cwd control.

    Ordinary failures (non-zero exit, timeout, signal) are reported through
    CommandResult.success; only CommandSpawnError is raised.
    """

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
        """Run command with args and return its result."""
        ...
