"""Pytest configuration and shared fixtures."""

from collections import deque
from typing import Any

import pytest

from mobile_native_workflow.domain.entities.tool_metadata import MCPToolInvocationData
from mobile_native_workflow.domain.ports.command_runner import CommandResult


class FakeToolExecutor:
    """ToolExecutor returning queued results and recording every invocation."""

    def __init__(self, *results: Any) -> None:
        self.results = deque(results)
        self.invocations: list[MCPToolInvocationData] = []

    def queue(self, *results: Any) -> None:
        self.results.extend(results)

    def execute(self, invocation: MCPToolInvocationData) -> Any:
        self.invocations.append(invocation)
        if not self.results:
            raise AssertionError(f"Unexpected tool invocation: {invocation.metadata.tool_id}")
        return self.results.popleft()

    @property
    def tool_ids(self) -> list[str]:
        return [invocation.metadata.tool_id for invocation in self.invocations]


class FakeCommandRunner:
    """CommandRunner answering from scripted results.

    Responses are matched by the first entry whose key is a prefix of
    "<command> <args...>"; an exception value is raised instead of returned.
    Unmatched commands succeed with empty output.
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.calls: list[dict[str, Any]] = []

    def on(self, prefix: str, *results: Any) -> "FakeCommandRunner":
        self.responses[prefix] = deque(results) if len(results) > 1 else results[0]
        return self

    async def execute(self, command: str, args: list[str], **kwargs: Any) -> CommandResult:
        line = " ".join([command, *args])
        self.calls.append({"command": command, "args": list(args), "line": line, **kwargs})
        for prefix, response in self.responses.items():
            if not line.startswith(prefix):
                continue
            if isinstance(response, deque):
                response = response.popleft() if len(response) > 1 else response[0]
            if isinstance(response, Exception):
                raise response
            return response
        return CommandResult(success=True)

    @property
    def lines(self) -> list[str]:
        return [call["line"] for call in self.calls]


def ok(stdout: str = "") -> CommandResult:
    return CommandResult(success=True, stdout=stdout)


def failed(stderr: str = "", exit_code: int = 1, stdout: str = "") -> CommandResult:
    return CommandResult(success=False, stdout=stdout, stderr=stderr, exit_code=exit_code)


@pytest.fixture
def tool_executor() -> FakeToolExecutor:
    return FakeToolExecutor()


@pytest.fixture
def command_runner() -> FakeCommandRunner:
    return FakeCommandRunner()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep ~/.magen and PROJECT_PATH lookups inside tmp_path."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("PROJECT_PATH", raising=False)
    return home
