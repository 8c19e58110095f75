"""Subprocess execution with Result-based error handling.

``CommandRunner`` is the seam between provisioning logic and the host: the
real ``SubprocessRunner`` shells out, ``MockProcessRunner`` replays canned
outputs in tests.

Usage:
    runner = SubprocessRunner()
    match runner.run(["sccache", "--version"]):
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"Failed: {error}")
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from ciprov.core.result import Err, Ok, Result

__all__ = [
    "ProcessError",
    "CommandRunner",
    "SubprocessRunner",
    "MockProcessRunner",
]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code (-1 when the command could not be started).
        stdout: Standard output (may be empty).
        stderr: Standard error, or the OS error text.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


@runtime_checkable
class CommandRunner(Protocol):
    """Protocol for running external commands."""

    def run(self, cmd: list[str], *, cwd: Path | None = None) -> Result[str, ProcessError]:
        """Run ``cmd`` capturing output. Returns Ok(stdout) on exit 0."""
        ...

    def run_live(self, cmd: list[str], *, cwd: Path | None = None) -> Result[None, ProcessError]:
        """Run ``cmd`` with output streamed to the terminal."""
        ...


class SubprocessRunner:
    """Runs commands with ``subprocess.run``.

    No timeout is applied: a ``cargo install`` legitimately takes minutes and
    the CI job timeout is the outer bound.
    """

    def run(self, cmd: list[str], *, cwd: Path | None = None) -> Result[str, ProcessError]:
        try:
            proc = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as e:
            return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

        if proc.returncode != 0:
            return Err(
                ProcessError(
                    command=tuple(cmd),
                    returncode=proc.returncode,
                    stdout=proc.stdout,
                    stderr=proc.stderr,
                )
            )
        return Ok(proc.stdout)

    def run_live(self, cmd: list[str], *, cwd: Path | None = None) -> Result[None, ProcessError]:
        try:
            proc = subprocess.run(cmd, cwd=str(cwd) if cwd else None, check=False)
        except OSError as e:
            return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

        if proc.returncode != 0:
            return Err(
                ProcessError(command=tuple(cmd), returncode=proc.returncode, stdout="", stderr="")
            )
        return Ok(None)


class MockProcessRunner:
    """Command runner for tests.

    Responses are keyed by the full command tuple. A command with no response
    behaves like a missing executable.

    Usage:
        runner = MockProcessRunner()
        runner.set_output(["sccache", "--version"], "sccache 0.2.15\\n")
        runner.set_failure(["cargo", "make", "--version"], returncode=101)
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, ...], str | ProcessError] = {}
        self.calls: list[tuple[str, ...]] = []

    def set_output(self, cmd: list[str], stdout: str) -> None:
        self._responses[tuple(cmd)] = stdout

    def set_failure(self, cmd: list[str], *, returncode: int = 1, stderr: str = "") -> None:
        self._responses[tuple(cmd)] = ProcessError(
            command=tuple(cmd), returncode=returncode, stdout="", stderr=stderr
        )

    def _lookup(self, cmd: list[str]) -> Result[str, ProcessError]:
        key = tuple(cmd)
        self.calls.append(key)
        response = self._responses.get(key)
        if response is None:
            return Err(
                ProcessError(command=key, returncode=-1, stdout="", stderr="not found (mock)")
            )
        if isinstance(response, ProcessError):
            return Err(response)
        return Ok(response)

    def run(self, cmd: list[str], *, cwd: Path | None = None) -> Result[str, ProcessError]:
        return self._lookup(cmd)

    def run_live(self, cmd: list[str], *, cwd: Path | None = None) -> Result[None, ProcessError]:
        result = self._lookup(cmd)
        if isinstance(result, Err):
            return result
        return Ok(None)
