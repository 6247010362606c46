"""
External command execution.

Every mutating action the installer takes (package installs, git, curl,
tar, sudo) goes through execute_step so callers can swap in a recorder.
"""

from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from typing import Callable

from .common import vlog


@dataclass(frozen=True)
class InstallStep:
    """
    Single external command.

    Attributes:
        description: Human-readable description of the step
        command: Command tuple to execute
        requires_sudo: Whether this step requires sudo/root privileges
        capture_output: Capture stdout/stderr instead of streaming them
    """
    description: str
    command: tuple[str, ...]
    requires_sudo: bool = False
    capture_output: bool = False

    @property
    def argv(self) -> list[str]:
        command = list(self.command)
        if self.requires_sudo:
            command = ["sudo"] + command
        return command

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "description": self.description,
            "command": list(self.command),
            "requires_sudo": self.requires_sudo,
        }


@dataclass(frozen=True)
class CommandResult:
    """
    Result of executing a single command.

    Attributes:
        step: The step that was executed
        exit_code: Process exit code (127 if the command was not found)
        stdout: Captured standard output ("" when streamed)
        stderr: Captured standard error ("" when streamed)
        duration_seconds: Time taken to execute step
        error_message: Human-readable error message if failed
    """
    step: InstallStep
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_seconds: float = 0.0
    error_message: str | None = None

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "step": self.step.to_dict(),
            "success": self.success,
            "exit_code": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "duration_seconds": self.duration_seconds,
            "error_message": self.error_message,
        }


Runner = Callable[[InstallStep], CommandResult]


def execute_step(step: InstallStep, verbose: bool = False) -> CommandResult:
    """
    Execute a single step and wait for it to finish.

    No timeout is imposed; package managers and downloads manage their own.

    Args:
        step: Step to execute
        verbose: Enable verbose logging

    Returns:
        CommandResult with execution outcome
    """
    start_time = time.time()
    command = step.argv

    vlog(f"Executing: {' '.join(command)}", verbose)

    try:
        result = subprocess.run(
            command,
            capture_output=step.capture_output,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        return CommandResult(
            step=step,
            exit_code=127,
            duration_seconds=time.time() - start_time,
            error_message=f"Command not found: {command[0]}",
        )
    except OSError as e:
        return CommandResult(
            step=step,
            exit_code=126,
            duration_seconds=time.time() - start_time,
            error_message=f"Could not execute {command[0]}: {e}",
        )

    error_msg = None
    if result.returncode != 0:
        error_msg = f"Command failed with exit code {result.returncode}"
        if result.stderr:
            error_msg += f": {result.stderr.strip()[:200]}"

    return CommandResult(
        step=step,
        exit_code=result.returncode,
        stdout=result.stdout or "",
        stderr=result.stderr or "",
        duration_seconds=time.time() - start_time,
        error_message=error_msg,
    )
