"""
Prerequisite command checks.

Each strategy names commands that must already exist before anything is
installed. Missing ones are fatal; the installer never tries to install
a privilege-escalation helper or package manager itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .checks import dependency_available
from .common import vlog
from .errors import ErrorCode, InstallError


# Hints shown when a prerequisite is missing
REMEDIATIONS: dict[str, str] = {
    "sudo": "install sudo with your system's package manager",
    "brew or port": "install Homebrew (https://brew.sh) or MacPorts (https://www.macports.org)",
    "apt": "use a jailbreak that ships APT (Sileo, Zebra or Cydia)",
}


@dataclass
class PrerequisiteResult:
    """Result of a prerequisite check."""

    required: list[str]
    installed: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def satisfied(self) -> bool:
        return not self.missing


def is_tool_installed(name: str, verbose: bool = False) -> bool:
    """
    Check if a command is available on the search path.

    Args:
        name: Command name
        verbose: Enable verbose logging

    Returns:
        True if the command resolves
    """
    if dependency_available(name):
        vlog(f"Found {name}", verbose)
        return True
    vlog(f"{name} not found in PATH", verbose)
    return False


def check_prerequisites(
    commands: Sequence[str],
    alternatives: Sequence[Sequence[str]] = (),
    verbose: bool = False,
) -> PrerequisiteResult:
    """
    Check which prerequisites are present.

    Args:
        commands: Commands that must all be present
        alternatives: Groups where any one member is enough (e.g. brew or port)
        verbose: Enable verbose logging

    Returns:
        PrerequisiteResult; a missing group is reported as "a or b"
    """
    result = PrerequisiteResult(required=list(commands))

    for command in commands:
        if is_tool_installed(command, verbose):
            result.installed.append(command)
        else:
            result.missing.append(command)

    for group in alternatives:
        label = " or ".join(group)
        result.required.append(label)
        found = [command for command in group if is_tool_installed(command, verbose)]
        if found:
            result.installed.append(found[0])
        else:
            result.missing.append(label)

    return result


def format_prerequisite_error(result: PrerequisiteResult) -> str:
    """Human-readable message naming the missing tools."""
    if result.satisfied:
        return ""
    return f"Missing required tools: {', '.join(result.missing)}"


def ensure_prerequisites(
    commands: Sequence[str],
    alternatives: Sequence[Sequence[str]] = (),
    verbose: bool = False,
) -> PrerequisiteResult:
    """
    Check prerequisites and raise if any is missing.

    Raises:
        InstallError: DEPENDENCY_ISSUE naming every missing tool
    """
    result = check_prerequisites(commands, alternatives, verbose)
    if not result.satisfied:
        hints = [REMEDIATIONS[name] for name in result.missing if name in REMEDIATIONS]
        raise InstallError(
            ErrorCode.DEPENDENCY_ISSUE,
            format_prerequisite_error(result),
            remediation="; ".join(hints) or None,
        )
    return result
