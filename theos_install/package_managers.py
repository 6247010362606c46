"""
Package manager registry.

The installer only needs each manager's invocation contract: how to
refresh indexes, how to install a list of packages, and how to ask
(read-only) whether a package is already installed. Exit status 0 is
success for all of them.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Iterable, Sequence

from .common import vlog
from .installer import InstallStep


UNKNOWN = "unknown"


@dataclass(frozen=True)
class PackageManager:
    """
    Package manager definition.

    Attributes:
        name: Identifier and executable name (e.g., "apt", "brew")
        display_name: Human-readable name
        install_command: Command prefix for installing packages
        query_command_template: Read-only check for one package ({package} placeholder)
        refresh_command: Command to refresh package indexes (empty if not needed)
        requires_sudo: Whether install/refresh run through sudo
    """
    name: str
    display_name: str
    install_command: tuple[str, ...]
    query_command_template: tuple[str, ...]
    refresh_command: tuple[str, ...] = ()
    requires_sudo: bool = True

    def install_step(self, packages: Sequence[str]) -> InstallStep:
        """Build the step installing all packages in one invocation."""
        return InstallStep(
            description=f"Install {', '.join(packages)} with {self.display_name}",
            command=self.install_command + tuple(packages),
            requires_sudo=self.requires_sudo,
        )

    def refresh_step(self) -> InstallStep | None:
        if not self.refresh_command:
            return None
        return InstallStep(
            description=f"Refresh {self.display_name} package lists",
            command=self.refresh_command,
            requires_sudo=self.requires_sudo,
        )

    def query_command(self, package: str) -> tuple[str, ...]:
        return tuple(part.replace("{package}", package) for part in self.query_command_template)

    def is_installed(self, package: str, verbose: bool = False) -> bool:
        """
        Ask the package database whether a package is installed.

        Args:
            package: Package name
            verbose: Enable verbose logging

        Returns:
            True if the query command exits 0
        """
        try:
            result = subprocess.run(
                self.query_command(package),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError:
            return False
        installed = result.returncode == 0
        vlog(f"{self.name}: {package} {'installed' if installed else 'missing'}", verbose)
        return installed


PACKAGE_MANAGERS = (
    PackageManager(
        name="apt",
        display_name="APT",
        install_command=("apt-get", "install", "-y"),
        query_command_template=("dpkg", "-s", "{package}"),
        refresh_command=("apt-get", "update"),
    ),
    PackageManager(
        name="pacman",
        display_name="pacman",
        install_command=("pacman", "-S", "--needed", "--noconfirm"),
        query_command_template=("pacman", "-Qi", "{package}"),
        refresh_command=("pacman", "-Sy"),
    ),
    PackageManager(
        name="dnf",
        display_name="DNF",
        install_command=("dnf", "install", "-y"),
        query_command_template=("rpm", "-q", "{package}"),
    ),
    PackageManager(
        name="zypper",
        display_name="zypper",
        install_command=("zypper", "--non-interactive", "install"),
        query_command_template=("rpm", "-q", "{package}"),
        refresh_command=("zypper", "--non-interactive", "refresh"),
    ),
    PackageManager(
        name="brew",
        display_name="Homebrew",
        install_command=("brew", "install"),
        query_command_template=("brew", "list", "--versions", "{package}"),
        requires_sudo=False,
    ),
    PackageManager(
        name="port",
        display_name="MacPorts",
        install_command=("port", "install"),
        query_command_template=("port", "-q", "installed", "{package}"),
    ),
)

_PM_BY_NAME = {pm.name: pm for pm in PACKAGE_MANAGERS}

# Probe order on Linux; the first one found wins
LINUX_PRIORITY = ("apt", "pacman", "dnf", "zypper")
DARWIN_PRIORITY = ("brew", "port")


def get_package_manager(name: str) -> PackageManager | None:
    """Get package manager by name."""
    return _PM_BY_NAME.get(name)


def detect_package_manager(
    available_commands: Iterable[str],
    priority: Sequence[str] = LINUX_PRIORITY,
) -> str:
    """
    Pick the first package manager in priority order that is present.

    Args:
        available_commands: Command names found on the search path
        priority: Candidate manager names, highest priority first

    Returns:
        Manager name, or "unknown" if none is present
    """
    available = set(available_commands)
    for name in priority:
        if name in available:
            return name
    return UNKNOWN


def missing_packages(
    pm: PackageManager,
    packages: Sequence[str],
    verbose: bool = False,
) -> list[str]:
    """Filter packages down to those not yet installed, preserving order."""
    return [package for package in packages if not pm.is_installed(package, verbose)]
