"""
Platform detection.

detect_platform is a pure function of the HostSignals it is given;
HostSignals.collect() is the only part that looks at the real host.
"""

from __future__ import annotations

import os
import platform as _platform
import re
import shutil
from dataclasses import dataclass

from .errors import ErrorCode, InstallError
from .package_managers import DARWIN_PRIORITY, LINUX_PRIORITY, UNKNOWN, detect_package_manager


MACOS = "macos"
IOS = "ios"
LINUX = "linux"

LEGACY = "legacy"
MODERN = "modern"
WSL1 = "wsl1"
WSL2 = "wsl2"

PROCURSUS = "procursus"
ELUCUBRATUS = "elucubratus"

# Darwin 20 is iOS 14
LEGACY_KERNEL_THRESHOLD = 20

XCODE_SELECT = "xcode-select"
PROCURSUS_MARKER = "/.procursus_strapped"
ROOTLESS_MARKER = "/var/jb"

PROBED_COMMANDS = (XCODE_SELECT,) + LINUX_PRIORITY + DARWIN_PRIORITY
PROBED_MARKERS = (PROCURSUS_MARKER, ROOTLESS_MARKER)

_ARCH_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "armv8l": "aarch64",
}


@dataclass(frozen=True)
class HostSignals:
    """
    Raw observations about the host.

    Attributes:
        system: OS name as reported by uname -s
        release: Kernel release as reported by uname -r
        machine: CPU architecture as reported by uname -m
        commands: Names of probed commands found on the search path
        markers: Probed marker paths that exist
    """
    system: str
    release: str
    machine: str
    commands: frozenset[str] = frozenset()
    markers: frozenset[str] = frozenset()

    @classmethod
    def collect(cls) -> HostSignals:
        uname = _platform.uname()
        return cls(
            system=uname.system,
            release=uname.release,
            machine=uname.machine,
            commands=frozenset(cmd for cmd in PROBED_COMMANDS if shutil.which(cmd)),
            markers=frozenset(path for path in PROBED_MARKERS if os.path.lexists(path)),
        )


@dataclass(frozen=True)
class Platform:
    """
    Detected platform, immutable for the rest of the run.

    Attributes:
        family: 'macos', 'ios' or 'linux'
        architecture: Normalized CPU architecture
        variant: 'legacy'/'modern' on iOS, 'wsl1'/'wsl2' on WSL, else None
        package_manager: Manager name, or 'unknown'
        bootstrap: 'procursus' or 'elucubratus' on iOS, else None
        rootless: iOS rootless jailbreak needing the shared /var/theos root
        kernel_release: Kernel release string the detection was based on
    """
    family: str
    architecture: str
    variant: str | None = None
    package_manager: str = UNKNOWN
    bootstrap: str | None = None
    rootless: bool = False
    kernel_release: str = ""

    @property
    def key(self) -> tuple[str, str | None]:
        return (self.family, self.variant)

    def __str__(self) -> str:
        parts = [self.family]
        if self.variant:
            parts.append(self.variant)
        if self.bootstrap:
            parts.append(self.bootstrap)
        if self.rootless:
            parts.append("rootless")
        return f"{'/'.join(parts)} ({self.architecture}, package manager: {self.package_manager})"


def kernel_major(release: str) -> int | None:
    """Leading integer of a kernel release string, or None."""
    match = re.match(r"\s*(\d+)", release)
    return int(match.group(1)) if match else None


def is_legacy_kernel(release: str, threshold: int = LEGACY_KERNEL_THRESHOLD) -> bool:
    major = kernel_major(release)
    return major is not None and major < threshold


def wsl_generation(release: str) -> str | None:
    """Return 'wsl1', 'wsl2' or None based on the kernel release."""
    lowered = release.lower()
    if "microsoft" not in lowered:
        return None
    if "wsl2" in lowered or "microsoft-standard" in lowered:
        return WSL2
    return WSL1


def normalize_architecture(machine: str) -> str:
    lowered = machine.strip().lower()
    return _ARCH_ALIASES.get(lowered, lowered)


def detect_platform(signals: HostSignals) -> Platform:
    """
    Classify the host.

    Args:
        signals: Observations about the host

    Returns:
        Platform value

    Raises:
        InstallError: UNSUPPORTED_PLATFORM for anything but Darwin and Linux
    """
    arch = normalize_architecture(signals.machine)

    if signals.system == "Darwin":
        if XCODE_SELECT in signals.commands:
            return Platform(
                family=MACOS,
                architecture=arch,
                package_manager=detect_package_manager(signals.commands, DARWIN_PRIORITY),
                kernel_release=signals.release,
            )
        return Platform(
            family=IOS,
            architecture=arch,
            variant=LEGACY if is_legacy_kernel(signals.release) else MODERN,
            package_manager="apt",
            bootstrap=PROCURSUS if PROCURSUS_MARKER in signals.markers else ELUCUBRATUS,
            rootless=ROOTLESS_MARKER in signals.markers,
            kernel_release=signals.release,
        )

    if signals.system == "Linux":
        return Platform(
            family=LINUX,
            architecture=arch,
            variant=wsl_generation(signals.release),
            package_manager=detect_package_manager(signals.commands, LINUX_PRIORITY),
            kernel_release=signals.release,
        )

    raise InstallError(
        ErrorCode.UNSUPPORTED_PLATFORM,
        f"{signals.system or 'unknown OS'} is not supported",
        remediation="Theos can be installed on macOS, Linux (including WSL) and jailbroken iOS",
    )
