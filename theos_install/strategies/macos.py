"""macOS with Xcode command line tools."""

from __future__ import annotations

from ..errors import ErrorCode, InstallError
from ..package_managers import get_package_manager
from .base import InstallContext, InstallStrategy, StepResult, install_packages, pipeline_step


# GNU make 4+ is required; the system make is 3.81
MACOS_PACKAGES: dict[str, tuple[str, ...]] = {
    "brew": ("ldid", "xz", "make"),
    "port": ("ldid", "xz", "gmake"),
}


class MacOSStrategy(InstallStrategy):
    name = "macOS"
    required_commands = ("git", "curl")
    alternative_commands = (("brew", "port"),)

    @pipeline_step
    def install_dependencies(self, ctx: InstallContext) -> StepResult:
        pm = get_package_manager(ctx.platform.package_manager)
        if pm is None or pm.name not in MACOS_PACKAGES:
            raise InstallError(
                ErrorCode.DEPENDENCY_ISSUE,
                "neither Homebrew nor MacPorts was detected",
                remediation="install Homebrew (https://brew.sh) or MacPorts (https://www.macports.org)",
            )
        installed = install_packages(ctx, pm, MACOS_PACKAGES[pm.name], refresh=False)
        return StepResult("install_dependencies", skipped=not installed, message=pm.display_name)
