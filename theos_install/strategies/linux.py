"""
Linux, including both WSL generations.
"""

from __future__ import annotations

from pathlib import Path

from ..checks import path_points_to
from ..errors import ErrorCode, InstallError
from ..installer import InstallStep
from ..logging_config import get_logger
from ..package_managers import UNKNOWN, get_package_manager
from ..toolchain import available_bundles, install_bundle, select_bundle, supports_swift, toolchain_installed
from .base import InstallContext, InstallStrategy, StepResult, install_packages, pipeline_step


LINUX_PACKAGES: dict[str, tuple[str, ...]] = {
    "apt": ("build-essential", "fakeroot", "rsync", "curl", "perl", "zip", "git", "libxml2", "xz-utils"),
    "pacman": ("base-devel", "fakeroot", "rsync", "curl", "perl", "zip", "git", "libxml2", "xz"),
    "dnf": ("gcc", "gcc-c++", "make", "fakeroot", "rsync", "curl", "perl", "zip", "git", "libxml2", "xz"),
    "zypper": ("gcc", "gcc-c++", "make", "fakeroot", "rsync", "curl", "perl", "zip", "git", "libxml2-2", "xz"),
}

FAKEROOT_ALTERNATIVE = Path("/etc/alternatives/fakeroot")
FAKEROOT_TCP = Path("/usr/bin/fakeroot-tcp")


class LinuxStrategy(InstallStrategy):
    name = "Linux"
    required_commands = ("sudo", "curl", "tar")

    @pipeline_step
    def install_dependencies(self, ctx: InstallContext) -> StepResult:
        logger = get_logger()
        pm_name = ctx.platform.package_manager

        if pm_name == UNKNOWN or pm_name not in LINUX_PACKAGES:
            # The only soft failure: later steps may still succeed
            example = ", ".join(LINUX_PACKAGES["apt"])
            logger.warning(
                "No supported package manager found (apt, pacman, dnf, zypper). "
                f"Install the equivalents of these packages yourself: {example}"
            )
            return StepResult("install_dependencies", skipped=True, message="unknown package manager")

        pm = get_package_manager(pm_name)
        installed = install_packages(ctx, pm, LINUX_PACKAGES[pm_name])
        self.after_dependencies(ctx)
        return StepResult("install_dependencies", skipped=not installed, message=pm.display_name)

    def after_dependencies(self, ctx: InstallContext) -> None:
        """Hook run after packages are installed."""

    def fetch_toolchain(self, ctx: InstallContext) -> str | None:
        logger = get_logger()
        arch = ctx.platform.architecture

        if toolchain_installed(ctx.install_root):
            logger.info("Toolchain already installed, skipping")
            return "toolchain present"

        if not available_bundles(arch, ctx.config):
            logger.warning(
                f"No prebuilt toolchain is available for {arch}. "
                "Build one yourself and place it in $THEOS/toolchain; continuing with SDKs"
            )
            return f"no toolchain for {arch}"

        want_swift = False
        if supports_swift(arch, ctx.config) or ctx.config.preferences.toolchain_bundle == "swift":
            want_swift = ctx.ask(
                "Would you like to install the toolchain with Swift support? (larger download)",
                ctx.config.preferences.toolchain_bundle,
            )
        bundle = select_bundle(arch, want_swift, ctx.config)
        install_bundle(ctx.install_root, bundle, ctx.runner)
        return f"{bundle.kind} toolchain installed"


class WSL1Strategy(LinuxStrategy):
    name = "WSL1"

    def after_dependencies(self, ctx: InstallContext) -> None:
        """fakeroot's SysV IPC mode does not work on WSL1; switch to TCP."""
        if path_points_to(FAKEROOT_ALTERNATIVE, FAKEROOT_TCP):
            return
        if not self.has_command("update-alternatives"):
            raise InstallError(
                ErrorCode.WSL_FIX_FAILED,
                "update-alternatives not found",
                remediation=f"point {FAKEROOT_ALTERNATIVE} at {FAKEROOT_TCP} and re-run",
            )

        get_logger().info("Switching fakeroot to fakeroot-tcp for WSL1...")
        result = ctx.run(InstallStep(
            description="Use fakeroot-tcp",
            command=("update-alternatives", "--set", "fakeroot", str(FAKEROOT_TCP)),
            requires_sudo=True,
        ))
        if not result.success:
            raise InstallError(
                ErrorCode.WSL_FIX_FAILED,
                f"update-alternatives failed: {result.error_message}",
            )


class WSL2Strategy(LinuxStrategy):
    name = "WSL2"
