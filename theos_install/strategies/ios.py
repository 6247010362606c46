"""
Jailbroken iOS.

Procursus bootstraps carry every dependency in their default repository.
Older (elucubratus) bootstraps need the Theos APT repository, which the
user must agree to trust before anything is installed from it.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from ..checks import file_contains_line
from ..errors import ErrorCode, InstallError
from ..installer import InstallStep
from ..logging_config import get_logger
from ..ownership import reconcile_directory
from ..package_managers import get_package_manager, missing_packages
from ..platform_info import LEGACY, MODERN, PROCURSUS
from . import base
from .base import (
    InstallContext,
    InstallStrategy,
    StepResult,
    install_packages,
    pipeline_step,
)


PROCURSUS_PACKAGES: dict[str, tuple[str, ...]] = {
    MODERN: ("bash", "coreutils", "xz-utils", "ldid", "git", "perl", "rsync", "make", "clang", "ld64"),
    LEGACY: ("bash", "coreutils", "xz-utils", "ldid", "git", "perl", "rsync", "make", "clang-10", "odcctools"),
}

THEOS_DEPENDENCIES = "theos-dependencies"
THEOS_REPOSITORY_LINE = "deb https://repo.theos.dev/ ./"
THEOS_SOURCES_FILE = Path("/etc/apt/sources.list.d/theos.list")

# Swift is not packaged for legacy kernels
SWIFT_PACKAGES: dict[str, str | None] = {
    MODERN: "swift",
    LEGACY: None,
}


class IOSStrategy(InstallStrategy):
    name = "iOS"
    required_commands = ("sudo", "apt", "curl")

    @pipeline_step
    def install_dependencies(self, ctx: InstallContext) -> StepResult:
        apt = get_package_manager("apt")
        if ctx.platform.bootstrap == PROCURSUS:
            installed = install_packages(ctx, apt, PROCURSUS_PACKAGES[ctx.platform.variant])
        else:
            installed = self.install_theos_dependencies(ctx)

        self.offer_swift(ctx)
        return StepResult("install_dependencies", skipped=not installed, message=str(ctx.platform))

    def install_theos_dependencies(self, ctx: InstallContext) -> bool:
        """Trust the Theos repository (with consent) and install the meta-package."""
        logger = get_logger()
        apt = get_package_manager("apt")

        if not missing_packages(apt, [THEOS_DEPENDENCIES], ctx.verbose):
            logger.info(f"{THEOS_DEPENDENCIES} already installed")
            return False

        if not file_contains_line(THEOS_SOURCES_FILE, THEOS_REPOSITORY_LINE):
            trusted = ctx.ask(
                "Theos dependencies are provided by the Theos APT repository (https://repo.theos.dev). "
                "Add it to your sources?",
            )
            if not trusted:
                raise InstallError(
                    ErrorCode.DEPENDENCY_ISSUE,
                    "the Theos repository is required to install dependencies on this bootstrap",
                    remediation=f"add '{THEOS_REPOSITORY_LINE}' to your APT sources and install {THEOS_DEPENDENCIES}",
                )
            self.add_repository(ctx)

        return install_packages(ctx, apt, [THEOS_DEPENDENCIES])

    def add_repository(self, ctx: InstallContext) -> None:
        fd, staged = tempfile.mkstemp(prefix="theos-", suffix=".list")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(THEOS_REPOSITORY_LINE + "\n")
            result = ctx.run(InstallStep(
                description="Add the Theos APT repository",
                command=("install", "-m", "644", staged, str(THEOS_SOURCES_FILE)),
                requires_sudo=True,
            ))
        finally:
            Path(staged).unlink(missing_ok=True)

        if not result.success:
            raise InstallError(
                ErrorCode.DEPENDENCY_ISSUE,
                f"could not write {THEOS_SOURCES_FILE}: {result.error_message}",
            )

    def offer_swift(self, ctx: InstallContext) -> None:
        logger = get_logger()
        package = SWIFT_PACKAGES.get(ctx.platform.variant)
        preference = ctx.config.preferences.swift_support

        if preference == "never":
            return
        if package is None:
            logger.info("Swift is not available for this iOS version, skipping")
            return

        apt = get_package_manager("apt")
        if not missing_packages(apt, [package], ctx.verbose):
            return
        if not ctx.ask("Would you like to install Swift support?", preference):
            logger.info("Skipping Swift support; install the 'swift' package later to enable it")
            return
        install_packages(ctx, apt, [package], refresh=False)

    def prepare_install_root(self, ctx: InstallContext) -> None:
        if ctx.platform.rootless and ctx.install_root == base.SHARED_INSTALL_ROOT:
            if reconcile_directory(ctx.install_root, ctx.environment.user, ctx.runner, ctx.verbose):
                get_logger().info(f"Prepared {ctx.install_root} for {ctx.environment.user}")
