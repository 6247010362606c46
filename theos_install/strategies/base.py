"""
Common install strategy pipeline.

A strategy exposes five steps that the orchestrator calls in order:
check_prerequisites, install_dependencies, configure_environment,
ensure_toolchain and ensure_sdks. Each returns a StepResult; helpers
raise InstallError and the step wrapper turns it into a failed result.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from ..checks import dependency_available
from ..common import vlog
from ..config import Config
from ..environment import Environment
from ..errors import ErrorCode, InstallError
from ..installer import CommandResult, InstallStep, Runner, execute_step
from ..logging_config import get_logger
from ..package_managers import PackageManager, missing_packages
from ..platform_info import IOS, Platform
from ..prerequisites import ensure_prerequisites
from ..prompts import ask_yes_no
from ..sdks import install_sdks
from ..shell_env import persist_install_root
from ..theos_repo import clone_or_update


# Shared install root on rootless iOS jailbreaks
SHARED_INSTALL_ROOT = Path("/var/theos")


@dataclass(frozen=True)
class StepResult:
    """
    Outcome of one pipeline step.

    Attributes:
        name: Step name (the strategy method that produced it)
        success: Whether the step's postcondition holds
        skipped: Whether the step found nothing to do
        error_code: Failure category when success is False
        message: Human-readable detail
        remediation: Suggested fix for a failure
    """
    name: str
    success: bool = True
    skipped: bool = False
    error_code: ErrorCode | None = None
    message: str | None = None
    remediation: str | None = None

    @classmethod
    def failed(cls, name: str, error: InstallError) -> StepResult:
        return cls(
            name=name,
            success=False,
            error_code=error.code,
            message=error.message,
            remediation=error.remediation,
        )


@dataclass
class InstallContext:
    """
    Everything a strategy needs for one run.

    environment is replaced once THEOS has been persisted; the other
    fields stay fixed for the run.
    """
    platform: Platform
    environment: Environment
    config: Config
    install_root: Path
    shell_target: Path | None
    runner: Runner = execute_step
    input_func: Callable[[str], str] = input
    verbose: bool = False
    notes: list[str] = field(default_factory=list)

    def run(self, step: InstallStep) -> CommandResult:
        return self.runner(step)

    def ask(self, question: str, preference: str = "ask", default: bool = False) -> bool:
        """
        Ask unless a preference already answers the question.

        Args:
            question: Question text
            preference: 'ask', or a pre-made answer ('always'/'swift' mean yes,
                'never'/'minimal' mean no)
            default: Answer in unattended mode
        """
        if preference in ("always", "swift"):
            return True
        if preference in ("never", "minimal"):
            return False
        return ask_yes_no(
            question,
            unattended=self.environment.unattended,
            default=default,
            input_func=self.input_func,
        )


def install_root_for(platform: Platform, environment: Environment) -> Path:
    """
    Resolve where Theos lives for this run.

    An existing $THEOS always wins; rootless iOS uses the shared root;
    everything else installs into ~/theos.
    """
    if environment.theos:
        return Path(environment.theos).expanduser()
    if platform.family == IOS and platform.rootless:
        return SHARED_INSTALL_ROOT
    return environment.home / "theos"


def pipeline_step(method: Callable[..., StepResult]) -> Callable[..., StepResult]:
    """Convert InstallError raised by a step into a failed StepResult."""
    @functools.wraps(method)
    def wrapper(self, ctx: InstallContext) -> StepResult:
        try:
            return method(self, ctx)
        except InstallError as e:
            return StepResult.failed(method.__name__, e)
    return wrapper


def install_packages(
    ctx: InstallContext,
    pm: PackageManager,
    packages: Sequence[str],
    refresh: bool = True,
) -> bool:
    """
    Install whichever of packages are missing.

    Returns:
        True if the package manager was invoked, False if all were present

    Raises:
        InstallError: DEPENDENCY_ISSUE on any non-zero exit
    """
    logger = get_logger()
    missing = missing_packages(pm, packages, ctx.verbose)
    if not missing:
        logger.info(f"Dependencies already installed ({', '.join(packages)})")
        return False

    refresh_step = pm.refresh_step() if refresh else None
    if refresh_step is not None:
        result = ctx.run(refresh_step)
        if not result.success:
            raise InstallError(
                ErrorCode.DEPENDENCY_ISSUE,
                f"{pm.display_name} refresh failed: {result.error_message}",
            )

    logger.info(f"Installing dependencies: {', '.join(missing)}")
    result = ctx.run(pm.install_step(missing))
    if not result.success:
        raise InstallError(
            ErrorCode.DEPENDENCY_ISSUE,
            f"{pm.display_name} could not install {', '.join(missing)}: {result.error_message}",
        )
    return True


class InstallStrategy:
    """
    Base strategy.

    Subclasses set the prerequisite commands and must define
    install_dependencies(ctx) -> StepResult, wrapped in pipeline_step;
    the base class has no dependency step of its own.
    """

    name = "generic"
    required_commands: tuple[str, ...] = ("git", "curl")
    alternative_commands: tuple[tuple[str, ...], ...] = ()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

    @pipeline_step
    def check_prerequisites(self, ctx: InstallContext) -> StepResult:
        result = ensure_prerequisites(
            self.required_commands,
            self.alternative_commands,
            ctx.verbose,
        )
        return StepResult("check_prerequisites", message=f"found {', '.join(result.installed)}")

    @pipeline_step
    def configure_environment(self, ctx: InstallContext) -> StepResult:
        self.prepare_install_root(ctx)

        if ctx.environment.theos:
            vlog(f"THEOS already set to {ctx.environment.theos}", ctx.verbose)
            return StepResult("configure_environment", skipped=True, message="THEOS already set")

        get_logger().info(f"Setting THEOS to {ctx.install_root} in {ctx.shell_target}...")
        changed = persist_install_root(ctx.shell_target, ctx.install_root, ctx.verbose)
        ctx.environment = ctx.environment.with_install_root(ctx.install_root)
        if changed:
            ctx.notes.append(f"Restart your shell or run 'source {ctx.shell_target}' to use THEOS")
        return StepResult(
            "configure_environment",
            skipped=not changed,
            message=f"THEOS={ctx.install_root}",
        )

    @pipeline_step
    def ensure_toolchain(self, ctx: InstallContext) -> StepResult:
        outcome = clone_or_update(ctx.install_root, ctx.config, ctx.runner)
        message = self.fetch_toolchain(ctx)
        return StepResult("ensure_toolchain", message="; ".join(filter(None, [f"Theos {outcome}", message])))

    @pipeline_step
    def ensure_sdks(self, ctx: InstallContext) -> StepResult:
        installed = install_sdks(ctx.install_root, ctx.config.sdk_tracks, ctx.runner)
        return StepResult("ensure_sdks", skipped=not installed)

    def prepare_install_root(self, ctx: InstallContext) -> None:
        """Hook for strategies whose install root needs privileged setup."""

    def fetch_toolchain(self, ctx: InstallContext) -> str | None:
        """Hook for strategies that download a compiler toolchain."""
        return None

    def has_command(self, name: str) -> bool:
        return dependency_available(name)
