"""
Top-level install state machine.

Start → PlatformDetected → StrategySelected → DependenciesInstalled →
EnvironmentConfigured → ToolchainReady → SdksReady → Done, or Failed from
any state. Steps run strictly in order, each at most once; a re-run of the
whole installer relies on the idempotency checks to skip finished work.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from .config import Config
from .environment import Environment
from .errors import ErrorCode, InstallError
from .installer import Runner, execute_step
from .logging_config import get_logger
from .platform_info import HostSignals, Platform, detect_platform
from .shell_env import resolve_shell_env
from .strategies import InstallContext, StepResult, install_root_for, select_strategy


class State(Enum):
    START = "start"
    PLATFORM_DETECTED = "platform_detected"
    STRATEGY_SELECTED = "strategy_selected"
    DEPENDENCIES_INSTALLED = "dependencies_installed"
    ENVIRONMENT_CONFIGURED = "environment_configured"
    TOOLCHAIN_READY = "toolchain_ready"
    SDKS_READY = "sdks_ready"
    DONE = "done"
    FAILED = "failed"


# (strategy method, state reached when it succeeds)
PIPELINE: tuple[tuple[str, State | None], ...] = (
    ("check_prerequisites", None),
    ("install_dependencies", State.DEPENDENCIES_INSTALLED),
    ("configure_environment", State.ENVIRONMENT_CONFIGURED),
    ("ensure_toolchain", State.TOOLCHAIN_READY),
    ("ensure_sdks", State.SDKS_READY),
)


@dataclass(frozen=True)
class RunResult:
    """
    Outcome of a complete run.

    Attributes:
        state: DONE, or FAILED
        failed_in: Last state reached before the failure
        steps: Results of the pipeline steps that ran
        platform: Detected platform (None if detection failed)
        install_root: Resolved install root (None if not reached)
        error_code: Failure category when state is FAILED
        message: Failure detail
        remediation: Suggested fix
        notes: Follow-up hints for the user
    """
    state: State
    failed_in: State | None = None
    steps: tuple[StepResult, ...] = ()
    platform: Platform | None = None
    install_root: Path | None = None
    error_code: ErrorCode | None = None
    message: str | None = None
    remediation: str | None = None
    notes: tuple[str, ...] = ()

    @property
    def exit_code(self) -> int:
        return int(self.error_code) if self.error_code is not None else 0

    @property
    def success(self) -> bool:
        return self.state is State.DONE


def _failure(
    reached: State,
    error: InstallError | StepResult,
    **kwargs,
) -> RunResult:
    code = error.code if isinstance(error, InstallError) else error.error_code
    return RunResult(
        state=State.FAILED,
        failed_in=reached,
        error_code=code,
        message=error.message,
        remediation=error.remediation,
        **kwargs,
    )


def run_install(
    environment: Environment,
    config: Config,
    signals: HostSignals | None = None,
    runner: Runner | None = None,
    input_func: Callable[[str], str] = input,
    verbose: bool = False,
) -> RunResult:
    """
    Run the installer once.

    Args:
        environment: Startup environment snapshot
        config: Loaded configuration
        signals: Host observations (collected from the real host if None)
        runner: Command runner (execute_step if None)
        input_func: Prompt input function
        verbose: Enable verbose logging

    Returns:
        RunResult; never raises InstallError
    """
    logger = get_logger()
    state = State.START

    if environment.is_root:
        return _failure(state, InstallError(
            ErrorCode.ROOT_REFUSED,
            "do not run the installer as root or with sudo",
            remediation="re-run as your normal user; sudo is used only where needed",
        ))

    try:
        platform = detect_platform(signals or HostSignals.collect())
    except InstallError as e:
        return _failure(state, e)
    state = State.PLATFORM_DETECTED
    logger.info(f"Detected platform: {platform}")

    try:
        strategy = select_strategy(platform)
    except InstallError as e:
        return _failure(state, e, platform=platform)
    state = State.STRATEGY_SELECTED

    install_root = install_root_for(platform, environment)
    ctx = InstallContext(
        platform=platform,
        environment=environment,
        config=config,
        install_root=install_root,
        shell_target=resolve_shell_env(environment.shell, environment.home, environment.zdotdir),
        runner=runner or functools.partial(execute_step, verbose=verbose),
        input_func=input_func,
        verbose=verbose,
    )
    logger.debug(f"Using {strategy!r}, install root {install_root}, shell file {ctx.shell_target}")

    steps: list[StepResult] = []
    for method_name, reached in PIPELINE:
        result = getattr(strategy, method_name)(ctx)
        steps.append(result)
        if not result.success:
            return _failure(
                state,
                result,
                steps=tuple(steps),
                platform=platform,
                install_root=install_root,
            )
        if reached is not None:
            state = reached
            logger.debug(f"{method_name}: {'skipped' if result.skipped else 'done'} ({result.message or ''})")

    logger.info(f"Theos is installed at {install_root}")
    for note in ctx.notes:
        logger.info(note)

    return RunResult(
        state=State.DONE,
        steps=tuple(steps),
        platform=platform,
        install_root=install_root,
        notes=tuple(ctx.notes),
    )
