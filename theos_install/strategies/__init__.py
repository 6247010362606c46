"""
Install strategies keyed by (platform family, variant).
"""

from __future__ import annotations

from ..errors import ErrorCode, InstallError
from ..platform_info import IOS, LEGACY, LINUX, MACOS, MODERN, WSL1, WSL2, Platform
from .base import (
    InstallContext,
    InstallStrategy,
    StepResult,
    install_root_for,
    pipeline_step,
)
from .ios import IOSStrategy
from .linux import LinuxStrategy, WSL1Strategy, WSL2Strategy
from .macos import MacOSStrategy


STRATEGIES: dict[tuple[str, str | None], type[InstallStrategy]] = {
    (MACOS, None): MacOSStrategy,
    (IOS, LEGACY): IOSStrategy,
    (IOS, MODERN): IOSStrategy,
    (LINUX, None): LinuxStrategy,
    (LINUX, WSL1): WSL1Strategy,
    (LINUX, WSL2): WSL2Strategy,
}


def select_strategy(platform: Platform) -> InstallStrategy:
    """
    Look up the strategy for a detected platform.

    Raises:
        InstallError: UNSUPPORTED_PLATFORM if no strategy is registered
    """
    strategy_cls = STRATEGIES.get(platform.key)
    if strategy_cls is None:
        raise InstallError(
            ErrorCode.UNSUPPORTED_PLATFORM,
            f"no install strategy for {platform}",
        )
    return strategy_cls()


__all__ = [
    "STRATEGIES",
    "InstallContext",
    "InstallStrategy",
    "IOSStrategy",
    "LinuxStrategy",
    "MacOSStrategy",
    "StepResult",
    "WSL1Strategy",
    "WSL2Strategy",
    "install_root_for",
    "pipeline_step",
    "select_strategy",
]
