"""
Clone or update the Theos repository into the install root.
"""

from __future__ import annotations

from pathlib import Path

from .checks import toolchain_present
from .config import Config
from .errors import ErrorCode, InstallError
from .installer import InstallStep, Runner
from .logging_config import get_logger


CLONED = "cloned"
UPDATED = "updated"


def clone_step(install_root: Path, config: Config) -> InstallStep:
    command = ["git", "clone", "--recursive"]
    if config.repository_branch:
        command += ["--branch", config.repository_branch]
    command += [config.repository_url, str(install_root)]
    return InstallStep(description="Clone Theos", command=tuple(command))


def update_step(install_root: Path) -> InstallStep:
    return InstallStep(
        description="Check for Theos updates",
        command=(str(install_root / "bin" / "update-theos"),),
    )


def clone_or_update(
    install_root: Path,
    config: Config,
    runner: Runner,
) -> str:
    """
    Clone Theos when the install root is absent or empty, otherwise update it.

    Returns:
        "cloned" or "updated"

    Raises:
        InstallError: THEOS_CLONE_FAILED if git or update-theos fails
    """
    logger = get_logger()

    if toolchain_present(install_root):
        logger.info(f"Theos found at {install_root}, checking for updates...")
        result = runner(update_step(install_root))
        if not result.success:
            raise InstallError(
                ErrorCode.THEOS_CLONE_FAILED,
                f"update-theos failed: {result.error_message}",
            )
        return UPDATED

    logger.info(f"Cloning Theos into {install_root}...")
    result = runner(clone_step(install_root, config))
    if not result.success or not toolchain_present(install_root):
        raise InstallError(
            ErrorCode.THEOS_CLONE_FAILED,
            f"git clone of {config.repository_url} failed: {result.error_message or 'nothing was cloned'}",
        )
    return CLONED
