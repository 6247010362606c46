"""
iOS SDK installation through Theos' own install-sdk script.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from .checks import SDK_PATTERN, sdks_present
from .errors import ErrorCode, InstallError
from .installer import InstallStep, Runner
from .logging_config import get_logger


def sdks_dir(install_root: Path) -> Path:
    return install_root / "sdks"


def install_sdks(
    install_root: Path,
    tracks: Sequence[str],
    runner: Runner,
) -> bool:
    """
    Install SDKs unless at least one is already present.

    Args:
        install_root: $THEOS
        tracks: Arguments passed to install-sdk, one invocation each
        runner: Command runner

    Returns:
        True if install-sdk was run, False if SDKs were already present

    Raises:
        InstallError: SDK_INSTALL_FAILED if install-sdk fails or no SDK appears
    """
    logger = get_logger()

    if sdks_present(sdks_dir(install_root), SDK_PATTERN):
        logger.info("SDKs already installed, skipping")
        return False

    installer = install_root / "bin" / "install-sdk"
    for track in tracks:
        logger.info(f"Installing SDK ({track})...")
        result = runner(InstallStep(
            description=f"Install {track} SDK",
            command=(str(installer), track),
        ))
        if not result.success:
            raise InstallError(
                ErrorCode.SDK_INSTALL_FAILED,
                f"install-sdk {track} failed: {result.error_message}",
            )

    if not sdks_present(sdks_dir(install_root), SDK_PATTERN):
        raise InstallError(
            ErrorCode.SDK_INSTALL_FAILED,
            f"no {SDK_PATTERN} found in {sdks_dir(install_root)} after installation",
        )
    return True
