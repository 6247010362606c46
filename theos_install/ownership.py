"""
Privileged shared directory reconciliation.

Used for the shared /var/theos install root on rootless iOS jailbreaks,
which the invoking user cannot create in a directory owned by root.
"""

from __future__ import annotations

import os
from pathlib import Path

from .common import vlog
from .errors import ErrorCode, InstallError
from .installer import InstallStep, Runner


def current_owner(path: str | os.PathLike) -> str | None:
    """Owner name of path, or None if it cannot be determined."""
    try:
        return Path(path).owner()
    except (OSError, KeyError):
        return None


def reconcile_directory(
    path: str | os.PathLike,
    owner: str,
    runner: Runner,
    verbose: bool = False,
) -> bool:
    """
    Make sure path is a directory owned by owner.

    Args:
        path: Directory to reconcile
        owner: Desired owning user
        runner: Command runner used for the privileged commands
        verbose: Enable verbose logging

    Returns:
        True if a privileged command was issued, False if nothing needed doing

    Raises:
        InstallError: RA1N_SETUP_FAILED if creation or transfer fails
    """
    directory = Path(path)

    if not directory.exists():
        result = runner(InstallStep(
            description=f"Create {directory} owned by {owner}",
            command=("install", "-d", "-o", owner, "-m", "755", str(directory)),
            requires_sudo=True,
        ))
        if not result.success:
            raise InstallError(
                ErrorCode.RA1N_SETUP_FAILED,
                f"could not create {directory}: {result.error_message}",
            )
    else:
        if not directory.is_dir():
            raise InstallError(
                ErrorCode.RA1N_SETUP_FAILED,
                f"{directory} exists and is not a directory",
            )
        existing = current_owner(directory)
        if existing == owner:
            vlog(f"{directory} already owned by {owner}", verbose)
            return False

        result = runner(InstallStep(
            description=f"Transfer {directory} from {existing} to {owner}",
            command=("chown", "-R", owner, str(directory)),
            requires_sudo=True,
        ))
        if not result.success:
            raise InstallError(
                ErrorCode.RA1N_SETUP_FAILED,
                f"could not change owner of {directory}: {result.error_message}",
            )

    if current_owner(directory) != owner:
        raise InstallError(
            ErrorCode.RA1N_SETUP_FAILED,
            f"{directory} is not owned by {owner} after setup",
        )
    return True
