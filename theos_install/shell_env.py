"""
Shell startup file resolution and THEOS persistence.
"""

from __future__ import annotations

import os
from pathlib import Path

from .checks import shell_env_configured
from .common import vlog
from .environment import INSTALL_ROOT_VAR
from .errors import ErrorCode, InstallError


# Candidate startup files per shell, highest priority first. When none
# exists the last one is created.
SHELL_STARTUP_FILES: dict[str, tuple[str, ...]] = {
    "bash": (".bash_profile", ".bash_login", ".profile", ".bashrc"),
    "zsh": (".zshenv", ".zprofile", ".zshrc"),
}


def resolve_shell_env(
    shell: str,
    home: str | os.PathLike,
    zdotdir: str | None = None,
) -> Path | None:
    """
    Choose the startup file that should receive the THEOS export.

    Args:
        shell: Shell name or path (e.g. "zsh", "/bin/bash")
        home: User's home directory
        zdotdir: $ZDOTDIR, only honoured for zsh

    Returns:
        Path to the startup file, or None when the shell is not supported
    """
    name = os.path.basename(shell)
    candidates = SHELL_STARTUP_FILES.get(name)
    if not candidates:
        return None

    base = Path(home)
    if name == "zsh" and zdotdir:
        base = Path(zdotdir)

    for candidate in candidates:
        path = base / candidate
        if path.exists():
            return path
    return base / candidates[-1]


def export_line(install_root: str | os.PathLike) -> str:
    return f"export {INSTALL_ROOT_VAR}={install_root}"


def persist_install_root(
    target: Path | None,
    install_root: str | os.PathLike,
    verbose: bool = False,
) -> bool:
    """
    Append the THEOS export to the startup file and set it in-process.

    Args:
        target: Startup file from resolve_shell_env (None if unsupported)
        install_root: Value for THEOS
        verbose: Enable verbose logging

    Returns:
        True if the file was modified, False if it already had the line

    Raises:
        InstallError: UNSUPPORTED_SHELL if target is None,
            THEOS_ENV_FAILED if the file cannot be written
    """
    if target is None:
        raise InstallError(
            ErrorCode.UNSUPPORTED_SHELL,
            "could not determine a startup file for your shell",
            remediation=f"add '{export_line(install_root)}' to your shell profile and re-run",
        )

    line = export_line(install_root)
    changed = False
    if shell_env_configured(target, line):
        vlog(f"{target} already exports {INSTALL_ROOT_VAR}", verbose)
    else:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "a", encoding="utf-8") as f:
                f.write(f"\n{line}\n")
        except OSError as e:
            raise InstallError(
                ErrorCode.THEOS_ENV_FAILED,
                f"could not write {target}: {e}",
            ) from e
        changed = True

    # Child processes (install-sdk, update-theos) read THEOS
    os.environ[INSTALL_ROOT_VAR] = str(install_root)
    return changed
