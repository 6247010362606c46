"""
Idempotency predicates.

Each function answers "is this step already satisfied?" by looking at the
filesystem or the search path. They never mutate anything and are safe to
call any number of times.
"""

from __future__ import annotations

import fnmatch
import os
import shutil
from pathlib import Path


SDK_PATTERN = "iPhoneOS*.sdk"


def toolchain_present(directory: str | os.PathLike) -> bool:
    """Directory exists and has at least one entry."""
    path = Path(directory)
    if not path.is_dir():
        return False
    try:
        return any(path.iterdir())
    except OSError:
        return False


def sdks_present(sdks_dir: str | os.PathLike, pattern: str = SDK_PATTERN) -> bool:
    """SDK directory exists and lists at least one entry matching pattern."""
    path = Path(sdks_dir)
    if not path.is_dir():
        return False
    try:
        return any(fnmatch.fnmatch(entry, pattern) for entry in os.listdir(path))
    except OSError:
        return False


def native_toolchain_usable(executable: str | os.PathLike) -> bool:
    """Compiler binary exists and is executable."""
    path = Path(executable)
    return path.is_file() and os.access(path, os.X_OK)


def dependency_available(command: str) -> bool:
    """Command resolves on the search path."""
    return shutil.which(command) is not None


def file_contains_line(target: str | os.PathLike | None, line: str) -> bool:
    """File exists and has line as one of its lines."""
    if target is None:
        return False
    path = Path(target)
    if not path.is_file():
        return False
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False
    return line in content.splitlines()


def path_points_to(link: str | os.PathLike, target: str | os.PathLike) -> bool:
    """Resolved link equals target (used for update-alternatives state)."""
    return os.path.realpath(link) == os.path.realpath(target)


def shell_env_configured(target: str | os.PathLike | None, line: str) -> bool:
    """Startup file already contains the exact export line."""
    return file_contains_line(target, line)
