"""
Runtime environment captured once at startup.

This is the only module that reads the process environment. Everything
downstream receives an Environment value instead of consulting os.environ.
"""

from __future__ import annotations

import dataclasses
import getpass
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .common import ci_indicators, vlog


INSTALL_ROOT_VAR = "THEOS"
DEBUG_VAR = "THEOS_INSTALL_DEBUG"


@dataclass(frozen=True)
class Environment:
    """
    Facts about the invoking user and shell.

    Attributes:
        home: User's home directory
        shell: Basename of the user's interactive shell ("" if unknown)
        user: Login name of the invoking user
        euid: Effective user id
        theos: Value of $THEOS at startup, if set
        unattended: Whether prompts must be answered automatically
        zdotdir: $ZDOTDIR, honoured for zsh only
        indicators: Evidence for the unattended decision
        debug: Verbose tracing requested through THEOS_INSTALL_DEBUG=1
    """
    home: Path
    shell: str
    user: str
    euid: int
    theos: str | None = None
    unattended: bool = False
    zdotdir: str | None = None
    indicators: tuple[str, ...] = ()
    debug: bool = False

    @property
    def is_root(self) -> bool:
        return self.euid == 0

    def with_install_root(self, path: str | os.PathLike) -> Environment:
        """Return a copy with the install-root variable set."""
        return dataclasses.replace(self, theos=str(path))

    def __str__(self) -> str:
        mode = "unattended" if self.unattended else "interactive"
        return f"{self.user} ({self.shell or 'unknown shell'}, {mode})"


def detect_environment(
    environ: Mapping[str, str] | None = None,
    unattended: bool = False,
    verbose: bool = False,
) -> Environment:
    """
    Build the Environment from a mapping of environment variables.

    Args:
        environ: Variables to read (defaults to the process environment)
        unattended: Force unattended mode regardless of CI markers
        verbose: Enable verbose logging

    Returns:
        Environment snapshot
    """
    if environ is None:
        environ = os.environ

    indicators = ci_indicators(environ)
    if unattended:
        indicators.insert(0, "flag:--unattended")

    home = environ.get("HOME") or os.path.expanduser("~")
    shell = os.path.basename(environ.get("SHELL", "").rstrip("/"))
    user = environ.get("USER") or environ.get("LOGNAME") or getpass.getuser()

    env = Environment(
        home=Path(home),
        shell=shell,
        user=user,
        euid=os.geteuid(),
        theos=environ.get(INSTALL_ROOT_VAR) or None,
        unattended=bool(indicators),
        zdotdir=environ.get("ZDOTDIR") or None,
        indicators=tuple(indicators),
        debug=environ.get(DEBUG_VAR, "0") == "1",
    )
    vlog(f"Environment detected: {env} indicators={list(env.indicators)}", verbose or env.debug)
    return env
