"""
Error taxonomy for the Theos installer.

Every abnormal termination maps to exactly one ErrorCode, which doubles
as the process exit status.
"""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Process exit codes, one per failure category."""

    ROOT_REFUSED = 1
    UNSUPPORTED_PLATFORM = 2
    DEPENDENCY_ISSUE = 3
    UNSUPPORTED_SHELL = 4
    THEOS_ENV_FAILED = 5
    THEOS_CLONE_FAILED = 6
    TOOLCHAIN_INSTALL_FAILED = 7
    SDK_INSTALL_FAILED = 8
    RA1N_SETUP_FAILED = 9
    WSL_FIX_FAILED = 10
    # Reserved for a binary-compatibility layer on Windows; never raised.
    CYGWIN_SETUP_FAILED = 11

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    ErrorCode.ROOT_REFUSED: "Theos must not be installed as root",
    ErrorCode.UNSUPPORTED_PLATFORM: "Unsupported platform",
    ErrorCode.DEPENDENCY_ISSUE: "Dependency issue",
    ErrorCode.UNSUPPORTED_SHELL: "Unsupported shell",
    ErrorCode.THEOS_ENV_FAILED: "Could not set THEOS environment variable",
    ErrorCode.THEOS_CLONE_FAILED: "Could not clone or update Theos",
    ErrorCode.TOOLCHAIN_INSTALL_FAILED: "Toolchain installation failed",
    ErrorCode.SDK_INSTALL_FAILED: "SDK installation failed",
    ErrorCode.RA1N_SETUP_FAILED: "Could not prepare shared install directory",
    ErrorCode.WSL_FIX_FAILED: "Could not apply WSL1 fakeroot fix",
    ErrorCode.CYGWIN_SETUP_FAILED: "Cygwin setup failed",
}


class InstallError(Exception):
    """
    Installation failure bound to a single ErrorCode.

    Attributes:
        code: Failure category (also the exit status)
        message: Human-readable error message
        remediation: Suggested fix for the error
    """
    def __init__(
        self,
        code: ErrorCode,
        message: str,
        remediation: str | None = None,
    ):
        self.code = code
        self.message = message
        self.remediation = remediation
        super().__init__(message)

    def __str__(self) -> str:
        text = f"{self.code.description}: {self.message}"
        if self.remediation:
            text += f" ({self.remediation})"
        return text
