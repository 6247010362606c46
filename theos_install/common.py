"""
Common utilities shared across theos_install modules.
"""

from __future__ import annotations

import sys
from typing import Mapping


CI_INDICATORS = (
    "CI",
    "CONTINUOUS_INTEGRATION",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
    "CIRCLECI",
    "TRAVIS",
    "JENKINS_HOME",
    "BUILDKITE",
    "DRONE",
    "SEMAPHORE",
    "APPVEYOR",
    "CODEBUILD_BUILD_ID",
    "TF_BUILD",  # Azure Pipelines
)


def ci_indicators(environ: Mapping[str, str]) -> list[str]:
    """
    Collect the CI markers present in an environment mapping.

    Args:
        environ: Environment variables to inspect

    Returns:
        List of "NAME=value" strings, empty outside CI.
    """
    return [f"{var}={environ[var]}" for var in CI_INDICATORS if environ.get(var)]


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log verbose message using structured logging.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose:
        try:
            from .logging_config import get_logger
            get_logger().info(msg)
        except Exception:
            # Logging must never break an install step
            print(f"[install-theos] {msg}", file=sys.stderr)
