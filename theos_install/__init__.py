"""
install-theos - Bootstrap the Theos build system on macOS, Linux and jailbroken iOS.

Modules:
- Detection: platform and package manager, runtime environment, shell startup file
- Checks: idempotency predicates that let re-runs skip finished work
- Strategies: per-platform dependency, toolchain and SDK installation
- Orchestration: the fail-fast pipeline and its exit codes
"""

__version__ = "1.0.0"

VERSION = __version__

from .errors import ErrorCode, InstallError
from .environment import Environment, detect_environment
from .config import Config, Preferences, load_config, load_config_file, validate_config
from .platform_info import HostSignals, Platform, detect_platform
from .shell_env import resolve_shell_env, persist_install_root
from .prompts import Answer, parse_answer, is_affirmative, ask_yes_no
from .installer import InstallStep, CommandResult, execute_step
from .ownership import reconcile_directory
from .strategies import InstallContext, InstallStrategy, StepResult, select_strategy
from .orchestrator import RunResult, State, run_install
from .logging_config import setup_logging, get_logger

__all__ = [
    "__version__",
    "VERSION",
    "ErrorCode",
    "InstallError",
    "Environment",
    "detect_environment",
    "Config",
    "Preferences",
    "load_config",
    "load_config_file",
    "validate_config",
    "HostSignals",
    "Platform",
    "detect_platform",
    "resolve_shell_env",
    "persist_install_root",
    "Answer",
    "parse_answer",
    "is_affirmative",
    "ask_yes_no",
    "InstallStep",
    "CommandResult",
    "execute_step",
    "reconcile_directory",
    "InstallContext",
    "InstallStrategy",
    "StepResult",
    "select_strategy",
    "RunResult",
    "State",
    "run_install",
    "setup_logging",
    "get_logger",
]
