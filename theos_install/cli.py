"""
Command line entry point for install-theos.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from . import __version__
from .config import Config, load_config, validate_config
from .environment import detect_environment
from .logging_config import get_logger, setup_logging
from .orchestrator import RunResult, run_install


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="install-theos",
        description="Install Theos, its dependencies, a toolchain and iOS SDKs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Safe to re-run: finished steps are detected and skipped.",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Configuration file (YAML or JSON)",
    )
    parser.add_argument(
        "--unattended", "-y",
        action="store_true",
        help="Never prompt; take the minimal/safe answer (implied by CI=1)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only show warnings and errors",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Also write a detailed log to PATH",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def report(result: RunResult) -> None:
    """Print the diagnostic for a failed run."""
    logger = get_logger()
    if result.success:
        return
    logger.error(f"{result.error_code.description}: {result.message}")
    if result.remediation:
        logger.error(f"Hint: {result.remediation}")
    logger.error(f"Exiting with code {result.exit_code}")


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the installer."""
    args = build_parser().parse_args(argv)

    logger = setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)

    environment = detect_environment(unattended=args.unattended, verbose=args.verbose)
    verbose = args.verbose or environment.debug

    try:
        config = load_config(args.config, verbose=verbose)
    except ValueError as e:
        logger.warning(f"{e}; using defaults")
        config = Config()
    for warning in validate_config(config):
        logger.warning(f"Config: {warning}")

    try:
        result = run_install(environment, config, verbose=verbose)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130
    report(result)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
