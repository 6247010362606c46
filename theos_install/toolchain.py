"""
Prebuilt iOS toolchain bundles for Linux hosts.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from .checks import native_toolchain_usable, toolchain_present
from .config import Config
from .errors import ErrorCode, InstallError
from .installer import InstallStep, Runner
from .logging_config import get_logger


MINIMAL = "minimal"
SWIFT = "swift"


@dataclass(frozen=True)
class ToolchainBundle:
    """
    Downloadable toolchain archive.

    Attributes:
        kind: 'minimal' or 'swift'
        url: Archive URL (.tar.xz)
        extract_to: Directory relative to $THEOS the archive is unpacked into
        strip_components: Leading path components dropped by tar
    """
    kind: str
    url: str
    extract_to: str
    strip_components: int = 0


_MINIMAL_URL = "https://github.com/L1ghtmann/llvm-project/releases/latest/download/iOSToolchain-{arch}.tar.xz"
_SWIFT_URL = "https://github.com/kabiroberai/swift-toolchain-linux/releases/download/v2.3.0/swift-5.8-ubuntu20.04.tar.xz"

TOOLCHAIN_DIR = "toolchain/linux/iphone"

TOOLCHAIN_BUNDLES: dict[str, dict[str, ToolchainBundle]] = {
    "x86_64": {
        MINIMAL: ToolchainBundle(MINIMAL, _MINIMAL_URL.format(arch="x86_64"), TOOLCHAIN_DIR, 1),
        SWIFT: ToolchainBundle(SWIFT, _SWIFT_URL, "toolchain"),
    },
    "aarch64": {
        MINIMAL: ToolchainBundle(MINIMAL, _MINIMAL_URL.format(arch="aarch64"), TOOLCHAIN_DIR, 1),
    },
}


def toolchain_dir(install_root: Path) -> Path:
    return install_root / TOOLCHAIN_DIR


def clang_path(install_root: Path) -> Path:
    return toolchain_dir(install_root) / "bin" / "clang"


def available_bundles(arch: str, config: Config) -> dict[str, ToolchainBundle]:
    """Built-in bundles for arch with config URL overrides applied."""
    bundles = dict(TOOLCHAIN_BUNDLES.get(arch, {}))
    for kind, url in config.toolchains.get(arch, {}).items():
        if kind == MINIMAL:
            bundles[kind] = ToolchainBundle(MINIMAL, url, TOOLCHAIN_DIR, 1)
        elif kind == SWIFT:
            bundles[kind] = ToolchainBundle(SWIFT, url, "toolchain")
    return bundles


def select_bundle(arch: str, want_swift: bool, config: Config) -> ToolchainBundle | None:
    """
    Pick the bundle to install.

    Args:
        arch: Normalized CPU architecture
        want_swift: Whether the Swift-capable bundle was requested
        config: Configuration (URL overrides)

    Returns:
        Selected bundle, or None if the architecture has no bundles
    """
    bundles = available_bundles(arch, config)
    if not bundles:
        return None
    if want_swift and SWIFT in bundles:
        return bundles[SWIFT]
    if want_swift:
        get_logger().info(f"No Swift toolchain is available for {arch}, using the minimal toolchain")
    return bundles.get(MINIMAL) or next(iter(bundles.values()))


def supports_swift(arch: str, config: Config) -> bool:
    return SWIFT in available_bundles(arch, config)


def install_bundle(
    install_root: Path,
    bundle: ToolchainBundle,
    runner: Runner,
) -> None:
    """
    Download and extract a bundle, then verify clang is usable.

    Raises:
        InstallError: TOOLCHAIN_INSTALL_FAILED on download, extraction or verification failure
    """
    logger = get_logger()
    destination = install_root / bundle.extract_to

    fd, archive = tempfile.mkstemp(prefix="theos-toolchain-", suffix=".tar.xz")
    os.close(fd)
    try:
        logger.info(f"Downloading {bundle.kind} toolchain from {bundle.url}...")
        result = runner(InstallStep(
            description=f"Download {bundle.kind} toolchain",
            command=("curl", "-fL", "--output", archive, bundle.url),
        ))
        if not result.success:
            raise InstallError(
                ErrorCode.TOOLCHAIN_INSTALL_FAILED,
                f"download failed: {result.error_message}",
            )

        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InstallError(
                ErrorCode.TOOLCHAIN_INSTALL_FAILED,
                f"could not create {destination}: {e}",
            ) from e

        command = ["tar", "-xf", archive, "-C", str(destination)]
        if bundle.strip_components:
            command.append(f"--strip-components={bundle.strip_components}")
        result = runner(InstallStep(
            description=f"Extract {bundle.kind} toolchain",
            command=tuple(command),
        ))
        if not result.success:
            raise InstallError(
                ErrorCode.TOOLCHAIN_INSTALL_FAILED,
                f"extraction failed: {result.error_message}",
            )
    finally:
        Path(archive).unlink(missing_ok=True)

    if not native_toolchain_usable(clang_path(install_root)):
        raise InstallError(
            ErrorCode.TOOLCHAIN_INSTALL_FAILED,
            f"{clang_path(install_root)} is missing or not executable after extraction",
        )


def toolchain_installed(install_root: Path) -> bool:
    return toolchain_present(toolchain_dir(install_root))
