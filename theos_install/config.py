"""
Configuration file parsing and management.

Reads YAML (or JSON) configuration files and merges them from multiple
sources (explicit path → project → user → system → defaults).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any

import yaml

from .common import vlog


# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    ".install-theos.yml",
    ".install-theos.yaml",
    os.path.expanduser("~/.config/install-theos/config.yml"),
    os.path.expanduser("~/.config/install-theos/config.yaml"),
    "/etc/install-theos/config.yml",
    "/etc/install-theos/config.yaml",
]

THEOS_REPOSITORY = "https://github.com/theos/theos.git"
DEFAULT_SDK_TRACKS = ("latest", "iPhoneOS14.5")

TOOLCHAIN_CHOICES = {"ask", "minimal", "swift"}
SWIFT_CHOICES = {"ask", "always", "never"}


@dataclass(frozen=True)
class Preferences:
    """
    Answers to the installer's questions, decided ahead of time.

    Attributes:
        toolchain_bundle: Linux toolchain choice ('ask', 'minimal' or 'swift')
        swift_support: Optional Swift package on iOS ('ask', 'always' or 'never')
    """
    toolchain_bundle: str = "ask"
    swift_support: str = "ask"

    def __post_init__(self):
        if self.toolchain_bundle not in TOOLCHAIN_CHOICES:
            raise ValueError(
                f"Invalid toolchain_bundle: {self.toolchain_bundle}. "
                f"Must be one of: {', '.join(sorted(TOOLCHAIN_CHOICES))}"
            )
        if self.swift_support not in SWIFT_CHOICES:
            raise ValueError(
                f"Invalid swift_support: {self.swift_support}. "
                f"Must be one of: {', '.join(sorted(SWIFT_CHOICES))}"
            )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Preferences:
        """Create Preferences from dictionary."""
        return Preferences(
            toolchain_bundle=data.get("toolchain_bundle", "ask"),
            swift_support=data.get("swift_support", "ask"),
        )


@dataclass(frozen=True)
class Config:
    """
    Complete installer configuration.

    Attributes:
        version: Config schema version
        repository_url: Git URL Theos is cloned from
        repository_branch: Branch to clone (None for the default branch)
        sdk_tracks: SDK tracks passed to install-sdk, in order
        toolchains: Per-architecture bundle URL overrides ({arch: {bundle: url}})
        preferences: Pre-answered prompts
        source: Path to the configuration file that was loaded
    """
    version: int = 1
    repository_url: str = THEOS_REPOSITORY
    repository_branch: str | None = None
    sdk_tracks: tuple[str, ...] = DEFAULT_SDK_TRACKS
    toolchains: dict[str, dict[str, str]] = field(default_factory=dict)
    preferences: Preferences = field(default_factory=Preferences)
    source: str = ""

    def __post_init__(self):
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")
        if not self.repository_url:
            raise ValueError("repository.url must not be empty")
        if not self.sdk_tracks:
            raise ValueError("sdks.tracks must list at least one track")

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary."""
        repository = data.get("repository", {}) or {}
        sdks = data.get("sdks", {}) or {}
        toolchains = {
            arch: {bundle: str(url) for bundle, url in (urls or {}).items()}
            for arch, urls in (data.get("toolchains", {}) or {}).items()
        }
        tracks = sdks.get("tracks", DEFAULT_SDK_TRACKS)
        if isinstance(tracks, str):
            tracks = [tracks]
        elif not isinstance(tracks, (list, tuple)):
            raise ValueError(f"sdks.tracks must be a list of track names, got {type(tracks).__name__}")

        return Config(
            version=data.get("version", 1),
            repository_url=repository.get("url", THEOS_REPOSITORY),
            repository_branch=repository.get("branch"),
            sdk_tracks=tuple(str(track) for track in tracks),
            toolchains=toolchains,
            preferences=Preferences.from_dict(data.get("preferences", {}) or {}),
            source=source,
        )

    def merge_with(self, other: Config) -> Config:
        """
        Merge this config with another, preferring values from this config.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged Config object
        """
        merged_toolchains = {arch: dict(urls) for arch, urls in other.toolchains.items()}
        for arch, urls in self.toolchains.items():
            merged_toolchains.setdefault(arch, {}).update(urls)

        merged_preferences = Preferences(
            toolchain_bundle=self.preferences.toolchain_bundle if self.preferences.toolchain_bundle != "ask" else other.preferences.toolchain_bundle,
            swift_support=self.preferences.swift_support if self.preferences.swift_support != "ask" else other.preferences.swift_support,
        )

        return Config(
            version=self.version,
            repository_url=self.repository_url if self.repository_url != THEOS_REPOSITORY else other.repository_url,
            repository_branch=self.repository_branch or other.repository_branch,
            sdk_tracks=self.sdk_tracks if self.sdk_tracks != DEFAULT_SDK_TRACKS else other.sdk_tracks,
            toolchains=merged_toolchains,
            preferences=merged_preferences,
            source=self.source or other.source,
        )


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """
    Load YAML configuration file.

    Returns:
        Parsed configuration dictionary, or None if the file is unreadable or invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return None


def _load_json(file_path: str) -> dict[str, Any] | None:
    """
    Load JSON configuration file.

    Returns:
        Parsed configuration dictionary, or None if file invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, json.JSONDecodeError):
        return None


def load_config_file(file_path: str, verbose: bool = False) -> Config | None:
    """
    Load configuration from a single file.

    Args:
        file_path: Path to a .yml, .yaml or .json file
        verbose: Enable verbose logging

    Returns:
        Config object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    if file_path.endswith(".json"):
        data = _load_json(file_path)
    else:
        data = _load_yaml(file_path)

    if data is None:
        vlog(f"Invalid config file: {file_path}", verbose)
        return None

    try:
        config = Config.from_dict(data, source=file_path)
    except (ValueError, TypeError, AttributeError) as e:
        vlog(f"Config validation failed for {file_path}: {e}", verbose)
        return None

    vlog(f"Loaded config successfully: {file_path}", verbose)
    return config


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Args:
        custom_path: Optional path to custom configuration file
        verbose: Enable verbose logging

    Returns:
        Merged Config object (defaults if no config found)

    Raises:
        ValueError: If custom_path is provided but file cannot be loaded
    """
    configs: list[Config] = []

    if custom_path:
        config = load_config_file(custom_path, verbose)
        if config is None:
            raise ValueError(f"Could not load config from specified path: {custom_path}")
        configs.append(config)

    for location in CONFIG_LOCATIONS:
        config = load_config_file(location, verbose)
        if config is not None:
            configs.append(config)

    if not configs:
        vlog("No config files found, using defaults", verbose)
        return Config()

    merged = configs[0]
    for config in configs[1:]:
        merged = merged.merge_with(config)

    vlog(f"Merged {len(configs)} config files", verbose)
    return merged


def validate_config(config: Config) -> list[str]:
    """
    Validate configuration and return list of warnings.

    Args:
        config: Config object to validate

    Returns:
        List of validation warning messages (empty if valid)
    """
    warnings = []

    if len(config.sdk_tracks) != len(set(config.sdk_tracks)):
        warnings.append("Duplicate SDK tracks in sdks.tracks")

    for arch, urls in config.toolchains.items():
        for bundle in urls:
            if bundle not in {"minimal", "swift"}:
                warnings.append(f"Unknown toolchain bundle '{bundle}' for {arch}")

    return warnings
