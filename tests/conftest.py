"""
Shared fixtures: a recording command runner that simulates the side
effects of git, curl, tar and install-sdk on a temporary filesystem.
"""

import os
import stat
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from theos_install.config import Config
from theos_install.environment import Environment
from theos_install.installer import CommandResult


def _clone(step):
    root = Path(step.command[-1])
    (root / "bin").mkdir(parents=True, exist_ok=True)
    (root / "makefiles").mkdir(exist_ok=True)
    (root / "Makefile").write_text("# theos\n")


def _download(step):
    output = step.command[step.command.index("--output") + 1]
    Path(output).write_bytes(b"archive")


def _extract(step):
    dest = Path(step.command[step.command.index("-C") + 1])
    if dest.name == "toolchain":
        dest = dest / "linux" / "iphone"
    clang = dest / "bin" / "clang"
    clang.parent.mkdir(parents=True, exist_ok=True)
    clang.write_text("#!/bin/sh\n")
    clang.chmod(clang.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def _install_sdk(step):
    root = Path(step.command[0]).parent.parent
    (root / "sdks" / f"iPhoneOS{'16.5' if step.command[1] == 'latest' else '14.5'}.sdk").mkdir(
        parents=True, exist_ok=True
    )


DEFAULT_EFFECTS = {
    "git": _clone,
    "curl": _download,
    "tar": _extract,
    "install-sdk": _install_sdk,
}


class RecordingRunner:
    """Stands in for execute_step; records every step it is given."""

    def __init__(self, fail=(), effects=None):
        self.steps = []
        self.fail = set(fail)
        self.effects = dict(DEFAULT_EFFECTS)
        if effects:
            self.effects.update(effects)

    def __call__(self, step):
        self.steps.append(step)
        program = Path(step.command[0]).name
        if program in self.fail:
            return CommandResult(step=step, exit_code=1, error_message=f"{program} failed")
        effect = self.effects.get(program)
        if effect is not None:
            effect(step)
        return CommandResult(step=step, exit_code=0)

    @property
    def programs(self):
        return [Path(step.command[0]).name for step in self.steps]

    @property
    def argvs(self):
        return [step.argv for step in self.steps]


@pytest.fixture(autouse=True)
def _restore_environ():
    """persist_install_root exports THEOS into os.environ; undo it after each test."""
    with patch.dict(os.environ):
        yield


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def home(tmp_path):
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def make_env(home):
    def factory(**overrides):
        values = dict(home=home, shell="zsh", user="dev", euid=1000, unattended=True)
        values.update(overrides)
        return Environment(**values)
    return factory


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def tools_present():
    """Every prerequisite command resolves on the search path."""
    with patch("theos_install.checks.shutil.which", side_effect=lambda name: f"/usr/bin/{name}"):
        yield


@pytest.fixture
def packages_missing():
    """Package database queries report nothing installed."""
    with patch("theos_install.package_managers.subprocess.run", return_value=MagicMock(returncode=1)) as mock_run:
        yield mock_run


@pytest.fixture
def packages_installed():
    """Package database queries report everything installed."""
    with patch("theos_install.package_managers.subprocess.run", return_value=MagicMock(returncode=0)) as mock_run:
        yield mock_run
