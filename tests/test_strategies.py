"""
Tests for per-platform install strategies (theos_install/strategies/).
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from theos_install.config import Config, Preferences
from theos_install.errors import ErrorCode, InstallError
from theos_install.platform_info import (
    ELUCUBRATUS,
    IOS,
    LEGACY,
    LINUX,
    MACOS,
    MODERN,
    PROCURSUS,
    WSL1,
    WSL2,
    Platform,
)
from theos_install.strategies import (
    STRATEGIES,
    InstallContext,
    InstallStrategy,
    IOSStrategy,
    LinuxStrategy,
    MacOSStrategy,
    WSL1Strategy,
    WSL2Strategy,
    install_root_for,
    select_strategy,
)
from theos_install.strategies.ios import PROCURSUS_PACKAGES, THEOS_REPOSITORY_LINE
from theos_install.strategies.linux import FAKEROOT_TCP, LINUX_PACKAGES


MACOS_BREW = Platform(family=MACOS, architecture="aarch64", package_manager="brew")
LINUX_APT = Platform(family=LINUX, architecture="x86_64", package_manager="apt")
IOS_PROCURSUS = Platform(family=IOS, architecture="aarch64", variant=MODERN, package_manager="apt",
                         bootstrap=PROCURSUS)


@pytest.fixture
def make_ctx(make_env, home, runner):
    def factory(platform, config=None, answers=None, **env_overrides):
        env = make_env(**env_overrides)
        replies = list(answers or [])
        return InstallContext(
            platform=platform,
            environment=env,
            config=config or Config(),
            install_root=install_root_for(platform, env),
            shell_target=home / ".zshrc",
            runner=runner,
            input_func=lambda prompt: replies.pop(0),
        )
    return factory


class TestSelectStrategy:
    def test_every_strategy_defines_dependency_step(self):
        assert not hasattr(InstallStrategy, "install_dependencies")
        for strategy_cls in STRATEGIES.values():
            assert callable(getattr(strategy_cls, "install_dependencies", None)), strategy_cls

    @pytest.mark.parametrize("platform,expected", [
        (MACOS_BREW, MacOSStrategy),
        (IOS_PROCURSUS, IOSStrategy),
        (Platform(family=IOS, architecture="arm64", variant=LEGACY), IOSStrategy),
        (LINUX_APT, LinuxStrategy),
        (Platform(family=LINUX, architecture="x86_64", variant=WSL1), WSL1Strategy),
        (Platform(family=LINUX, architecture="x86_64", variant=WSL2), WSL2Strategy),
    ])
    def test_registered(self, platform, expected):
        assert type(select_strategy(platform)) is expected

    def test_unregistered(self):
        with pytest.raises(InstallError) as exc_info:
            select_strategy(Platform(family=IOS, architecture="arm64"))
        assert exc_info.value.code is ErrorCode.UNSUPPORTED_PLATFORM


class TestInstallRoot:
    def test_existing_theos_wins(self, make_env):
        env = make_env(theos="~/dev/theos")
        assert install_root_for(LINUX_APT, env) == Path("~/dev/theos").expanduser()

    def test_home_default(self, make_env, home):
        assert install_root_for(MACOS_BREW, make_env()) == home / "theos"

    def test_rootless_ios(self, make_env):
        platform = Platform(family=IOS, architecture="arm64", variant=MODERN, rootless=True)
        assert install_root_for(platform, make_env()) == Path("/var/theos")


class TestAsk:
    def test_preference_answers(self, make_ctx):
        ctx = make_ctx(MACOS_BREW)
        assert ctx.ask("q", "always") is True
        assert ctx.ask("q", "swift") is True
        assert ctx.ask("q", "never") is False
        assert ctx.ask("q", "minimal") is False

    def test_unattended_default(self, make_ctx):
        assert make_ctx(MACOS_BREW).ask("q") is False

    def test_interactive(self, make_ctx):
        ctx = make_ctx(MACOS_BREW, answers=["yes"], unattended=False)
        assert ctx.ask("q") is True


class TestCheckPrerequisites:
    def test_missing_is_dependency_issue(self, make_ctx):
        with patch("theos_install.checks.shutil.which", return_value=None):
            result = MacOSStrategy().check_prerequisites(make_ctx(MACOS_BREW))
        assert not result.success
        assert result.error_code is ErrorCode.DEPENDENCY_ISSUE
        assert "brew or port" in result.message

    def test_present(self, make_ctx, tools_present):
        assert LinuxStrategy().check_prerequisites(make_ctx(LINUX_APT)).success


class TestMacOS:
    def test_installs_missing_without_refresh(self, make_ctx, runner, packages_missing):
        result = MacOSStrategy().install_dependencies(make_ctx(MACOS_BREW))
        assert result.success and not result.skipped
        assert runner.argvs == [["brew", "install", "ldid", "xz", "make"]]

    def test_macports(self, make_ctx, runner, packages_missing):
        platform = Platform(family=MACOS, architecture="x86_64", package_manager="port")
        MacOSStrategy().install_dependencies(make_ctx(platform))
        assert runner.argvs == [["sudo", "port", "install", "ldid", "xz", "gmake"]]

    def test_nothing_missing(self, make_ctx, runner, packages_installed):
        result = MacOSStrategy().install_dependencies(make_ctx(MACOS_BREW))
        assert result.skipped
        assert runner.steps == []

    def test_no_package_manager(self, make_ctx):
        platform = Platform(family=MACOS, architecture="x86_64")
        result = MacOSStrategy().install_dependencies(make_ctx(platform))
        assert result.error_code is ErrorCode.DEPENDENCY_ISSUE

    def test_install_failure(self, make_ctx, runner, packages_missing):
        runner.fail.add("brew")
        result = MacOSStrategy().install_dependencies(make_ctx(MACOS_BREW))
        assert result.error_code is ErrorCode.DEPENDENCY_ISSUE


class TestConfigureEnvironment:
    def test_persists_install_root(self, make_ctx, home):
        ctx = make_ctx(MACOS_BREW)

        result = MacOSStrategy().configure_environment(ctx)

        assert result.success and not result.skipped
        assert f"export THEOS={home / 'theos'}" in (home / ".zshrc").read_text()
        assert ctx.environment.theos == str(home / "theos")
        assert ctx.notes

    def test_line_already_present(self, make_ctx, home):
        (home / ".zshrc").write_text(f"export THEOS={home / 'theos'}\n")
        result = MacOSStrategy().configure_environment(make_ctx(MACOS_BREW))
        assert result.skipped
        assert (home / ".zshrc").read_text().count("THEOS") == 1

    def test_theos_already_set(self, make_ctx, home):
        result = MacOSStrategy().configure_environment(make_ctx(MACOS_BREW, theos="/opt/theos"))
        assert result.skipped
        assert not (home / ".zshrc").exists()

    def test_unknown_shell(self, make_ctx):
        ctx = make_ctx(MACOS_BREW)
        ctx.shell_target = None
        result = MacOSStrategy().configure_environment(ctx)
        assert result.error_code is ErrorCode.UNSUPPORTED_SHELL


class TestLinux:
    def test_apt(self, make_ctx, runner, packages_missing):
        result = LinuxStrategy().install_dependencies(make_ctx(LINUX_APT))
        assert result.success
        assert runner.argvs == [
            ["sudo", "apt-get", "update"],
            ["sudo", "apt-get", "install", "-y", *LINUX_PACKAGES["apt"]],
        ]

    @pytest.mark.parametrize("pm", ["pacman", "dnf", "zypper"])
    def test_other_managers(self, make_ctx, runner, packages_missing, pm):
        platform = Platform(family=LINUX, architecture="x86_64", package_manager=pm)
        LinuxStrategy().install_dependencies(make_ctx(platform))
        assert runner.argvs[-1][-len(LINUX_PACKAGES[pm]):] == list(LINUX_PACKAGES[pm])

    def test_unknown_package_manager_is_soft(self, make_ctx, runner):
        platform = Platform(family=LINUX, architecture="x86_64")
        result = LinuxStrategy().install_dependencies(make_ctx(platform))
        assert result.success
        assert result.skipped
        assert runner.steps == []

    def test_minimal_toolchain_unattended(self, make_ctx, runner):
        ctx = make_ctx(LINUX_APT)
        assert "minimal" in LinuxStrategy().fetch_toolchain(ctx)
        assert runner.argvs[0][-1].endswith("iOSToolchain-x86_64.tar.xz")

    def test_swift_toolchain_on_request(self, make_ctx, runner):
        ctx = make_ctx(LINUX_APT, answers=["y"], unattended=False)
        assert "swift" in LinuxStrategy().fetch_toolchain(ctx)

    def test_swift_preference(self, make_ctx, runner):
        ctx = make_ctx(LINUX_APT, config=Config(preferences=Preferences(toolchain_bundle="swift")))
        assert "swift" in LinuxStrategy().fetch_toolchain(ctx)

    def test_aarch64_does_not_ask(self, make_ctx, runner):
        platform = Platform(family=LINUX, architecture="aarch64", package_manager="apt")
        ctx = make_ctx(platform, unattended=False)
        assert "minimal" in LinuxStrategy().fetch_toolchain(ctx)

    def test_toolchain_present(self, make_ctx, runner, home):
        ctx = make_ctx(LINUX_APT)
        (ctx.install_root / "toolchain/linux/iphone/bin").mkdir(parents=True)
        LinuxStrategy().fetch_toolchain(ctx)
        assert runner.steps == []

    def test_unsupported_architecture_continues(self, make_ctx, runner):
        platform = Platform(family=LINUX, architecture="riscv64", package_manager="apt")
        assert "riscv64" in LinuxStrategy().fetch_toolchain(make_ctx(platform))
        assert runner.steps == []


class TestWSL1:
    platform = Platform(family=LINUX, architecture="x86_64", variant=WSL1, package_manager="apt")

    def test_switches_fakeroot(self, make_ctx, runner, packages_installed):
        with patch("theos_install.strategies.linux.path_points_to", return_value=False), \
             patch("theos_install.strategies.base.dependency_available", return_value=True):
            result = WSL1Strategy().install_dependencies(make_ctx(self.platform))

        assert result.success
        assert runner.argvs == [["sudo", "update-alternatives", "--set", "fakeroot", str(FAKEROOT_TCP)]]

    def test_already_tcp(self, make_ctx, runner, packages_installed):
        with patch("theos_install.strategies.linux.path_points_to", return_value=True):
            WSL1Strategy().install_dependencies(make_ctx(self.platform))
        assert runner.steps == []

    def test_missing_update_alternatives(self, make_ctx, runner, packages_installed):
        with patch("theos_install.strategies.linux.path_points_to", return_value=False), \
             patch("theos_install.strategies.base.dependency_available", return_value=False):
            result = WSL1Strategy().install_dependencies(make_ctx(self.platform))
        assert result.error_code is ErrorCode.WSL_FIX_FAILED
        assert "update-alternatives" in result.message
        assert runner.steps == []

    def test_failure(self, make_ctx, runner, packages_installed):
        runner.fail.add("update-alternatives")
        with patch("theos_install.strategies.linux.path_points_to", return_value=False), \
             patch("theos_install.strategies.base.dependency_available", return_value=True):
            result = WSL1Strategy().install_dependencies(make_ctx(self.platform))
        assert result.error_code is ErrorCode.WSL_FIX_FAILED

    def test_wsl2_has_no_fix(self, make_ctx, runner, packages_installed):
        platform = Platform(family=LINUX, architecture="x86_64", variant=WSL2, package_manager="apt")
        WSL2Strategy().install_dependencies(make_ctx(platform))
        assert runner.steps == []


class TestIOS:
    def test_procursus_packages(self, make_ctx, runner, packages_missing):
        result = IOSStrategy().install_dependencies(make_ctx(IOS_PROCURSUS))
        assert result.success
        assert runner.argvs == [
            ["sudo", "apt-get", "update"],
            ["sudo", "apt-get", "install", "-y", *PROCURSUS_PACKAGES[MODERN]],
        ]

    def test_legacy_packages_and_no_swift(self, make_ctx, runner, packages_missing):
        platform = Platform(family=IOS, architecture="arm64", variant=LEGACY, package_manager="apt",
                            bootstrap=PROCURSUS)
        config = Config(preferences=Preferences(swift_support="always"))
        IOSStrategy().install_dependencies(make_ctx(platform, config=config))
        assert runner.argvs[-1] == ["sudo", "apt-get", "install", "-y", *PROCURSUS_PACKAGES[LEGACY]]

    def test_swift_accepted(self, make_ctx, runner, packages_missing):
        config = Config(preferences=Preferences(swift_support="always"))
        IOSStrategy().install_dependencies(make_ctx(IOS_PROCURSUS, config=config))
        assert runner.argvs[-1] == ["sudo", "apt-get", "install", "-y", "swift"]

    def test_swift_declined_interactively(self, make_ctx, runner, packages_missing):
        IOSStrategy().install_dependencies(make_ctx(IOS_PROCURSUS, answers=["n"], unattended=False))
        assert ["sudo", "apt-get", "install", "-y", "swift"] not in runner.argvs

    def test_elucubratus_consent_declined(self, make_ctx, runner, packages_missing, tmp_path):
        platform = Platform(family=IOS, architecture="arm64", variant=MODERN, package_manager="apt",
                            bootstrap=ELUCUBRATUS)
        with patch("theos_install.strategies.ios.THEOS_SOURCES_FILE", tmp_path / "theos.list"):
            result = IOSStrategy().install_dependencies(make_ctx(platform))
        assert result.error_code is ErrorCode.DEPENDENCY_ISSUE
        assert runner.steps == []

    def test_elucubratus_consent_given(self, make_ctx, runner, packages_missing, tmp_path):
        platform = Platform(family=IOS, architecture="arm64", variant=MODERN, package_manager="apt",
                            bootstrap=ELUCUBRATUS)
        sources = tmp_path / "theos.list"
        config = Config(preferences=Preferences(swift_support="never"))
        with patch("theos_install.strategies.ios.THEOS_SOURCES_FILE", sources):
            result = IOSStrategy().install_dependencies(
                make_ctx(platform, config=config, answers=["y"], unattended=False)
            )

        assert result.success
        assert runner.programs == ["install", "apt-get", "apt-get"]
        assert runner.argvs[0][-1] == str(sources)
        assert runner.argvs[-1] == ["sudo", "apt-get", "install", "-y", "theos-dependencies"]

    def test_elucubratus_repository_already_trusted(self, make_ctx, runner, packages_missing, tmp_path):
        platform = Platform(family=IOS, architecture="arm64", variant=MODERN, package_manager="apt",
                            bootstrap=ELUCUBRATUS)
        sources = tmp_path / "theos.list"
        sources.write_text(THEOS_REPOSITORY_LINE + "\n")
        with patch("theos_install.strategies.ios.THEOS_SOURCES_FILE", sources):
            result = IOSStrategy().install_dependencies(make_ctx(platform))

        assert result.success
        assert "install" not in runner.programs

    def test_rootless_shared_root(self, make_ctx, runner, tmp_path):
        shared = tmp_path / "var" / "theos"
        platform = Platform(family=IOS, architecture="arm64", variant=MODERN, package_manager="apt",
                            bootstrap=PROCURSUS, rootless=True)
        runner.effects["install"] = lambda step: shared.mkdir(parents=True)

        with patch("theos_install.strategies.base.SHARED_INSTALL_ROOT", shared), \
             patch("theos_install.ownership.current_owner", return_value="dev"):
            ctx = make_ctx(platform)
            result = IOSStrategy().configure_environment(ctx)

        assert result.success
        assert ctx.install_root == shared
        assert runner.argvs == [["sudo", "install", "-d", "-o", "dev", "-m", "755", str(shared)]]

    def test_rootless_setup_failure(self, make_ctx, runner, tmp_path):
        shared = tmp_path / "var" / "theos"
        platform = Platform(family=IOS, architecture="arm64", variant=MODERN, package_manager="apt",
                            bootstrap=PROCURSUS, rootless=True)
        runner.fail.add("install")

        with patch("theos_install.strategies.base.SHARED_INSTALL_ROOT", shared):
            result = IOSStrategy().configure_environment(make_ctx(platform))

        assert result.error_code is ErrorCode.RA1N_SETUP_FAILED
