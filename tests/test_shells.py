"""
Tests for shell environment detection (cli_locator/shells.py).
"""

from unittest.mock import patch

import pytest

from conftest import TARGET, FakeRunner

from cli_locator.platforms import PosixPlatform, WindowsPlatform
from cli_locator.shells import (
    AvailableShells,
    ShellConfig,
    ShellEnvironment,
    SubsystemDistribution,
    check_target_in_subsystem,
    decode_console_output,
    detect_alt_shell,
    detect_shells,
    find_target_in_subsystem,
    list_subsystem_distributions,
    parse_distribution_list,
    subsystem_candidate_paths,
    wsl_args,
)


VERBOSE_LIST = (
    "  NAME            STATE           VERSION\r\n"
    "* Ubuntu          Running         2\r\n"
    "  Debian          Stopped         1\r\n"
)


class TestShellEnvironment:
    """Tests for ShellEnvironment."""

    @pytest.mark.parametrize("value,expected", [
        ("native", ShellEnvironment.NATIVE),
        ("PowerShell", ShellEnvironment.NATIVE),
        ("wsl", ShellEnvironment.WSL),
        (" WSL2 ", ShellEnvironment.WSL),
        ("git-bash", ShellEnvironment.GIT_BASH),
        ("gitbash", ShellEnvironment.GIT_BASH),
    ])
    def test_parse(self, value, expected):
        assert ShellEnvironment.parse(value) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown shell environment"):
            ShellEnvironment.parse("fish")

    def test_str(self):
        assert str(ShellEnvironment.GIT_BASH) == "gitbash"


class TestDecodeConsoleOutput:
    """Tests for UTF-16LE detection."""

    def test_utf16_detected_from_nuls(self):
        raw = VERBOSE_LIST.encode("utf-16-le")
        assert decode_console_output(raw) == VERBOSE_LIST

    def test_bom_stripped(self):
        raw = "\ufeffUbuntu\r\n".encode("utf-16-le")
        assert decode_console_output(raw, assume_utf16=True) == "Ubuntu\r\n"

    def test_plain_utf8(self):
        assert decode_console_output(b"Ubuntu\n") == "Ubuntu\n"

    def test_few_nuls_stay_utf8(self):
        assert decode_console_output(b"a\0b\0") == "ab"


class TestParseDistributionList:
    """Tests for parsing `wsl --list --verbose`."""

    def test_parse(self):
        distros = parse_distribution_list(VERBOSE_LIST)
        assert distros == [
            SubsystemDistribution(name="Ubuntu", is_default=True, version=2),
            SubsystemDistribution(name="Debian", is_default=False, version=1),
        ]

    def test_single_default(self):
        text = "NAME STATE VERSION\n* A Running 2\n* B Running 2\n"
        assert [d.is_default for d in parse_distribution_list(text)] == [True, False]

    def test_missing_version(self):
        text = "NAME STATE\n  Legacy Stopped\n  Other Stopped x\n"
        assert [d.version for d in parse_distribution_list(text)] == [None, None]

    def test_header_only(self):
        assert parse_distribution_list("  NAME  STATE  VERSION\r\n") == []


class TestAvailableShells:
    """Tests for AvailableShells."""

    def test_default_distribution(self):
        shells = AvailableShells(subsystem_distributions=(
            SubsystemDistribution("Debian"),
            SubsystemDistribution("Ubuntu", is_default=True),
        ))
        assert shells.default_distribution.name == "Ubuntu"

    def test_default_falls_back_to_first(self):
        shells = AvailableShells(subsystem_distributions=(SubsystemDistribution("Debian"),))
        assert shells.default_distribution.name == "Debian"

    def test_no_distributions(self):
        assert AvailableShells().default_distribution is None

    def test_to_dict(self):
        shells = AvailableShells(
            subsystem_distributions=(SubsystemDistribution("Ubuntu", True, 2),),
            alt_shell_path=r"C:\Program Files\Git\bin\bash.exe",
        )
        assert shells.to_dict() == {
            "native": True,
            "subsystem_distributions": [{"name": "Ubuntu", "is_default": True, "version": 2}],
            "alt_shell_path": r"C:\Program Files\Git\bin\bash.exe",
        }


class TestDetectShells:
    """Tests for detect_shells and detect_alt_shell."""

    def test_posix_is_native_only(self, runner):
        shells = detect_shells(PosixPlatform(), runner)
        assert shells == AvailableShells(native=True)
        assert runner.calls == []

    def test_windows(self, runner):
        runner.add(["wsl", "--list", "--verbose"], VERBOSE_LIST.encode("utf-16-le"))
        runner.add(["where", "bash.exe"], "C:\\Program Files\\Git\\usr\\bin\\bash.exe\r\n")

        with patch("cli_locator.shells.is_regular_file", return_value=False):
            shells = detect_shells(WindowsPlatform(), runner)

        assert [d.name for d in shells.subsystem_distributions] == ["Ubuntu", "Debian"]
        assert shells.alt_shell_path == "C:\\Program Files\\Git\\usr\\bin\\bash.exe"

    def test_wsl_unavailable(self, runner):
        with patch("cli_locator.shells.is_regular_file", return_value=False):
            shells = detect_shells(WindowsPlatform(), runner)
        assert shells.subsystem_distributions == ()
        assert shells.alt_shell_path is None

    def test_alt_shell_default_location(self, runner):
        expected = WindowsPlatform.GIT_BASH_LOCATIONS[0]
        with patch("cli_locator.shells.is_regular_file", side_effect=lambda p: p == expected):
            assert detect_alt_shell(WindowsPlatform(), runner) == expected
        assert runner.calls == []

    def test_alt_shell_rejects_wsl_bash(self, runner):
        """The bash.exe shipped with WSL is not Git Bash."""
        runner.add(["where", "bash.exe"], "C:\\Windows\\System32\\bash.exe\r\n")
        with patch("cli_locator.shells.is_regular_file", return_value=False):
            assert detect_alt_shell(WindowsPlatform(), runner) is None


class TestCheckTargetInSubsystem:
    """Tests for the login-shell lookup inside WSL."""

    def lookup(self, distro=None):
        return wsl_args("bash", "-lc", f"command -v {TARGET} || echo ''", distro=distro)

    def test_found(self, runner):
        runner.add(self.lookup("Ubuntu"), f"/home/u/.local/bin/{TARGET}\n")
        path = check_target_in_subsystem(TARGET, "Ubuntu", WindowsPlatform(), runner)
        assert path == f"/home/u/.local/bin/{TARGET}"

    def test_default_distribution(self, runner):
        runner.add(self.lookup(), f"/usr/bin/{TARGET}\n")
        assert check_target_in_subsystem(TARGET, None, WindowsPlatform(), runner) == f"/usr/bin/{TARGET}"

    @pytest.mark.parametrize("output", ["", "''\n", f"bash: {TARGET}: not found\n"])
    def test_absent(self, runner, output):
        runner.add(self.lookup("Ubuntu"), output)
        assert check_target_in_subsystem(TARGET, "Ubuntu", WindowsPlatform(), runner) is None

    def test_command_failure(self, runner):
        runner.add(self.lookup("Ubuntu"), "", returncode=1, stderr=b"no such distro")
        assert check_target_in_subsystem(TARGET, "Ubuntu", WindowsPlatform(), runner) is None

    def test_not_windows(self, runner):
        assert check_target_in_subsystem(TARGET, "Ubuntu", PosixPlatform(), runner) is None
        assert runner.calls == []


class TestSubsystemLookup:
    """Tests for per-distribution discovery helpers."""

    def test_list_names(self, runner):
        runner.add(["wsl", "-l", "-q"], "Ubuntu\r\n\r\nDebian\r\n".encode("utf-16-le"))
        assert list_subsystem_distributions(runner) == ["Ubuntu", "Debian"]

    def test_list_failure(self, runner):
        assert list_subsystem_distributions(runner) == []

    def test_candidate_paths(self):
        assert subsystem_candidate_paths("/home/u", "tool", ["v18.0.0", "v20.0.0"]) == [
            "/home/u/.nvm/versions/node/v18.0.0/bin/tool",
            "/home/u/.nvm/versions/node/v20.0.0/bin/tool",
            "/home/u/.local/bin/tool",
            "/usr/local/bin/tool",
            "/usr/bin/tool",
        ]

    def test_candidate_paths_without_home(self):
        assert subsystem_candidate_paths(None, "tool") == ["/usr/local/bin/tool", "/usr/bin/tool"]

    def test_which_wins(self):
        runner = FakeRunner()
        runner.add(["wsl", "-d", "Ubuntu", "--", "which", TARGET], f"/opt/{TARGET}\n")
        assert find_target_in_subsystem("Ubuntu", TARGET, runner) == f"/opt/{TARGET}"
        assert len(runner.calls) == 1

    def test_local_bin_fallback(self, runner):
        runner.add(["wsl", "-d", "Ubuntu", "--", "echo", "$HOME"], "/home/u\n")
        runner.add(["wsl", "-d", "Ubuntu", "--", "test", "-f", f"/home/u/.local/bin/{TARGET}"], "")
        assert find_target_in_subsystem("Ubuntu", TARGET, runner) == f"/home/u/.local/bin/{TARGET}"

    def test_nothing_found(self, runner):
        assert find_target_in_subsystem("Ubuntu", TARGET, runner) is None


def test_shell_config_to_dict():
    config = ShellConfig(ShellEnvironment.WSL, "Ubuntu", "/usr/bin/claude")
    assert config.to_dict() == {
        "environment": "wsl",
        "subsystem_distro": "Ubuntu",
        "subsystem_binary_path": "/usr/bin/claude",
        "alt_shell_path": None,
    }
