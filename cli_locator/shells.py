"""
Shell environment detection.

On Windows the target may live natively, inside a WSL distribution, or be
reachable through Git Bash. This module enumerates which of those bridges
exist on the host and looks the target up inside WSL. On other platforms
only the native environment exists and every query is a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Sequence

from .common import Runner, is_regular_file, run_command, vlog
from .logging_config import get_logger
from .platforms import Platform, WindowsPlatform, current_platform
from .probe import probe_version


DEFAULT_MARKER = "*"
ALT_SHELL_PACKAGE_HINT = "git"

# Placeholder printed by `command -v target || echo ''` under some shells
_EMPTY_PLACEHOLDER = "''"


class ShellEnvironment(str, Enum):
    """Shell environment the target is executed in."""
    NATIVE = "native"
    WSL = "wsl"
    GIT_BASH = "gitbash"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> ShellEnvironment:
        """
        Parse a shell environment name, accepting common aliases.

        Raises:
            ValueError: If the name is not recognised
        """
        normalized = value.strip().lower()
        if normalized in ("native", "powershell", "cmd"):
            return cls.NATIVE
        if normalized in ("wsl", "wsl2"):
            return cls.WSL
        if normalized in ("gitbash", "git-bash", "git_bash", "bash"):
            return cls.GIT_BASH
        raise ValueError(f"Unknown shell environment: {value}")


@dataclass(frozen=True)
class SubsystemDistribution:
    """
    One installed WSL distribution.

    Attributes:
        name: Distribution name (e.g. "Ubuntu")
        is_default: Whether this is the default distribution
        version: WSL engine version (1 or 2), if reported
    """
    name: str
    is_default: bool = False
    version: int | None = None

    def to_dict(self) -> dict:
        return {"name": self.name, "is_default": self.is_default, "version": self.version}


@dataclass(frozen=True)
class AvailableShells:
    """Shell environments detected on the host."""
    native: bool = True
    subsystem_distributions: tuple[SubsystemDistribution, ...] = ()
    alt_shell_path: str | None = None

    @property
    def default_distribution(self) -> SubsystemDistribution | None:
        for distro in self.subsystem_distributions:
            if distro.is_default:
                return distro
        return self.subsystem_distributions[0] if self.subsystem_distributions else None

    def to_dict(self) -> dict:
        return {
            "native": self.native,
            "subsystem_distributions": [d.to_dict() for d in self.subsystem_distributions],
            "alt_shell_path": self.alt_shell_path,
        }


@dataclass(frozen=True)
class ShellConfig:
    """
    Persisted shell preference.

    The optional fields are advisory snapshots; callers re-validate them
    before use.
    """
    environment: ShellEnvironment = ShellEnvironment.NATIVE
    subsystem_distro: str | None = None
    subsystem_binary_path: str | None = None
    alt_shell_path: str | None = None

    def to_dict(self) -> dict:
        return {
            "environment": self.environment.value,
            "subsystem_distro": self.subsystem_distro,
            "subsystem_binary_path": self.subsystem_binary_path,
            "alt_shell_path": self.alt_shell_path,
        }


def wsl_args(*args: str, distro: str | None = None) -> list[str]:
    """Build a ``wsl`` command line, optionally pinned to a distribution."""
    cmd = ["wsl"]
    if distro:
        cmd.extend(["-d", distro])
    cmd.extend(args)
    return cmd


def _wsl_runner(runner: Runner) -> Runner:
    if runner is run_command:
        return partial(run_command, hide_window=True)
    return runner


def decode_console_output(raw: bytes, assume_utf16: bool = False) -> str:
    """
    Decode console output that may be UTF-16LE (as ``wsl.exe`` prints it).

    UTF-16LE is assumed when requested, or when a lossy UTF-8 decode
    contains more than five NUL characters.
    """
    utf8 = raw.decode("utf-8", errors="replace")
    if assume_utf16 or utf8.count("\0") > 5:
        even = raw[: len(raw) - (len(raw) % 2)]
        text = even.decode("utf-16-le", errors="replace")
    else:
        text = utf8
    return text.replace("\ufeff", "").replace("\0", "")


def parse_distribution_list(text: str) -> list[SubsystemDistribution]:
    """
    Parse ``wsl --list --verbose`` output.

    Expected layout::

          NAME      STATE           VERSION
        * Ubuntu    Running         2
          Debian    Stopped         1

    The first line is a header. At most one distribution is marked default.
    """
    distributions = []
    seen_default = False

    for line in text.splitlines()[1:]:
        line = line.strip()
        if not line:
            continue

        is_default = line.startswith(DEFAULT_MARKER) and not seen_default
        parts = line.lstrip(DEFAULT_MARKER).split()
        if not parts or parts[0] == "NAME":
            continue

        version = None
        if len(parts) > 2:
            try:
                version = int(parts[2])
            except ValueError:
                version = None

        seen_default = seen_default or is_default
        distributions.append(SubsystemDistribution(name=parts[0], is_default=is_default, version=version))
        vlog(f"Found WSL distribution: {parts[0]} (default: {is_default}, version: {version})")

    return distributions


def detect_subsystem_distributions(
    runner: Runner = run_command,
    timeout: float | None = None,
) -> list[SubsystemDistribution]:
    """Run ``wsl --list --verbose`` and parse the distributions it reports."""
    result = _wsl_runner(runner)(wsl_args("--list", "--verbose"), timeout=timeout)
    if result is None:
        vlog("WSL not available")
        return []
    if not result.ok:
        vlog(f"WSL list command failed: {decode_console_output(result.stderr)!r}")
        return []

    text = decode_console_output(result.stdout)
    vlog(f"WSL list output: {text!r}")
    return parse_distribution_list(text)


def list_subsystem_distributions(
    runner: Runner = run_command,
    timeout: float | None = None,
) -> list[str]:
    """Distribution names from ``wsl -l -q`` (always UTF-16LE)."""
    result = _wsl_runner(runner)(wsl_args("-l", "-q"), timeout=timeout)
    if result is None or not result.ok:
        vlog("Failed to list WSL distributions")
        return []

    text = decode_console_output(result.stdout, assume_utf16=True)
    names = [line.strip() for line in text.splitlines() if line.strip()]
    vlog(f"Found WSL distributions: {names}")
    return names


def detect_alt_shell(
    platform: Platform | None = None,
    runner: Runner = run_command,
    timeout: float | None = None,
) -> str | None:
    """
    Locate Git Bash.

    Checks the default install locations, then ``where bash.exe``. A PATH
    match is only accepted if it belongs to a Git installation, so WSL's
    own ``bash.exe`` is not mistaken for Git Bash.
    """
    platform = platform or current_platform()
    if not platform.supports_subsystem:
        return None

    for path in WindowsPlatform.GIT_BASH_LOCATIONS:
        if is_regular_file(path):
            get_logger().info(f"Found Git Bash at: {path}")
            return path

    result = runner(["where", "bash.exe"], timeout=timeout)
    if result is None or not result.ok:
        return None

    lines = [line.strip() for line in result.text().splitlines() if line.strip()]
    if lines and ALT_SHELL_PACKAGE_HINT in lines[0].lower():
        get_logger().info(f"Found Git Bash in PATH: {lines[0]}")
        return lines[0]

    return None


def detect_shells(
    platform: Platform | None = None,
    runner: Runner = run_command,
    timeout: float | None = None,
) -> AvailableShells:
    """
    Detect the shell environments available on this host.

    Returns:
        AvailableShells; native-only on platforms without WSL
    """
    platform = platform or current_platform()
    if not platform.supports_subsystem:
        return AvailableShells(native=True)

    vlog("Detecting available shell environments...")
    return AvailableShells(
        native=True,
        subsystem_distributions=tuple(detect_subsystem_distributions(runner, timeout)),
        alt_shell_path=detect_alt_shell(platform, runner, timeout),
    )


def _clean_lookup_output(output: str) -> str | None:
    path = output.strip()
    if not path or path == _EMPTY_PLACEHOLDER or "not found" in path:
        return None
    return path.splitlines()[0].strip() or None


def check_target_in_subsystem(
    target: str,
    distro: str | None = None,
    platform: Platform | None = None,
    runner: Runner = run_command,
    timeout: float | None = None,
) -> str | None:
    """
    Look the target up in a WSL distribution's login shell.

    Args:
        target: Command name
        distro: Distribution name; the default distribution when None

    Returns:
        Path inside the distribution, or None if absent or WSL is unusable
    """
    platform = platform or current_platform()
    if not platform.supports_subsystem:
        return None

    vlog(f"Checking for {target} in WSL (distro: {distro})...")
    cmd = wsl_args("bash", "-lc", f"command -v {target} || echo ''", distro=distro)
    result = _wsl_runner(runner)(cmd, timeout=timeout)
    if result is None:
        get_logger().warning(f"Failed to check {target} in WSL")
        return None
    if not result.ok:
        vlog(f"WSL {target} check failed: {decode_console_output(result.stderr)!r}")
        return None

    path = _clean_lookup_output(result.text())
    if path:
        get_logger().info(f"Found {target} in WSL: {path}")
    return path


def subsystem_home_dir(
    distro: str,
    runner: Runner = run_command,
    timeout: float | None = None,
) -> str | None:
    """Home directory of the default user inside a distribution."""
    result = _wsl_runner(runner)(wsl_args("--", "echo", "$HOME", distro=distro), timeout=timeout)
    if result is None or not result.ok:
        return None
    return result.text() or None


def _subsystem_file_exists(distro: str, path: str, runner: Runner, timeout: float | None) -> bool:
    result = runner(wsl_args("--", "test", "-f", path, distro=distro), timeout=timeout)
    return result is not None and result.ok


def subsystem_candidate_paths(home: str | None, target: str, runtime_versions: Sequence[str] = ()) -> list[str]:
    """Ordered fallback locations of the target inside a distribution."""
    paths = []
    if home:
        nvm_base = f"{home}/.nvm/versions/node"
        paths.extend(f"{nvm_base}/{version}/bin/{target}" for version in runtime_versions)
        paths.append(f"{home}/.local/bin/{target}")
    paths.extend([f"/usr/local/bin/{target}", f"/usr/bin/{target}"])
    return paths


def find_target_in_subsystem(
    distro: str,
    target: str,
    runner: Runner = run_command,
    timeout: float | None = None,
) -> str | None:
    """
    Find the target inside one distribution.

    Tries ``which`` first, then checks managed-runtime and fixed locations
    with ``test -f``.
    """
    wsl = _wsl_runner(runner)

    result = wsl(wsl_args("--", "which", target, distro=distro), timeout=timeout)
    if result is not None and result.ok:
        path = _clean_lookup_output(result.text())
        if path:
            return path

    home = subsystem_home_dir(distro, wsl, timeout)
    runtime_versions: list[str] = []
    if home:
        listing = wsl(wsl_args("--", "ls", "-1", f"{home}/.nvm/versions/node", distro=distro), timeout=timeout)
        if listing is not None and listing.ok:
            runtime_versions = sorted(
                line.strip() for line in listing.text().splitlines() if line.strip()
            )

    for path in subsystem_candidate_paths(home, target, runtime_versions):
        if _subsystem_file_exists(distro, path, wsl, timeout):
            return path

    return None


def probe_version_in_subsystem(
    distro: str,
    path: str,
    runner: Runner = run_command,
    timeout: float | None = None,
) -> str | None:
    """Run ``<path> --version`` inside a distribution and parse the version."""
    version, error = probe_version(
        wsl_args("--", path, "--version", distro=distro),
        timeout=timeout,
        runner=_wsl_runner(runner),
    )
    if error:
        vlog(f"WSL version probe failed for {path} in {distro}: {error}")
    return version
