"""
Host platform capabilities.

Scanners and the command bridge only differ between POSIX hosts and
Windows hosts (which may additionally carry WSL distributions). Each
variant is a Platform subclass; everything above the scanners is
platform-agnostic.
"""

from __future__ import annotations

import ntpath
import posixpath
import sys
from typing import Mapping


class Platform:
    """
    Capability interface for platform-dependent discovery details.

    Attributes:
        name: Platform identifier ("posix" or "windows")
        supports_subsystem: Whether WSL distributions and path bridging apply
        ambient_source: Source tag for the ambient lookup scanner
    """
    name = "generic"
    supports_subsystem = False
    ambient_source = "which"
    pathmod = posixpath

    def join(self, *parts: str) -> str:
        return self.pathmod.join(*parts)

    def executable_name(self, target: str) -> str:
        """File name of the target binary on this platform."""
        return target

    def bare_name(self, target: str) -> str:
        """Name used for the PATH-resolved fallback candidate."""
        return self.executable_name(target)

    def ambient_lookup_command(self, target: str) -> list[str]:
        return ["which", target]

    def parse_ambient_output(self, output: str, target: str) -> str | None:
        """Extract a path from the ambient lookup utility's output."""
        raise NotImplementedError

    def active_version_manager_bin(self, env: Mapping[str, str]) -> str | None:
        """Binary directory of the currently active managed Node runtime."""
        return None

    def version_manager_root(self, env: Mapping[str, str]) -> str | None:
        """Directory holding one subdirectory per installed Node runtime."""
        return None

    def version_manager_binary(self, runtime_dir: str, target: str) -> str:
        """Target binary path inside one runtime directory."""
        raise NotImplementedError

    def standard_locations(self, env: Mapping[str, str], target: str) -> list[tuple[str, str]]:
        """Ordered (path, source) pairs of well-known install locations."""
        return []

    def home_dir(self, env: Mapping[str, str]) -> str | None:
        """Home directory according to the given environment."""
        return env.get("HOME") or None

    def expand_user(self, path: str, env: Mapping[str, str]) -> str:
        """
        Expand a leading ``~`` against the home directory in ``env``.

        Unlike os.path.expanduser this never consults the process
        environment; without a home directory the path is returned as is.
        """
        if path != "~" and not path.startswith(("~/", "~\\")):
            return path
        home = self.home_dir(env)
        if not home:
            return path
        rest = path[2:]
        return self.join(home, rest) if rest else home


class PosixPlatform(Platform):
    """Linux and macOS hosts."""
    name = "posix"
    ambient_source = "which"
    pathmod = posixpath

    SYSTEM_LOCATIONS = (
        ("/usr/local/bin", "system"),
        ("/opt/homebrew/bin", "homebrew"),
        ("/usr/bin", "system"),
        ("/bin", "system"),
    )

    HOME_LOCATIONS = (
        (".claude/local", "claude-local"),
        (".local/bin", "local-bin"),
        (".npm-global/bin", "npm-global"),
        (".yarn/bin", "yarn"),
        (".bun/bin", "bun"),
        ("bin", "home-bin"),
        ("node_modules/.bin", "node-modules"),
        (".config/yarn/global/node_modules/.bin", "yarn-global"),
    )

    def parse_ambient_output(self, output: str, target: str) -> str | None:
        output = output.strip()
        if not output:
            return None

        # zsh-style alias output: "claude: aliased to /path/to/claude"
        if output.startswith(f"{target}:") and "aliased to" in output:
            path = output.split("aliased to", 1)[1].strip()
            return path or None

        return output.splitlines()[0].strip() or None

    def active_version_manager_bin(self, env: Mapping[str, str]) -> str | None:
        return env.get("NVM_BIN") or None

    def version_manager_root(self, env: Mapping[str, str]) -> str | None:
        home = env.get("HOME")
        if not home:
            return None
        return self.join(home, ".nvm", "versions", "node")

    def version_manager_binary(self, runtime_dir: str, target: str) -> str:
        return self.join(runtime_dir, "bin", target)

    def standard_locations(self, env: Mapping[str, str], target: str) -> list[tuple[str, str]]:
        locations = [(self.join(d, target), source) for d, source in self.SYSTEM_LOCATIONS]

        home = env.get("HOME")
        if home:
            locations.extend(
                (self.join(home, rel, target), source) for rel, source in self.HOME_LOCATIONS
            )

        return locations


class WindowsPlatform(Platform):
    """Native Windows hosts, optionally with WSL distributions."""
    name = "windows"
    supports_subsystem = True
    ambient_source = "where"
    pathmod = ntpath

    PROFILE_LOCATIONS = (
        (".claude\\local", ".exe", "claude-local"),
        (".local\\bin", ".exe", "local-bin"),
        ("AppData\\Roaming\\npm", ".cmd", "npm-global"),
        (".yarn\\bin", ".cmd", "yarn"),
        (".bun\\bin", ".exe", "bun"),
    )

    GIT_BASH_LOCATIONS = (
        r"C:\Program Files\Git\bin\bash.exe",
        r"C:\Program Files (x86)\Git\bin\bash.exe",
    )

    def executable_name(self, target: str) -> str:
        return f"{target}.exe"

    def ambient_lookup_command(self, target: str) -> list[str]:
        return ["where", target]

    def parse_ambient_output(self, output: str, target: str) -> str | None:
        # `where` prints every match on its own line; the first one wins
        for line in output.splitlines():
            line = line.strip()
            if line:
                return line
        return None

    def home_dir(self, env: Mapping[str, str]) -> str | None:
        return env.get("USERPROFILE") or env.get("HOME") or None

    def version_manager_root(self, env: Mapping[str, str]) -> str | None:
        return env.get("NVM_HOME") or None

    def version_manager_binary(self, runtime_dir: str, target: str) -> str:
        return self.join(runtime_dir, self.executable_name(target))

    def standard_locations(self, env: Mapping[str, str], target: str) -> list[tuple[str, str]]:
        profile = env.get("USERPROFILE")
        if not profile:
            return []
        return [
            (self.join(profile, rel, f"{target}{ext}"), source)
            for rel, ext, source in self.PROFILE_LOCATIONS
        ]


def current_platform() -> Platform:
    """Select the Platform implementation for the running host."""
    if sys.platform == "win32":
        return WindowsPlatform()
    return PosixPlatform()
