"""
Command bridge.

Builds invocations of the target that work regardless of where it lives:
natively, inside a WSL distribution (paths translated into the Linux
namespace, arguments quoted for bash), or under Git Bash.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from .common import CommandResult, Runner, run_command, vlog
from .platforms import Platform, current_platform
from .shells import ShellConfig, ShellEnvironment, wsl_args


WSL_UNC_PREFIXES = ("//wsl.localhost/", "//wsl$/")
DRIVE_MOUNT_PREFIX = "/mnt/"

# Environment variables forwarded to the target; everything else is dropped
PASSTHROUGH_ENV_VARS = frozenset({
    "PATH", "HOME", "USER", "SHELL", "LANG", "LC_ALL",
    "NODE_PATH", "NVM_DIR", "NVM_BIN",
    "HOMEBREW_PREFIX", "HOMEBREW_CELLAR",
    "HTTP_PROXY", "HTTPS_PROXY", "NO_PROXY", "ALL_PROXY",
})
PASSTHROUGH_ENV_PREFIXES = ("LC_",)

NVM_BIN_MARKER = "/.nvm/versions/node/"
HOMEBREW_MARKERS = ("/homebrew/", "/opt/homebrew/")


@dataclass(frozen=True)
class Invocation:
    """
    Fully specified process invocation.

    Attributes:
        argv: Program and arguments
        cwd: Working directory, None to inherit
        env: Complete child environment, None to inherit
    """
    argv: tuple[str, ...]
    cwd: str | None = None
    env: dict[str, str] | None = field(default=None, compare=False)

    def run(self, timeout: float | None = None, runner: Runner = run_command) -> CommandResult | None:
        """
        Execute the invocation and capture its output.

        Returns:
            CommandResult, or None if the process could not be spawned or timed out
        """
        return runner(self.argv, timeout=timeout, env=self.env, cwd=self.cwd)


def _is_passthrough(key: str) -> bool:
    return key in PASSTHROUGH_ENV_VARS or key.startswith(PASSTHROUGH_ENV_PREFIXES)


def _prepend_path(env: dict[str, str], directory: str) -> None:
    current = env.get("PATH", "")
    if directory and directory not in current:
        vlog(f"Adding {directory} to PATH")
        env["PATH"] = f"{directory}{os.pathsep}{current}" if current else directory


def _add_program_dir(env: dict[str, str], program: str) -> None:
    normalized = program.replace("\\", "/")
    if NVM_BIN_MARKER in normalized or any(m in normalized for m in HOMEBREW_MARKERS):
        _prepend_path(env, os.path.dirname(program))


def build_command_env(program: str, env: Mapping[str, str] | None = None) -> dict[str, str]:
    """
    Child environment for running the target.

    Only allow-listed variables (locale, proxy, Node/Homebrew prefixes) are
    forwarded. When the program lives in an nvm runtime or a Homebrew prefix
    its directory is put on PATH so interpreters next to it resolve.

    Args:
        program: Path (or bare name) of the program to run
        env: Source environment (os.environ when None)

    Returns:
        Filtered environment dictionary
    """
    source = os.environ if env is None else env
    child = {key: value for key, value in source.items() if _is_passthrough(key)}
    _add_program_dir(child, program)
    return child


def probe_env(program: str, env: Mapping[str, str] | None = None) -> dict[str, str]:
    """
    Child environment for a version probe.

    The whole source environment is kept (Windows needs SYSTEMROOT,
    PATHEXT and COMSPEC to start anything); only the nvm/Homebrew PATH
    prepend of build_command_env is applied.
    """
    child = dict(os.environ if env is None else env)
    _add_program_dir(child, program)
    return child


def translate_path(host_path: str, platform: Platform | None = None) -> str:
    """
    Convert a host path into the path seen from inside WSL.

    ``C:\\Users\\x\\proj`` becomes ``/mnt/c/Users/x/proj`` and
    ``\\\\wsl.localhost\\Ubuntu\\home\\x`` becomes ``/home/x``. Other UNC
    paths are approximated under ``/mnt/``. Paths already in Linux form
    pass through. On platforms without WSL this is the identity.
    """
    platform = platform or current_platform()
    if not platform.supports_subsystem:
        return host_path

    path = host_path.replace("\\", "/")

    for prefix in WSL_UNC_PREFIXES:
        if path.startswith(prefix):
            rest = path[len(prefix):]
            slash = rest.find("/")
            if slash >= 0:
                return rest[slash:]
            return f"/{rest}"

    if path.startswith("//"):
        return f"{DRIVE_MOUNT_PREFIX}{path[2:]}"

    if len(path) >= 2 and path[1] == ":":
        return f"{DRIVE_MOUNT_PREFIX}{path[0].lower()}{path[2:]}"

    return path


def quote_argument(arg: str) -> str:
    """Double-quote an argument for bash, escaping ``\\ " $ ```."""
    escaped = (
        arg.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("$", "\\$")
        .replace("`", "\\`")
    )
    return f'"{escaped}"'


def bash_command_line(target_path: str, args: Sequence[str], working_dir: str) -> str:
    """``cd '<dir>' && <target> "<arg>"...`` for ``bash -lc``."""
    quoted_dir = working_dir.replace("'", "'\\''")
    quoted_args = " ".join(quote_argument(a) for a in args)
    return f"cd '{quoted_dir}' && {target_path} {quoted_args}".rstrip()


def build_bridged_command(
    distro: str | None,
    target_path: str,
    args: Sequence[str],
    working_dir: str,
    platform: Platform | None = None,
    env: Mapping[str, str] | None = None,
) -> Invocation:
    """
    Build an invocation of a target living inside WSL.

    On Windows the command runs through ``wsl [-d distro] bash -lc`` after
    changing to the translated working directory. Elsewhere it degrades to
    a direct invocation.

    Args:
        distro: WSL distribution, None for the default one
        target_path: Target path inside the distribution
        args: Arguments for the target
        working_dir: Host working directory
        platform: Host platform (detected when None)
        env: Source environment for the allow-list filter

    Returns:
        Invocation
    """
    platform = platform or current_platform()
    if not platform.supports_subsystem:
        return Invocation(
            argv=(target_path, *args),
            cwd=working_dir,
            env=build_command_env(target_path, env),
        )

    command_line = bash_command_line(target_path, args, translate_path(working_dir, platform))
    vlog(f"WSL bash command: {command_line}")

    return Invocation(
        argv=tuple(wsl_args("bash", "-lc", command_line, distro=distro)),
        env=build_command_env("wsl", env),
    )


def build_alt_shell_command(
    shell_path: str,
    target_path: str,
    args: Sequence[str],
    working_dir: str,
    env: Mapping[str, str] | None = None,
) -> Invocation:
    """Build an invocation that runs the target through Git Bash's login shell."""
    posix_dir = working_dir.replace("\\", "/")
    command_line = bash_command_line(target_path.replace("\\", "/"), args, posix_dir)
    vlog(f"Git Bash command: {command_line}")
    return Invocation(
        argv=(shell_path, "-lc", command_line),
        cwd=working_dir,
        env=build_command_env(target_path, env),
    )


def build_invocation(
    target_path: str,
    args: Sequence[str],
    working_dir: str,
    shell_config: ShellConfig | None = None,
    platform: Platform | None = None,
    env: Mapping[str, str] | None = None,
) -> Invocation:
    """
    Build an invocation of the target according to the shell preference.

    The WSL and Git Bash modes only apply on platforms with a subsystem;
    elsewhere, and for the native mode, the target runs directly.
    """
    platform = platform or current_platform()
    config = shell_config or ShellConfig()

    if platform.supports_subsystem:
        if config.environment is ShellEnvironment.WSL:
            return build_bridged_command(
                config.subsystem_distro,
                config.subsystem_binary_path or target_path,
                args,
                working_dir,
                platform=platform,
                env=env,
            )
        if config.environment is ShellEnvironment.GIT_BASH and config.alt_shell_path:
            return build_alt_shell_command(config.alt_shell_path, target_path, args, working_dir, env=env)

    return Invocation(
        argv=(target_path, *args),
        cwd=working_dir,
        env=build_command_env(target_path, env),
    )
