"""
Common utilities shared across cli_locator modules.
"""

from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence


# Overridable through config (discovery.timeout_seconds, CLI_LOCATOR_TIMEOUT_SECONDS)
DEFAULT_TIMEOUT_SECONDS = 5.0

# Windows flag that keeps background console windows from flashing
CREATE_NO_WINDOW = 0x08000000


@dataclass(frozen=True)
class CommandResult:
    """
    Completed subprocess invocation.

    Attributes:
        returncode: Process exit status
        stdout: Raw standard output bytes
        stderr: Raw standard error bytes
    """
    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def text(self) -> str:
        """Standard output decoded as UTF-8 (lossy) and stripped."""
        return self.stdout.decode("utf-8", errors="replace").strip()


Runner = Callable[..., Optional[CommandResult]]


def run_command(
    args: Sequence[str],
    timeout: float | None = None,
    env: Mapping[str, str] | None = None,
    hide_window: bool = False,
    cwd: str | None = None,
) -> CommandResult | None:
    """
    Run a command with a bounded wait and capture raw output.

    Args:
        args: Command and arguments
        timeout: Timeout in seconds (default: DEFAULT_TIMEOUT_SECONDS)
        env: Environment for the child (inherits the caller's when None)
        hide_window: Suppress console window creation on Windows
        cwd: Working directory for the child (inherited when None)

    Returns:
        CommandResult, or None if the process could not be spawned or timed out
    """
    kwargs = {}
    if hide_window and sys.platform == "win32":
        kwargs["creationflags"] = CREATE_NO_WINDOW

    try:
        proc = subprocess.run(
            list(args),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,  # Isolate stdin
            timeout=timeout or DEFAULT_TIMEOUT_SECONDS,
            check=False,
            env=dict(env) if env is not None else None,
            cwd=cwd,
            **kwargs,
        )
    except subprocess.TimeoutExpired:
        vlog(f"Command timed out after {timeout or DEFAULT_TIMEOUT_SECONDS}s: {' '.join(args)}")
        return None
    except (OSError, ValueError) as e:
        vlog(f"Command could not be started: {' '.join(args)} ({e})")
        return None

    return CommandResult(
        returncode=proc.returncode,
        stdout=proc.stdout or b"",
        stderr=proc.stderr or b"",
    )


def is_regular_file(path: str) -> bool:
    """
    Check that a path exists and is a regular file.

    Permission errors and malformed paths count as "not a file".
    """
    try:
        return os.path.isfile(path)
    except (OSError, ValueError):
        return False


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log a debug-level message through the cli_locator logger.

    Messages are emitted at INFO when verbose is requested (or
    CLI_LOCATOR_DEBUG=1), at DEBUG otherwise.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    from .logging_config import DEBUG_ENV_VAR, get_logger

    logger = get_logger()
    if verbose or os.environ.get(DEBUG_ENV_VAR, "0") == "1":
        logger.info(msg)
    else:
        logger.debug(msg)
