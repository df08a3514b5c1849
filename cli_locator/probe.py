"""
Path probing: existence checks plus an optional ``--version`` probe.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from .common import Runner, is_regular_file, run_command, vlog
from .installation import ProbeResult
from .versions import extract_version


def probe_version(
    argv: Sequence[str],
    timeout: float | None = None,
    env: Mapping[str, str] | None = None,
    runner: Runner = run_command,
) -> tuple[str | None, str | None]:
    """
    Run a version command and parse its output.

    Args:
        argv: Full command line, e.g. ``[path, "--version"]``
        timeout: Timeout in seconds
        env: Environment for the child process
        runner: Subprocess runner

    Returns:
        Tuple of (version, error); at most one of them is set
    """
    result = runner(list(argv), timeout=timeout, env=env)
    if result is None:
        return None, "could not execute"
    if not result.ok:
        return None, f"exited with status {result.returncode}"

    version = extract_version(result.stdout)
    if version is None:
        return None, "no version in output"
    return version, None


def probe(
    path: str,
    timeout: float | None = None,
    env: Mapping[str, str] | None = None,
    runner: Runner = run_command,
    run_version: bool = True,
) -> ProbeResult | None:
    """
    Probe a candidate path.

    A present binary whose version cannot be determined is still returned,
    with ``version=None``; only a missing path yields None.

    Args:
        path: Candidate path
        timeout: Timeout for the version probe
        env: Environment for the version probe
        runner: Subprocess runner
        run_version: Execute ``<path> --version``

    Returns:
        ProbeResult, or None if the path is not an existing file
    """
    if not is_regular_file(path):
        return None

    if not run_version:
        return ProbeResult(path=path)

    version, error = probe_version([path, "--version"], timeout=timeout, env=env, runner=runner)
    if error:
        vlog(f"Version probe failed for {path}: {error}")
    return ProbeResult(path=path, version=version, error=error)
