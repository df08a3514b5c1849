"""
Source scanners.

Each scanner enumerates candidate installations from a single origin and
returns a ScanResult. Scanners share no state and never raise: missing
directories, permission errors, unset variables and failing subprocesses
all turn into an empty contribution.

Declared order matters. The catalog keeps the first occurrence of a
duplicate path, so earlier scanners decide which source and version a
path is reported with.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from typing import Callable, Mapping

from .bridge import probe_env
from .common import DEFAULT_TIMEOUT_SECONDS, Runner, run_command, vlog
from .installation import Installation, InstallationKind, ScanResult
from .logging_config import get_logger
from .platforms import Platform, current_platform
from .probe import probe
from .shells import find_target_in_subsystem, list_subsystem_distributions, probe_version_in_subsystem
from .versions import extract_version


DEFAULT_TARGET = "claude"


@dataclass(frozen=True)
class ScanContext:
    """
    Inputs shared by all scanners for one discovery pass.

    Attributes:
        target: Command name to look for
        env: Environment variables (injected rather than read from os.environ)
        platform: Host platform capabilities
        timeout: Timeout for every subprocess call, in seconds
        runner: Subprocess runner
        probe_versions: Execute ``--version`` on candidates
        extra_paths: User-specified locations, reported as CUSTOM installations
    """
    target: str = DEFAULT_TARGET
    env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    platform: Platform = field(default_factory=current_platform)
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    runner: Runner = run_command
    probe_versions: bool = True
    extra_paths: tuple[str, ...] = ()


Scanner = Callable[[ScanContext], ScanResult]


def _installation_at(
    ctx: ScanContext,
    path: str,
    source: str,
    kind: InstallationKind = InstallationKind.SYSTEM,
) -> Installation | None:
    result = probe(
        path,
        timeout=ctx.timeout,
        env=probe_env(path, ctx.env),
        runner=ctx.runner,
        run_version=ctx.probe_versions,
    )
    if result is None:
        return None

    vlog(f"Found {ctx.target} at {path} ({source}, version: {result.version})")
    return Installation(path=path, version=result.version, source=source, kind=kind)


def scan_custom_paths(ctx: ScanContext) -> ScanResult:
    """Locations configured by the user."""
    found = []
    for path in ctx.extra_paths:
        expanded = ctx.platform.expand_user(path, ctx.env)
        inst = _installation_at(ctx, expanded, "custom", InstallationKind.CUSTOM)
        if inst:
            found.append(inst)
    return ScanResult(source="custom", installations=tuple(found), checked=tuple(ctx.extra_paths))


def scan_ambient(ctx: ScanContext) -> ScanResult:
    """
    Resolve the target with the platform's lookup utility (``which``/``where``).
    """
    source = ctx.platform.ambient_source
    vlog(f"Trying '{source} {ctx.target}' to find binary...")

    result = ctx.runner(ctx.platform.ambient_lookup_command(ctx.target), timeout=ctx.timeout, env=ctx.env)
    checked = (f"PATH ({source})",)
    if result is None:
        return ScanResult(source=source, checked=checked, error=f"'{source}' could not be executed")
    if not result.ok:
        return ScanResult(source=source, checked=checked)

    path = ctx.platform.parse_ambient_output(result.text(), ctx.target)
    if not path:
        return ScanResult(source=source, checked=checked)

    inst = _installation_at(ctx, path, source)
    if inst is None:
        get_logger().warning(f"Path from '{source}' does not exist: {path}")
        return ScanResult(source=source, checked=checked)

    return ScanResult(source=source, installations=(inst,), checked=checked)


def scan_version_manager_active(ctx: ScanContext) -> ScanResult:
    """The target inside the currently active nvm runtime (``NVM_BIN``)."""
    bin_dir = ctx.platform.active_version_manager_bin(ctx.env)
    if not bin_dir:
        return ScanResult(source="nvm-active")

    path = ctx.platform.join(bin_dir, ctx.platform.executable_name(ctx.target))
    inst = _installation_at(ctx, path, "nvm-active")
    return ScanResult(
        source="nvm-active",
        installations=(inst,) if inst else (),
        checked=(path,),
    )


def scan_version_manager_dirs(ctx: ScanContext) -> ScanResult:
    """
    The target inside every installed nvm runtime.

    Runtime folders are visited in sorted order so repeated scans report
    candidates identically regardless of directory iteration order.
    """
    root = ctx.platform.version_manager_root(ctx.env)
    if not root:
        return ScanResult(source="nvm")

    vlog(f"Checking NVM directory: {root}")
    try:
        with os.scandir(root) as it:
            runtimes = sorted(
                (entry.name, entry.path) for entry in it if entry.is_dir()
            )
    except FileNotFoundError:
        return ScanResult(source="nvm", checked=(root,))
    except OSError as e:
        return ScanResult(source="nvm", checked=(root,), error=str(e))

    found = []
    for name, runtime_dir in runtimes:
        path = ctx.platform.version_manager_binary(runtime_dir, ctx.target)
        inst = _installation_at(ctx, path, f"nvm ({name})")
        if inst:
            found.append(inst)

    return ScanResult(source="nvm", installations=tuple(found), checked=(root,))


def scan_standard_paths(ctx: ScanContext) -> ScanResult:
    """
    Well-known install locations, then the bare command name via PATH.

    The bare-name candidate is only added when ``<target> --version``
    succeeds (or, with probing disabled, when PATH resolves it).
    """
    found = []
    checked = []

    for path, source in ctx.platform.standard_locations(ctx.env, ctx.target):
        checked.append(path)
        inst = _installation_at(ctx, path, source)
        if inst:
            found.append(inst)

    bare = ctx.platform.bare_name(ctx.target)
    bare_inst = _bare_name_installation(ctx, bare)
    if bare_inst:
        found.append(bare_inst)

    return ScanResult(source="standard", installations=tuple(found), checked=tuple(checked))


def _bare_name_installation(ctx: ScanContext, bare: str) -> Installation | None:
    if not ctx.probe_versions:
        if shutil.which(bare, path=ctx.env.get("PATH")):
            return Installation(path=bare, version=None, source="PATH")
        return None

    result = ctx.runner([bare, "--version"], timeout=ctx.timeout, env=ctx.env)
    if result is None or not result.ok:
        return None

    vlog(f"{bare} is available in PATH")
    return Installation(path=bare, version=extract_version(result.stdout), source="PATH")


def scan_subsystem(ctx: ScanContext) -> ScanResult:
    """
    The target inside every WSL distribution (Windows hosts only).

    Lookup and version probes both run through ``wsl -d <distro>``.
    """
    if not ctx.platform.supports_subsystem:
        return ScanResult(source="wsl")

    vlog(f"Checking for {ctx.target} installations in WSL...")
    distros = list_subsystem_distributions(ctx.runner, ctx.timeout)

    found = []
    for distro in distros:
        path = find_target_in_subsystem(distro, ctx.target, ctx.runner, ctx.timeout)
        if not path:
            continue

        version = None
        if ctx.probe_versions:
            version = probe_version_in_subsystem(distro, path, ctx.runner, ctx.timeout)

        vlog(f"Found {ctx.target} in WSL {distro}: {path}")
        found.append(Installation(
            path=path,
            version=version,
            source=f"wsl ({distro})",
            subsystem_distro=distro,
        ))

    return ScanResult(
        source="wsl",
        installations=tuple(found),
        checked=tuple(f"wsl ({d})" for d in distros),
    )


SCANNERS: tuple[Scanner, ...] = (
    scan_custom_paths,
    scan_ambient,
    scan_version_manager_active,
    scan_version_manager_dirs,
    scan_standard_paths,
    scan_subsystem,
)
