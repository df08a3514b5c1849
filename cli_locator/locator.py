"""
Top-level lookup of the target binary.

Combines the stored user override, the discovery pass and the selection
policy into a single answer, and wires WSL auto-detection into the
persisted shell configuration.
"""

from __future__ import annotations

import os
from typing import Mapping

from .catalog import Catalog, build_catalog, sort_installations
from .common import Runner, is_regular_file, run_command, vlog
from .config import Config
from .installation import Installation
from .logging_config import get_logger
from .platforms import Platform, current_platform
from .scanners import ScanContext
from .selection import select_best
from .settings import SettingsStore, load_installation_preference, load_stored_binary_path, save_shell_config
from .shells import ShellConfig, ShellEnvironment, check_target_in_subsystem, detect_shells


class BinaryNotFoundError(LookupError):
    """
    No installation of the target exists in any scanned location.

    Attributes:
        target: Command name that was searched for
        checked: Locations that were examined
    """

    def __init__(self, target: str, checked: tuple[str, ...] = ()):
        self.target = target
        self.checked = checked
        locations = ", ".join(checked) if checked else "PATH"
        super().__init__(
            f"{target} not found. Please ensure it's installed in one of these locations: {locations}"
        )


def make_context(
    config: Config | None = None,
    env: Mapping[str, str] | None = None,
    platform: Platform | None = None,
    runner: Runner = run_command,
) -> ScanContext:
    """Build scan inputs from a Config and an environment mapping."""
    config = config or Config()
    return ScanContext(
        target=config.target,
        env=dict(os.environ if env is None else env),
        platform=platform or current_platform(),
        timeout=config.timeout_seconds,
        runner=runner,
        probe_versions=config.probe_versions,
        extra_paths=config.extra_paths,
    )


def discover_catalog(
    config: Config | None = None,
    env: Mapping[str, str] | None = None,
    platform: Platform | None = None,
    runner: Runner = run_command,
) -> Catalog:
    """Run one discovery pass with the configured inputs."""
    config = config or Config()
    ctx = make_context(config, env, platform, runner)
    return build_catalog(ctx, parallel=config.parallel_scan)


def discover_installations(
    config: Config | None = None,
    env: Mapping[str, str] | None = None,
    platform: Platform | None = None,
    runner: Runner = run_command,
) -> list[Installation]:
    """
    Every installation of the target, best first.

    Intended for listings where the user picks a version.
    """
    get_logger().info("Discovering all installations...")
    catalog = discover_catalog(config, env, platform, runner)
    return sort_installations(catalog.installations)


def find_binary(
    config: Config | None = None,
    store: SettingsStore | None = None,
    env: Mapping[str, str] | None = None,
    platform: Platform | None = None,
    runner: Runner = run_command,
) -> str:
    """
    Resolve the path of the target binary.

    A stored override wins while it still points to an existing file.
    Otherwise every scanner runs and the selection policy picks one.

    Raises:
        BinaryNotFoundError: If no installation exists anywhere scanned
    """
    config = config or Config()
    get_logger().info(f"Searching for {config.target} binary...")

    stored = load_stored_binary_path(store)
    if stored:
        if is_regular_file(stored):
            get_logger().info(f"Using stored {config.target} path: {stored}")
            return stored
        get_logger().warning(f"Stored {config.target} path no longer exists: {stored}")

    preference = load_installation_preference(store)
    vlog(f"Installation preference: {preference}")

    catalog = discover_catalog(config, env, platform, runner)
    if not catalog.installations:
        get_logger().error(f"Could not find {config.target} binary in any location")
        raise BinaryNotFoundError(config.target, catalog.checked)

    for inst in catalog.installations:
        vlog(f"Found installation: {inst.path} ({inst.source}, version: {inst.version})")

    best = select_best(catalog.installations)
    if best is None:
        raise BinaryNotFoundError(config.target, catalog.checked)
    get_logger().info(f"Selected {config.target}: path={best.path}, version={best.version}, source={best.source}")
    return best.path


def auto_detect_subsystem(
    store: SettingsStore,
    distro: str | None = None,
    config: Config | None = None,
    platform: Platform | None = None,
    runner: Runner = run_command,
) -> ShellConfig | None:
    """
    Find the target inside WSL and switch the shell configuration to it.

    The distribution checked is ``distro`` if given, else the default
    distribution, else the first one listed.

    Returns:
        The saved ShellConfig, or None if WSL or the target is absent

    Raises:
        SettingsError: If the configuration cannot be saved
    """
    config = config or Config()
    platform = platform or current_platform()

    shells = detect_shells(platform, runner, config.timeout_seconds)
    if not shells.subsystem_distributions:
        get_logger().info("No WSL distributions found")
        return None

    target_distro = distro
    if target_distro is None and shells.default_distribution:
        target_distro = shells.default_distribution.name

    path = check_target_in_subsystem(
        config.target,
        target_distro,
        platform=platform,
        runner=runner,
        timeout=config.timeout_seconds,
    )
    if not path:
        get_logger().warning(f"{config.target} not found in any WSL distribution")
        return None

    get_logger().info(f"Found {config.target} at {path} in WSL distro {target_distro}")
    shell_config = ShellConfig(
        environment=ShellEnvironment.WSL,
        subsystem_distro=target_distro,
        subsystem_binary_path=path,
        alt_shell_path=shells.alt_shell_path,
    )
    save_shell_config(store, shell_config)
    return shell_config
