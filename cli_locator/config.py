"""
Configuration file parsing and management.

Supports YAML configuration files (JSON accepted for ``.json`` paths).
Merges configurations from multiple sources (project → user → system → defaults),
then applies ``CLI_LOCATOR_*`` environment overrides.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from typing import Any, Mapping

import yaml

from .common import vlog
from .scanners import DEFAULT_TARGET
from .settings import DEFAULT_SETTINGS_FILE


# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    ".cli-locator.yml",                                      # Project root (highest priority)
    ".cli-locator.yaml",
    os.path.expanduser("~/.config/cli-locator/config.yml"),  # User global
    os.path.expanduser("~/.config/cli-locator/config.yaml"),
    "/etc/cli-locator/config.yml",                           # System global
    "/etc/cli-locator/config.yaml",
]

DEFAULT_TIMEOUT_SECONDS = 5


@dataclass(frozen=True)
class Config:
    """
    Complete configuration for the locator.

    Attributes:
        version: Config schema version
        target: Command name to locate
        timeout_seconds: Timeout for every subprocess probe
        parallel_scan: Run scanners concurrently
        probe_versions: Execute ``--version`` on candidates
        settings_file: Path of the JSON settings store
        extra_paths: Additional user-specified binary locations
        source: Path to the configuration file that was loaded
    """
    version: int = 1
    target: str = DEFAULT_TARGET
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    parallel_scan: bool = False
    probe_versions: bool = True
    settings_file: str = DEFAULT_SETTINGS_FILE
    extra_paths: tuple[str, ...] = field(default_factory=tuple)
    source: str = ""

    def __post_init__(self):
        """Validate config after initialization."""
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

        if not self.target or any(c in self.target for c in "/\\ "):
            raise ValueError(
                f"Invalid target: {self.target!r}. Must be a bare command name"
            )

        if self.timeout_seconds < 1 or self.timeout_seconds > 60:
            raise ValueError(
                f"Invalid timeout_seconds: {self.timeout_seconds}. "
                "Must be between 1 and 60"
            )

        if not isinstance(self.extra_paths, tuple) or not all(isinstance(p, str) and p for p in self.extra_paths):
            raise ValueError(
                f"Invalid extra_paths: {self.extra_paths!r}. Must be a tuple of non-empty paths"
            )

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary."""
        discovery = data.get("discovery", {}) or {}
        extra_paths = discovery.get("extra_paths", []) or []
        if isinstance(extra_paths, str):
            # A single path written as a YAML scalar
            extra_paths = [extra_paths]
        elif not isinstance(extra_paths, (list, tuple)):
            raise ValueError(
                f"Invalid discovery.extra_paths: {extra_paths!r}. Must be a list of paths"
            )

        return Config(
            version=data.get("version", 1),
            target=data.get("target", DEFAULT_TARGET),
            timeout_seconds=discovery.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
            parallel_scan=discovery.get("parallel", False),
            probe_versions=discovery.get("probe_versions", True),
            settings_file=data.get("settings_file", DEFAULT_SETTINGS_FILE),
            extra_paths=tuple(str(p) for p in extra_paths if p is not None),
            source=source,
        )

    def merge_with(self, other: Config) -> Config:
        """
        Merge this config with another, preferring values from this config.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged Config object
        """
        merged_paths = self.extra_paths + tuple(p for p in other.extra_paths if p not in self.extra_paths)

        return Config(
            version=self.version,
            target=self.target if self.target != DEFAULT_TARGET else other.target,
            timeout_seconds=self.timeout_seconds if self.timeout_seconds != DEFAULT_TIMEOUT_SECONDS else other.timeout_seconds,
            parallel_scan=self.parallel_scan or other.parallel_scan,
            probe_versions=self.probe_versions and other.probe_versions,
            settings_file=self.settings_file if self.settings_file != DEFAULT_SETTINGS_FILE else other.settings_file,
            extra_paths=merged_paths,
            source=self.source or other.source,
        )


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """Load a YAML file; None if unreadable or invalid."""
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return None


def _load_json(file_path: str) -> dict[str, Any] | None:
    """Load a JSON file; None if unreadable or invalid."""
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, json.JSONDecodeError):
        return None


def load_config_file(file_path: str, verbose: bool = False) -> Config | None:
    """
    Load configuration from a single file.

    Args:
        file_path: Path to configuration file (YAML, or JSON by extension)
        verbose: Enable verbose logging

    Returns:
        Config object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    if file_path.endswith(".json"):
        data = _load_json(file_path)
    else:
        data = _load_yaml(file_path)

    if data is None:
        vlog(f"Invalid config file: {file_path}", verbose)
        return None

    try:
        config = Config.from_dict(data, source=file_path)
        vlog(f"Loaded config successfully: {file_path}", verbose)
        return config
    except (ValueError, TypeError) as e:
        vlog(f"Config validation failed for {file_path}: {e}", verbose)
        return None


def apply_env_overrides(config: Config, env: Mapping[str, str] | None = None) -> Config:
    """
    Apply ``CLI_LOCATOR_TARGET``, ``CLI_LOCATOR_TIMEOUT_SECONDS`` and
    ``CLI_LOCATOR_SETTINGS_FILE`` overrides.

    Raises:
        ValueError: If an override has an invalid value
    """
    env = os.environ if env is None else env
    changes: dict[str, Any] = {}

    if env.get("CLI_LOCATOR_TARGET"):
        changes["target"] = env["CLI_LOCATOR_TARGET"]
    if env.get("CLI_LOCATOR_TIMEOUT_SECONDS"):
        try:
            changes["timeout_seconds"] = int(float(env["CLI_LOCATOR_TIMEOUT_SECONDS"]))
        except ValueError:
            raise ValueError(
                f"Invalid CLI_LOCATOR_TIMEOUT_SECONDS: {env['CLI_LOCATOR_TIMEOUT_SECONDS']}"
            ) from None
    if env.get("CLI_LOCATOR_SETTINGS_FILE"):
        changes["settings_file"] = env["CLI_LOCATOR_SETTINGS_FILE"]

    return replace(config, **changes) if changes else config


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
    env: Mapping[str, str] | None = None,
) -> Config:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Environment overrides
    2. Custom path (if provided)
    3. Project .cli-locator.yml
    4. User ~/.config/cli-locator/config.yml
    5. System /etc/cli-locator/config.yml
    6. Default configuration

    Raises:
        ValueError: If custom_path is provided but file cannot be loaded
    """
    configs: list[Config] = []

    if custom_path:
        config = load_config_file(custom_path, verbose)
        if config is None:
            raise ValueError(f"Could not load config from specified path: {custom_path}")
        configs.append(config)
        vlog(f"Using custom config: {custom_path}", verbose)

    for location in CONFIG_LOCATIONS:
        config = load_config_file(location, verbose)
        if config is not None:
            configs.append(config)
            vlog(f"Found config at: {location}", verbose)

    if not configs:
        vlog("No config files found, using defaults", verbose)
        return apply_env_overrides(Config(), env)

    merged = configs[0]
    for config in configs[1:]:
        merged = merged.merge_with(config)

    vlog(f"Merged {len(configs)} config files", verbose)
    return apply_env_overrides(merged, env)


def validate_config(config: Config) -> list[str]:
    """
    Validate configuration and return list of warnings.

    Args:
        config: Config object to validate

    Returns:
        List of validation warning messages (empty if valid)
    """
    warnings = []

    if len(config.extra_paths) != len(set(config.extra_paths)):
        warnings.append("Duplicate entries in discovery.extra_paths")

    for path in config.extra_paths:
        expanded = os.path.expanduser(path)
        if not os.path.isabs(expanded):
            warnings.append(f"Extra path is not absolute: {path}")
        elif not os.path.exists(expanded):
            warnings.append(f"Extra path does not exist: {path}")

    if not config.probe_versions:
        warnings.append("Version probing disabled: installations will be ranked without versions")

    return warnings
