"""
cli-locator - Find, rank and invoke installations of a CLI tool.

Core Modules:
- Discovery: Source scanners, installation catalog, selection policy
- Versions: Version extraction from ``--version`` output and comparison
- Shells: WSL and Git Bash detection on Windows hosts
- Bridge: Path translation and invocation building across shell environments
- Settings: Persisted binary override and shell configuration
"""

__version__ = "1.0.0"
__author__ = "cli-locator Contributors"

VERSION = __version__

# Data model
from .installation import Installation, InstallationKind, ScanResult, ProbeResult

# Versions and probing
from .versions import extract_version, compare_versions, is_prerelease
from .probe import probe, probe_version

# Platforms
from .platforms import Platform, PosixPlatform, WindowsPlatform, current_platform

# Discovery
from .scanners import (
    ScanContext,
    SCANNERS,
    scan_custom_paths,
    scan_ambient,
    scan_version_manager_active,
    scan_version_manager_dirs,
    scan_standard_paths,
    scan_subsystem,
)
from .catalog import (
    Catalog,
    build_catalog,
    discover_all,
    deduplicate,
    sort_installations,
    source_preference,
)
from .selection import select_best, compare_installations, is_bare_name

# Shell environments
from .shells import (
    ShellEnvironment,
    ShellConfig,
    SubsystemDistribution,
    AvailableShells,
    detect_shells,
    check_target_in_subsystem,
    decode_console_output,
    parse_distribution_list,
)

# Command bridge
from .bridge import (
    Invocation,
    translate_path,
    quote_argument,
    build_bridged_command,
    build_command_env,
    build_invocation,
    probe_env,
)

# Settings and configuration
from .settings import (
    SettingsStore,
    SettingsError,
    FileSettingsStore,
    MemorySettingsStore,
    load_shell_config,
    save_shell_config,
    load_stored_binary_path,
    save_binary_path,
)
from .config import Config, load_config, load_config_file, validate_config

# Top-level lookup
from .locator import (
    BinaryNotFoundError,
    find_binary,
    discover_installations,
    auto_detect_subsystem,
)

# Logging configuration
from .logging_config import setup_logging, get_logger

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Data model
    "Installation",
    "InstallationKind",
    "ScanResult",
    "ProbeResult",
    # Versions and probing
    "extract_version",
    "compare_versions",
    "is_prerelease",
    "probe",
    "probe_version",
    # Platforms
    "Platform",
    "PosixPlatform",
    "WindowsPlatform",
    "current_platform",
    # Discovery
    "ScanContext",
    "SCANNERS",
    "scan_custom_paths",
    "scan_ambient",
    "scan_version_manager_active",
    "scan_version_manager_dirs",
    "scan_standard_paths",
    "scan_subsystem",
    "Catalog",
    "build_catalog",
    "discover_all",
    "deduplicate",
    "sort_installations",
    "source_preference",
    "select_best",
    "compare_installations",
    "is_bare_name",
    # Shell environments
    "ShellEnvironment",
    "ShellConfig",
    "SubsystemDistribution",
    "AvailableShells",
    "detect_shells",
    "check_target_in_subsystem",
    "decode_console_output",
    "parse_distribution_list",
    # Command bridge
    "Invocation",
    "translate_path",
    "quote_argument",
    "build_bridged_command",
    "build_command_env",
    "build_invocation",
    "probe_env",
    # Settings and configuration
    "SettingsStore",
    "SettingsError",
    "FileSettingsStore",
    "MemorySettingsStore",
    "load_shell_config",
    "save_shell_config",
    "load_stored_binary_path",
    "save_binary_path",
    "Config",
    "load_config",
    "load_config_file",
    "validate_config",
    # Top-level lookup
    "BinaryNotFoundError",
    "find_binary",
    "discover_installations",
    "auto_detect_subsystem",
    # Logging
    "setup_logging",
    "get_logger",
]
