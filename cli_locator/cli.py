"""
Command-line interface.

Usage:
    cli-locator                       # Print the selected binary path
    cli-locator list [--json]         # Every installation, best first
    cli-locator shells [--json]       # Detected shell environments
    cli-locator config show           # Persisted shell configuration
    cli-locator config set-env wsl    # Switch shell environment
    cli-locator config auto-wsl       # Detect the target in WSL and save it
    cli-locator translate PATH        # Host path as seen from WSL
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from typing import Sequence

from .bridge import translate_path
from .config import load_config, validate_config
from .locator import BinaryNotFoundError, auto_detect_subsystem, discover_installations, find_binary
from .logging_config import get_logger, setup_logging
from .render import render_installations, render_shells
from .selection import select_best
from .settings import FileSettingsStore, SettingsError, load_shell_config, save_binary_path, save_shell_config
from .shells import ShellEnvironment, detect_shells


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cli-locator",
        description="Locate installations of a CLI tool across package managers, nvm and WSL.",
    )
    parser.add_argument("--target", help="Command name to locate (default: claude)")
    parser.add_argument("--config", help="Path to a configuration file")
    parser.add_argument("--settings", help="Path to the JSON settings file")
    parser.add_argument("--parallel", action="store_true", help="Run scanners concurrently")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    parser.add_argument("--quiet", "-q", action="store_true", help="Only log warnings and errors")
    parser.add_argument("--log-file", help="Also write a debug log to this file")

    sub = parser.add_subparsers(dest="command")

    find = sub.add_parser("find", help="Print the selected binary path")
    find.add_argument("--save", action="store_true", help="Store the result as the binary path override")

    list_cmd = sub.add_parser("list", help="List every installation")
    list_cmd.add_argument("--json", action="store_true", help="Emit JSON")

    shells = sub.add_parser("shells", help="Detect shell environments")
    shells.add_argument("--json", action="store_true", help="Emit JSON")

    config = sub.add_parser("config", help="Show or change the shell configuration")
    config_sub = config.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Print the shell configuration")
    set_env = config_sub.add_parser("set-env", help="Set the shell environment")
    set_env.add_argument("environment", help="native, wsl or gitbash")
    set_env.add_argument("--distro", help="WSL distribution")
    auto = config_sub.add_parser("auto-wsl", help="Detect the target in WSL and save the configuration")
    auto.add_argument("--distro", help="WSL distribution to check")
    config_sub.add_parser("clear-path", help="Forget the stored binary path override")

    translate = sub.add_parser("translate", help="Translate a host path for WSL")
    translate.add_argument("path")

    return parser


def _cmd_find(args, config, store) -> int:
    try:
        path = find_binary(config, store)
    except BinaryNotFoundError as e:
        get_logger().error(str(e))
        return 1
    if args.save:
        save_binary_path(store, path)
    print(path)
    return 0


def _cmd_list(args, config, store) -> int:
    installations = discover_installations(config)
    if args.json:
        print(json.dumps([inst.to_dict() for inst in installations], indent=2))
        return 0 if installations else 1

    if not installations:
        get_logger().error(f"No installations of {config.target} found")
        return 1
    render_installations(installations, selected=select_best(installations))
    return 0


def _cmd_shells(args, config, store) -> int:
    shells = detect_shells(timeout=config.timeout_seconds)
    if args.json:
        print(json.dumps(shells.to_dict(), indent=2))
    else:
        render_shells(shells)
    return 0


def _cmd_config(args, config, store) -> int:
    if args.config_command in (None, "show"):
        print(json.dumps(load_shell_config(store).to_dict(), indent=2))
        return 0

    if args.config_command == "set-env":
        try:
            environment = ShellEnvironment.parse(args.environment)
        except ValueError as e:
            get_logger().error(str(e))
            return 2
        current = load_shell_config(store)
        updated = replace(current, environment=environment)
        if args.distro:
            updated = replace(updated, subsystem_distro=args.distro)
        save_shell_config(store, updated)
        print(json.dumps(updated.to_dict(), indent=2))
        return 0

    if args.config_command == "auto-wsl":
        detected = auto_detect_subsystem(store, args.distro, config)
        if detected is None:
            return 1
        print(json.dumps(detected.to_dict(), indent=2))
        return 0

    if args.config_command == "clear-path":
        save_binary_path(store, None)
        return 0

    return 2


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)

    try:
        config = load_config(args.config, verbose=args.verbose)
    except ValueError as e:
        get_logger().error(str(e))
        return 2

    overrides = {}
    if args.target:
        overrides["target"] = args.target
    if args.parallel:
        overrides["parallel_scan"] = True
    if args.settings:
        overrides["settings_file"] = args.settings
    if overrides:
        try:
            config = replace(config, **overrides)
        except ValueError as e:
            get_logger().error(str(e))
            return 2

    for warning in validate_config(config):
        get_logger().warning(warning)

    store = FileSettingsStore(config.settings_file)

    command = args.command or "find"
    if command == "find" and not hasattr(args, "save"):
        args.save = False

    try:
        if command == "find":
            return _cmd_find(args, config, store)
        if command == "list":
            return _cmd_list(args, config, store)
        if command == "shells":
            return _cmd_shells(args, config, store)
        if command == "config":
            return _cmd_config(args, config, store)
        if command == "translate":
            print(translate_path(args.path))
            return 0
    except SettingsError as e:
        get_logger().error(str(e))
        return 1

    parser.print_help()
    return 2


if __name__ == "__main__":
    sys.exit(main())
