"""
Persisted settings.

The locator only talks to a SettingsStore (get/set/delete by key). A
JSON-file store and an in-memory store are provided. Reads degrade to
defaults when the store is missing or broken; explicit saves raise
SettingsError so the user hears about it.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

from .common import vlog
from .logging_config import get_logger
from .shells import ShellConfig, ShellEnvironment


KEY_BINARY_PATH = "binary_path"
KEY_INSTALLATION_PREFERENCE = "installation_preference"
KEY_SHELL_ENVIRONMENT = "shell_environment"
KEY_SUBSYSTEM_DISTRO = "subsystem_distro"
KEY_SUBSYSTEM_BINARY_PATH = "subsystem_binary_path"
KEY_ALT_SHELL_PATH = "alt_shell_path"

DEFAULT_INSTALLATION_PREFERENCE = "system"
DEFAULT_SETTINGS_FILE = "~/.config/cli-locator/settings.json"


class SettingsError(Exception):
    """Raised when settings cannot be written."""


class SettingsStore(Protocol):
    """String-keyed settings storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemorySettingsStore:
    """Settings kept in a dictionary."""

    def __init__(self, values: dict[str, str] | None = None):
        self.values = dict(values or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


class FileSettingsStore:
    """
    Settings persisted as a flat JSON object.

    A missing or unreadable file reads as empty. Writes replace the file
    atomically.
    """

    def __init__(self, path: str | Path):
        self.path = Path(os.path.expanduser(str(path)))

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            # ValueError covers JSONDecodeError and UnicodeDecodeError
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            get_logger().warning(f"Settings file unreadable, using defaults: {self.path} ({e})")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _write(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".settings-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, sort_keys=True)
                    f.write("\n")
                os.replace(tmp_path, self.path)
            except OSError:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise SettingsError(f"Failed to write settings to {self.path}: {e}") from e

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._write(data)


def _safe_get(store: SettingsStore | None, key: str) -> str | None:
    if store is None:
        return None
    try:
        return store.get(key)
    except (OSError, SettingsError) as e:
        get_logger().warning(f"Settings store unavailable ({e}); ignoring {key}")
        return None


def load_stored_binary_path(store: SettingsStore | None) -> str | None:
    """Binary path override saved by the user, if any."""
    return _safe_get(store, KEY_BINARY_PATH)


def save_binary_path(store: SettingsStore, path: str | None) -> None:
    """Save (or clear, with None) the binary path override."""
    if path:
        store.set(KEY_BINARY_PATH, path)
    else:
        store.delete(KEY_BINARY_PATH)


def load_installation_preference(store: SettingsStore | None) -> str:
    """User preference between installation kinds (default "system")."""
    return _safe_get(store, KEY_INSTALLATION_PREFERENCE) or DEFAULT_INSTALLATION_PREFERENCE


def load_shell_config(store: SettingsStore | None) -> ShellConfig:
    """
    Read the shell configuration.

    Missing keys, unknown environment names and an unavailable store all
    fall back to defaults.
    """
    raw_env = _safe_get(store, KEY_SHELL_ENVIRONMENT)
    environment = ShellEnvironment.NATIVE
    if raw_env:
        try:
            environment = ShellEnvironment.parse(raw_env)
        except ValueError:
            get_logger().warning(f"Ignoring unknown shell environment setting: {raw_env}")

    return ShellConfig(
        environment=environment,
        subsystem_distro=_safe_get(store, KEY_SUBSYSTEM_DISTRO),
        subsystem_binary_path=_safe_get(store, KEY_SUBSYSTEM_BINARY_PATH),
        alt_shell_path=_safe_get(store, KEY_ALT_SHELL_PATH),
    )


def save_shell_config(store: SettingsStore, config: ShellConfig) -> None:
    """
    Persist the shell configuration.

    Optional fields that are None are deleted from the store.

    Raises:
        SettingsError: If the store cannot be written
    """
    get_logger().info(f"Saving shell configuration: {config.environment}")

    optional = (
        (KEY_SUBSYSTEM_DISTRO, config.subsystem_distro),
        (KEY_SUBSYSTEM_BINARY_PATH, config.subsystem_binary_path),
        (KEY_ALT_SHELL_PATH, config.alt_shell_path),
    )
    try:
        store.set(KEY_SHELL_ENVIRONMENT, config.environment.value)
        for key, value in optional:
            if value is not None:
                store.set(key, value)
            else:
                store.delete(key)
    except OSError as e:
        raise SettingsError(f"Failed to save shell configuration: {e}") from e

    vlog("Shell configuration saved successfully")
