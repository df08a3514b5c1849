"""
Data model for discovered installations and scanner results.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class InstallationKind(str, Enum):
    """Whether an installation was auto-discovered or specified by the user."""
    SYSTEM = "system"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Installation:
    """
    One discovered copy of the target executable.

    Attributes:
        path: Absolute path, or the bare command name when resolved via PATH
        version: Version reported by ``--version``, None if probing failed
        source: Tag of the scanner that found it (e.g. "which", "nvm (v20.1.0)")
        kind: SYSTEM for discovered installations, CUSTOM for user-specified ones
        subsystem_distro: WSL distribution the installation lives in, if any
    """
    path: str
    version: str | None
    source: str
    kind: InstallationKind = InstallationKind.SYSTEM
    subsystem_distro: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            "path": self.path,
            "version": self.version,
            "source": self.source,
            "installation_type": self.kind.value,
        }
        if self.subsystem_distro is not None:
            data["subsystem_distro"] = self.subsystem_distro
        return data


@dataclass(frozen=True)
class ScanResult:
    """
    Outcome of a single scanner.

    A scanner never raises; failures are recorded in ``error`` and
    contribute zero installations.

    Attributes:
        source: Scanner name
        installations: Candidates found, in discovery order
        checked: Locations examined (reported when nothing is found)
        error: Reason the scanner gave up early, if it did
    """
    source: str
    installations: tuple[Installation, ...] = ()
    checked: tuple[str, ...] = ()
    error: str | None = None

    @property
    def found(self) -> bool:
        return bool(self.installations)


@dataclass(frozen=True)
class ProbeResult:
    """
    Result of probing a candidate path.

    Attributes:
        path: Probed path
        version: Parsed version, None when the probe failed or printed none
        error: Why the version could not be determined
    """
    path: str
    version: str | None = None
    error: str | None = None
