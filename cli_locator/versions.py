"""
Version extraction and comparison for ``--version`` probe output.
"""

from __future__ import annotations

import re

from packaging.version import InvalidVersion, Version

from .common import vlog


VERSION_RE = re.compile(r"(\d+\.\d+\.\d+(?:-[a-zA-Z0-9.-]+)?(?:\+[a-zA-Z0-9.-]+)?)")
_LEADING_DIGITS_RE = re.compile(r"^\d+")


def extract_version(raw_output: bytes | str | None) -> str | None:
    """
    Extract the first dotted version from command output.

    Matches ``MAJOR.MINOR.PATCH`` with optional pre-release (``-rc.1``) and
    build (``+abc``) suffixes, returned verbatim.

    Args:
        raw_output: Output bytes (decoded as UTF-8, lossy) or text

    Returns:
        Version string, or None if no version is present
    """
    if not raw_output:
        return None

    if isinstance(raw_output, bytes):
        text = raw_output.decode("utf-8", errors="replace")
    else:
        text = raw_output

    m = VERSION_RE.search(text)
    if not m:
        vlog("No version found in output")
        return None

    vlog(f"Extracted version: {m.group(1)}")
    return m.group(1)


def _numeric_parts(version: str) -> list[int]:
    parts = []
    for segment in version.split("."):
        m = _LEADING_DIGITS_RE.match(segment)
        parts.append(int(m.group(0)) if m else 0)
    return parts


def compare_versions(v1: str, v2: str) -> int:
    """
    Compare two version strings segment by segment.

    Only the leading digits of each dot-separated segment count, so
    ``1.0.0-beta`` compares equal to ``1.0.0``. Missing segments are 0.

    Args:
        v1: First version
        v2: Second version

    Returns:
        -1 if v1 < v2, 0 if v1 == v2, 1 if v1 > v2
    """
    a = _numeric_parts(v1)
    b = _numeric_parts(v2)

    width = max(len(a), len(b))
    a += [0] * (width - len(a))
    b += [0] * (width - len(b))

    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def is_prerelease(version: str | None) -> bool:
    """
    Whether a version string denotes a pre-release (``1.2.0-beta.1``, ``2.0.0rc1``).

    Used for display only; ordering goes through compare_versions.
    """
    if not version:
        return False
    try:
        return Version(version).is_prerelease
    except InvalidVersion:
        return False
