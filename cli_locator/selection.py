"""
Selection policy: choose the single best installation from a catalog.
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import Sequence

from .installation import Installation
from .versions import compare_versions


def is_bare_name(path: str) -> bool:
    """Whether a path is a bare command name resolved through PATH."""
    return "/" not in path and "\\" not in path


def compare_installations(a: Installation, b: Installation) -> int:
    """
    Total order used for selection (larger is better).

    1. Both versioned: by version.
    2. One versioned: the versioned one wins, whatever its source.
    3. Neither versioned: an explicit path beats a bare PATH name, since
       the bare name only works while PATH stays unchanged.

    Returns:
        -1, 0 or 1
    """
    if a.version is not None and b.version is not None:
        return compare_versions(a.version, b.version)
    if a.version is not None:
        return 1
    if b.version is not None:
        return -1

    a_bare = is_bare_name(a.path)
    b_bare = is_bare_name(b.path)
    if a_bare and not b_bare:
        return -1
    if b_bare and not a_bare:
        return 1
    return 0


def select_best(installations: Sequence[Installation]) -> Installation | None:
    """
    Pick the best installation.

    Pure maximum over compare_installations; among equal candidates the
    earliest one in the catalog wins, so the choice is stable for a given
    catalog. Python's ``max`` keeps the first maximal element; a last-wins
    maximum such as Rust's ``Iterator::max_by`` would return the latest
    equal candidate instead, so ports of this policy differ on full ties.

    Returns:
        Best installation, or None for an empty catalog
    """
    if not installations:
        return None
    return max(installations, key=cmp_to_key(compare_installations))
