"""
Installation catalog: run scanners, deduplicate, and order candidates.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Iterable, Sequence

from .common import vlog
from .installation import Installation, ScanResult
from .scanners import SCANNERS, ScanContext, Scanner
from .versions import compare_versions


# Lower is more trusted when versions tie
SOURCE_PREFERENCE = {
    "custom": 0,
    "which": 1,
    "where": 1,
    "homebrew": 2,
    "system": 3,
    "nvm-active": 4,
    "local-bin": 6,
    "claude-local": 7,
    "npm-global": 8,
    "yarn": 9,
    "yarn-global": 9,
    "bun": 10,
    "node-modules": 11,
    "home-bin": 12,
    "PATH": 13,
}
NVM_PREFERENCE = 5
UNKNOWN_PREFERENCE = 14


@dataclass(frozen=True)
class Catalog:
    """
    Deduplicated result of one discovery pass.

    Attributes:
        installations: Unique candidates in scanner declaration order
        results: Raw per-scanner results, in declaration order
    """
    installations: tuple[Installation, ...]
    results: tuple[ScanResult, ...] = ()

    @property
    def checked(self) -> tuple[str, ...]:
        """Every location examined, without repeats."""
        seen: dict[str, None] = {}
        for result in self.results:
            for location in result.checked:
                seen.setdefault(location, None)
        return tuple(seen)

    def __len__(self) -> int:
        return len(self.installations)


def source_preference(source: str) -> int:
    """Trust rank of a scanner source tag (lower is better)."""
    if source in SOURCE_PREFERENCE:
        return SOURCE_PREFERENCE[source]
    if source.startswith("nvm"):
        return NVM_PREFERENCE
    return UNKNOWN_PREFERENCE


def deduplicate(installations: Iterable[Installation]) -> list[Installation]:
    """Drop repeated paths, keeping the first occurrence."""
    seen: set[str] = set()
    unique = []
    for inst in installations:
        if inst.path in seen:
            continue
        seen.add(inst.path)
        unique.append(inst)
    return unique


def run_scanners(
    ctx: ScanContext,
    scanners: Sequence[Scanner] = SCANNERS,
    parallel: bool = False,
    max_workers: int | None = None,
) -> list[ScanResult]:
    """
    Run scanners and return their results in declaration order.

    With ``parallel=True`` each scanner runs on its own worker thread;
    results are still reassembled by declaration index, never by
    completion order.
    """
    if not parallel or len(scanners) < 2:
        return [scanner(ctx) for scanner in scanners]

    with ThreadPoolExecutor(max_workers=max_workers or len(scanners)) as executor:
        futures = [executor.submit(scanner, ctx) for scanner in scanners]
        return [future.result() for future in futures]


def build_catalog(
    ctx: ScanContext | None = None,
    scanners: Sequence[Scanner] = SCANNERS,
    parallel: bool = False,
    max_workers: int | None = None,
) -> Catalog:
    """
    Run all scanners and deduplicate their output by path.

    Args:
        ctx: Scan inputs (defaults describe the running host)
        scanners: Scanners in preference order
        parallel: Run scanners concurrently
        max_workers: Worker limit for parallel scanning

    Returns:
        Catalog
    """
    ctx = ctx or ScanContext()
    results = run_scanners(ctx, scanners, parallel=parallel, max_workers=max_workers)

    for result in results:
        if result.error:
            vlog(f"Scanner {result.source} failed: {result.error}")

    combined = [inst for result in results for inst in result.installations]
    unique = deduplicate(combined)
    if len(unique) != len(combined):
        vlog(f"Collapsed {len(combined) - len(unique)} duplicate path(s)")

    return Catalog(installations=tuple(unique), results=tuple(results))


def _listing_order(a: Installation, b: Installation) -> int:
    if a.version is not None and b.version is not None:
        by_version = compare_versions(b.version, a.version)
        if by_version:
            return by_version
    elif a.version is not None:
        return -1
    elif b.version is not None:
        return 1

    pa, pb = source_preference(a.source), source_preference(b.source)
    return (pa > pb) - (pa < pb)


def sort_installations(installations: Iterable[Installation]) -> list[Installation]:
    """
    Order installations for display.

    Newest version first, versioned before unversioned, then by source
    preference. The sort is stable, so full ties keep catalog order.
    """
    return sorted(installations, key=cmp_to_key(_listing_order))


def discover_all(
    ctx: ScanContext | None = None,
    scanners: Sequence[Scanner] = SCANNERS,
    parallel: bool = False,
) -> list[Installation]:
    """Every discovered installation, ordered by sort_installations."""
    vlog("Discovering all installations...")
    catalog = build_catalog(ctx, scanners, parallel=parallel)
    return sort_installations(catalog.installations)
