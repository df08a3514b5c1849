"""
Tests for catalog building and listing order (cli_locator/catalog.py).
"""

import threading
import time

from cli_locator.catalog import (
    Catalog,
    build_catalog,
    deduplicate,
    discover_all,
    run_scanners,
    sort_installations,
    source_preference,
)
from cli_locator.installation import Installation, ScanResult
from cli_locator.selection import select_best


def inst(path, version=None, source="system"):
    return Installation(path=path, version=version, source=source)


def fixed_scanner(source, *installations, checked=(), error=None):
    def scanner(ctx):
        return ScanResult(source=source, installations=tuple(installations), checked=checked, error=error)
    scanner.__name__ = f"scan_{source}"
    return scanner


class TestDeduplicate:
    """Tests for path deduplication."""

    def test_first_occurrence_kept(self):
        """The earlier scanner's source and version survive."""
        first = inst("/usr/local/bin/claude", "1.0.0", "which")
        dup = inst("/usr/local/bin/claude", None, "system")
        other = inst("/usr/bin/claude", "0.9.0")

        assert deduplicate([first, other, dup]) == [first, other]

    def test_empty(self):
        assert deduplicate([]) == []


class TestBuildCatalog:
    """Tests for build_catalog."""

    def test_declaration_order(self, posix_ctx):
        scanners = (
            fixed_scanner("which", inst("/a/claude", "1.0.0", "which"), checked=("PATH (which)",)),
            fixed_scanner("nvm", inst("/b/claude", "2.0.0", "nvm (v20)"), checked=("/b",)),
            fixed_scanner("standard", inst("/a/claude", "1.0.0", "system"), checked=("/a/claude", "/b")),
        )

        catalog = build_catalog(posix_ctx, scanners)

        assert [i.path for i in catalog.installations] == ["/a/claude", "/b/claude"]
        assert catalog.installations[0].source == "which"
        assert len(catalog) == 2
        assert catalog.checked == ("PATH (which)", "/b", "/a/claude")

    def test_scanner_error_does_not_stop_others(self, posix_ctx):
        scanners = (
            fixed_scanner("which", error="'which' could not be executed"),
            fixed_scanner("standard", inst("/usr/bin/claude", "1.0.0")),
        )

        catalog = build_catalog(posix_ctx, scanners)

        assert [i.path for i in catalog.installations] == ["/usr/bin/claude"]
        assert catalog.results[0].error

    def test_parallel_matches_sequential(self, posix_ctx):
        """Concurrent scanning reassembles results by declaration order."""
        def slow(ctx):
            time.sleep(0.05)
            return ScanResult(source="slow", installations=(inst("/slow/claude", "1.0.0"),))

        scanners = (slow, fixed_scanner("fast", inst("/fast/claude", "1.0.0")))

        sequential = build_catalog(posix_ctx, scanners)
        parallel = build_catalog(posix_ctx, scanners, parallel=True)

        assert parallel.installations == sequential.installations
        assert [i.path for i in parallel.installations] == ["/slow/claude", "/fast/claude"]

    def test_parallel_uses_threads(self, posix_ctx):
        seen = set()

        def record(ctx):
            seen.add(threading.get_ident())
            time.sleep(0.02)
            return ScanResult(source="record")

        run_scanners(posix_ctx, (record, record, record), parallel=True)

        assert threading.get_ident() not in seen

    def test_empty_catalog(self, posix_ctx):
        catalog = build_catalog(posix_ctx, (fixed_scanner("none"),))
        assert catalog == Catalog(installations=(), results=(ScanResult(source="none"),))
        assert select_best(catalog.installations) is None


class TestSourcePreference:
    """Tests for source trust ranks."""

    def test_known_sources(self):
        assert source_preference("custom") == 0
        assert source_preference("which") == source_preference("where") == 1
        assert source_preference("homebrew") < source_preference("system")
        assert source_preference("PATH") == 13

    def test_nvm_variants(self):
        assert source_preference("nvm-active") == 4
        assert source_preference("nvm (v20.1.0)") == 5

    def test_unknown(self):
        assert source_preference("wsl (Ubuntu)") == 14


class TestSortInstallations:
    """Tests for listing order."""

    def test_newest_first(self):
        items = [
            inst("/usr/bin/claude", "1.9.9", "system"),
            inst("/home/u/.nvm/versions/node/v20/bin/claude", "2.0.0", "nvm (v20)"),
        ]
        ordered = sort_installations(items)
        assert [i.version for i in ordered] == ["2.0.0", "1.9.9"]

    def test_versioned_before_unversioned(self):
        items = [inst("/a", None, "which"), inst("/b", "0.1.0", "home-bin")]
        assert [i.path for i in sort_installations(items)] == ["/b", "/a"]

    def test_source_breaks_version_tie(self):
        items = [
            inst("claude", "1.0.0", "PATH"),
            inst("/opt/homebrew/bin/claude", "1.0.0", "homebrew"),
            inst("/usr/local/bin/claude", "1.0.0", "which"),
        ]
        assert [i.source for i in sort_installations(items)] == ["which", "homebrew", "PATH"]

    def test_stable_for_full_ties(self):
        items = [inst("/x", None, "system"), inst("/y", None, "system")]
        assert [i.path for i in sort_installations(items)] == ["/x", "/y"]


def test_discover_all_orders_catalog(posix_ctx):
    """The listing puts the newest installation first, as selection does."""
    scanners = (
        fixed_scanner("which", inst("/usr/bin/claude", "1.9.9", "which")),
        fixed_scanner("nvm", inst("/nvm/claude", "2.0.0", "nvm (v20)")),
        fixed_scanner("standard", inst("/usr/bin/claude", "1.9.9", "system")),
    )

    listing = discover_all(posix_ctx, scanners)

    assert [(i.path, i.source) for i in listing] == [
        ("/nvm/claude", "nvm (v20)"),
        ("/usr/bin/claude", "which"),
    ]
    assert select_best(listing) == listing[0]
