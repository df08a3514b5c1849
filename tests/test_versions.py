"""
Tests for version extraction and comparison (cli_locator/versions.py).
"""

import itertools

import pytest

from cli_locator.versions import compare_versions, extract_version, is_prerelease


class TestExtractVersion:
    """Tests for extract_version()."""

    def test_extract_from_surrounding_text(self):
        """Version embedded in output is returned unmodified."""
        assert extract_version(b"claude 1.0.41\n") == "1.0.41"

    def test_extract_from_str(self):
        """Text input is accepted as well as bytes."""
        assert extract_version("1.0.41 (Claude Code)") == "1.0.41"

    def test_extract_prerelease_and_build(self):
        """Pre-release and build suffixes are kept verbatim."""
        assert extract_version(b"tool v2.1.0-beta.2+build.7 ready") == "2.1.0-beta.2+build.7"
        assert extract_version(b"tool 3.0.0-rc1") == "3.0.0-rc1"

    def test_extract_first_match_wins(self):
        """The first version in the output is returned."""
        assert extract_version(b"node 20.11.0, claude 1.0.41") == "20.11.0"

    def test_extract_no_version(self):
        """Output without MAJOR.MINOR.PATCH yields None."""
        assert extract_version(b"command not found") is None
        assert extract_version(b"version 1.2") is None

    def test_extract_empty(self):
        """Empty or missing output yields None."""
        assert extract_version(b"") is None
        assert extract_version(None) is None

    def test_extract_invalid_utf8(self):
        """Undecodable bytes are replaced rather than raising."""
        assert extract_version(b"\xff\xfe tool 4.5.6 \x80") == "4.5.6"


class TestCompareVersions:
    """Tests for compare_versions()."""

    def test_equal(self):
        assert compare_versions("1.2.3", "1.2.3") == 0

    def test_numeric_segment_comparison(self):
        """Segments compare numerically, not lexicographically."""
        assert compare_versions("1.2.10", "1.2.9") == 1
        assert compare_versions("1.2.9", "1.2.10") == -1

    def test_major_dominates(self):
        assert compare_versions("2.0.0", "1.99.99") == 1

    def test_padding_with_zero(self):
        """Missing segments count as zero."""
        assert compare_versions("1.2", "1.2.0") == 0
        assert compare_versions("1.2", "1.2.1") == -1

    def test_prerelease_suffix_ignored(self):
        """Only leading digits of a segment count, so 1.0.0-beta == 1.0.0."""
        assert compare_versions("1.0.0-beta", "1.0.0") == 0
        assert compare_versions("1.0.17-beta", "1.0.16") == 1

    def test_unparseable_segment_is_zero(self):
        assert compare_versions("1.x.3", "1.0.3") == 0
        assert compare_versions("garbage", "0.0.0") == 0

    def test_total_order_antisymmetric(self):
        """Exactly one relation holds and swapping arguments reverses it."""
        versions = ["0.0.1", "1.0.0", "1.0.0-beta", "1.2.10", "1.2.9", "2.0", "10.0.0", "abc"]
        for a, b in itertools.product(versions, repeat=2):
            result = compare_versions(a, b)
            assert result in (-1, 0, 1)
            assert compare_versions(b, a) == -result


class TestIsPrerelease:
    """Tests for is_prerelease()."""

    @pytest.mark.parametrize("version", ["1.0.0-beta.1", "2.0.0rc1", "1.0.0-alpha"])
    def test_prerelease(self, version):
        assert is_prerelease(version) is True

    @pytest.mark.parametrize("version", ["1.0.41", "1.0.0+build.5", None, "", "not-a-version"])
    def test_not_prerelease(self, version):
        assert is_prerelease(version) is False
