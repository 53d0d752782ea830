"""Tests for semantic version comparison."""

import pytest

from mobile_native_workflow.infrastructure.workflow.versioning import parse_semver, version_gte


class TestParseSemver:
    """Tests for parse_semver function."""

    def test_release(self):
        assert parse_semver("13.2.0") == (13, 2, 0, ())

    def test_prerelease_and_build_metadata(self):
        assert parse_semver("v3.0.0-alpha.3+sha.1") == (3, 0, 0, ("alpha", "3"))

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid semantic version"):
            parse_semver("13.2")


class TestVersionGte:
    """Tests for version_gte function."""

    @pytest.mark.parametrize(
        "version,minimum,expected",
        [
            ("13.2.0", "13.2.0-alpha.1", True),
            ("13.2.0-alpha.1", "13.2.0-alpha.1", True),
            ("13.2.0-alpha.2", "13.2.0-alpha.1", True),
            ("13.2.0-alpha.10", "13.2.0-alpha.9", True),
            ("13.2.0-alpha", "13.2.0-alpha.1", False),
            ("13.1.9", "13.2.0-alpha.1", False),
            ("3.0.0-beta.1", "3.0.0-alpha.3", True),
            ("2.9.9", "3.0.0-alpha.3", False),
        ],
    )
    def test_precedence(self, version, minimum, expected):
        assert version_gte(version, minimum) is expected
