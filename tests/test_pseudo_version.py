"""Tests for pseudo-version detection and parsing."""

import pytest

from common.errors import PseudoVersionParseError
from versioning.pseudo import classify_pseudo, is_pseudo_version, parse_pseudo_version, pseudo_version_rev


class TestPseudoVersionForms:
    """The three pseudo-version forms are recognised."""

    @pytest.mark.parametrize(
        "version",
        [
            "v0.0.0-20200101000000-abcdef123456",
            "v1.2.4-0.20200101000000-abcdef123456",
            "v1.2.3-pre.0.20200101000000-abcdef123456",
            "v2.0.0-20190101120000-abcdef123456+incompatible",
        ],
    )
    def test_valid_forms(self, version):
        assert is_pseudo_version(version)
        assert pseudo_version_rev(version) == "abcdef123456"
        assert classify_pseudo(version) == "abcdef123456"

    def test_timestamp_extracted(self):
        timestamp, rev = parse_pseudo_version("v1.2.4-0.20211231235959-0123456789ab")
        assert timestamp == "20211231235959"
        assert rev == "0123456789ab"


class TestNotPseudo:
    """Anything outside the exact grammar is an ordinary tag."""

    @pytest.mark.parametrize(
        "version",
        [
            "v1.2.3",
            "v1.2.3-rc.1",
            "v2.0.0+incompatible",
            "release-2020",
            "v0.0.0",
            "",
            "v1.2.3-20200101000000-abcdef",
            "release-20200101000000-foo",
            "v1.2-20200101000000-abcdef123456",
            "v0.0.0-20200101000000-",
            "1.0.0-20200101000000-abcdef123456",
            "v1.2.3-20200101000000-abcdef123456",
        ],
    )
    def test_plain_versions(self, version):
        assert not is_pseudo_version(version)
        assert classify_pseudo(version) is None

    def test_parse_non_pseudo_raises(self):
        with pytest.raises(PseudoVersionParseError):
            parse_pseudo_version("v1.2.3")


class TestImpossibleTimestamp:
    """Pseudo-versions whose timestamp is not a real time are rejected."""

    @pytest.mark.parametrize(
        "version",
        ["v0.0.0-20201399000000-abcdef123456", "v1.2.4-0.20200230000000-abcdef123456"],
    )
    def test_classify_raises(self, version):
        assert is_pseudo_version(version)
        with pytest.raises(PseudoVersionParseError, match="invalid timestamp"):
            classify_pseudo(version)
