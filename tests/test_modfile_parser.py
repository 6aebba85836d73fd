"""Tests for the module file parser."""

import textwrap

import pytest

from common.errors import ParseError
from registry.gomod.modfile_parser import Replacement, parse_modfile
from versioning.models import DependencyRecord

SAMPLE = textwrap.dedent(
    """\
    // Sample module file
    module example.org/app

    go 1.21

    toolchain go1.21.5

    require (
    \tgithub.com/foo/bar v1.2.3
    \tgolang.org/x/net v0.0.0-20200101000000-abcdef123456 // indirect
    \t"example.org/quoted" v2.0.0+incompatible
    )

    require github.com/single/line v0.1.0

    exclude github.com/bad/mod v0.0.1

    replace github.com/foo/bar v1.2.3 => ../bar

    replace (
    \texample.org/old => example.org/new v1.0.0
    )

    retract [v0.1.0, v0.1.5] // broken release
    """
)


class TestParseModfile:
    """Well-formed module files."""

    def test_header_fields(self):
        manifest = parse_modfile(SAMPLE)
        assert manifest.module_path == "example.org/app"
        assert manifest.go_version == "1.21"
        assert manifest.toolchain == "go1.21.5"

    def test_requires_in_file_order(self):
        manifest = parse_modfile(SAMPLE)
        assert manifest.requires == [
            DependencyRecord("github.com/foo/bar", "v1.2.3"),
            DependencyRecord("golang.org/x/net", "v0.0.0-20200101000000-abcdef123456", indirect=True),
            DependencyRecord("example.org/quoted", "v2.0.0+incompatible"),
            DependencyRecord("github.com/single/line", "v0.1.0"),
        ]

    def test_direct_requires(self):
        manifest = parse_modfile(SAMPLE)
        assert [r.path for r in manifest.direct_requires()] == [
            "github.com/foo/bar",
            "example.org/quoted",
            "github.com/single/line",
        ]

    def test_excludes_and_replaces(self):
        manifest = parse_modfile(SAMPLE)
        assert manifest.excludes == [DependencyRecord("github.com/bad/mod", "v0.0.1")]
        assert manifest.replaces == [
            Replacement("github.com/foo/bar", "v1.2.3", "../bar", ""),
            Replacement("example.org/old", "", "example.org/new", "v1.0.0"),
        ]

    def test_accepts_bytes(self):
        manifest = parse_modfile(b"module example.org/x\n\nrequire example.org/y v1.0.0\n")
        assert manifest.requires == [DependencyRecord("example.org/y", "v1.0.0")]

    def test_indirect_with_trailing_comment(self):
        manifest = parse_modfile("module m.org/x\nrequire a.org/b v1.0.0 // indirect; needed by c\n")
        assert manifest.requires[0].indirect is True

    def test_other_comment_is_not_indirect(self):
        manifest = parse_modfile("module m.org/x\nrequire a.org/b v1.0.0 // indirectly used\n")
        assert manifest.requires[0].indirect is False

    def test_empty_block(self):
        manifest = parse_modfile("module m.org/x\nrequire ()\n")
        assert manifest.requires == []

    def test_raw_string_path(self):
        manifest = parse_modfile("module `m.org/raw`\n")
        assert manifest.module_path == "m.org/raw"


class TestParseErrors:
    """Malformed module files raise ParseError with a location."""

    def test_require_missing_version(self):
        with pytest.raises(ParseError, match=r"go\.mod:2: usage: require"):
            parse_modfile("module m.org/x\nrequire a.org/b\n")

    def test_unknown_directive(self):
        with pytest.raises(ParseError, match="unknown directive: frobnicate"):
            parse_modfile("module m.org/x\nfrobnicate everything\n")

    def test_unknown_directive_in_block(self):
        with pytest.raises(ParseError):
            parse_modfile("module m.org/x\nmodule (\n m.org/y\n)\n")

    def test_unterminated_block(self):
        with pytest.raises(ParseError, match="unterminated require block"):
            parse_modfile("module m.org/x\nrequire (\n a.org/b v1.0.0\n")

    def test_unterminated_string(self):
        with pytest.raises(ParseError, match="unterminated quoted string"):
            parse_modfile('module "m.org/x\n')

    def test_repeated_module(self):
        with pytest.raises(ParseError, match="repeated module"):
            parse_modfile("module m.org/x\nmodule m.org/y\n")

    def test_bad_replace(self):
        with pytest.raises(ParseError, match="usage: replace"):
            parse_modfile("module m.org/x\nreplace a.org/b v1.0.0\n")

    def test_filename_in_message(self):
        with pytest.raises(ParseError, match=r"^m\.org/x@v1\.0\.0\.mod:1:"):
            parse_modfile("require\n", filename="m.org/x@v1.0.0.mod")

    def test_invalid_utf8(self):
        with pytest.raises(ParseError):
            parse_modfile(b"module \xff\n")
