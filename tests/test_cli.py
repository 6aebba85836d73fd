"""Tests for the command-line entry point."""

import asyncio
import json
from unittest.mock import patch

import pytest

import modsource
from common.errors import NetworkError, RootDiscoveryError
from versioning.models import PackageRef, ResolverConfig, SourceDescriptor

PROXY = "https://proxy.golang.org"

MODFILE = b"""module example.org/app

go 1.21

require (
\tgithub.com/zeta/lib/v2 v2.1.0
\tgithub.com/alpha/tool v0.0.0-20200101000000-abcdef123456 // indirect
\tgithub.com/mid/mono/sub v1.4.0
)
"""


class FakeHttpClient:
    """Stands in for HttpClient; serves canned proxy responses."""

    responses = {}
    instances = []

    def __init__(self, timeout=0, **kwargs):
        self.timeout = timeout
        self.calls = []
        self.closed = False
        FakeHttpClient.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed = True

    async def get_bytes(self, url, *, context, headers=None):
        self.calls.append(url)
        if url not in self.responses:
            raise NetworkError(f"{context}: fetch {url}: unexpected status 404", url=url, status=404)
        return self.responses[url]


@pytest.fixture
def fake_http(monkeypatch):
    """Route modsource's HTTP traffic to canned responses."""
    FakeHttpClient.responses = {
        f"{PROXY}/example.org/app/@latest": b'{"Version": "v1.5.0"}',
        f"{PROXY}/example.org/app/@v/v1.5.0.mod": MODFILE,
        f"{PROXY}/example.org/app/@v/v1.0.0.mod": b"module example.org/app\n",
    }
    FakeHttpClient.instances = []
    monkeypatch.setattr(modsource, "HttpClient", FakeHttpClient)
    return FakeHttpClient


class TestResolveSources:
    """End-to-end pipeline with a fake transport."""

    def test_latest(self, fake_http):
        sources = asyncio.run(modsource.resolve_sources(PackageRef("example.org/app"), ResolverConfig()))
        assert [s.to_dict() for s in sources] == [
            {
                "type": "git",
                "url": "https://github.com/alpha/tool",
                "tag": "",
                "commit": "abcdef123456",
                "dest": "vendor/github.com/alpha/tool",
            },
            {
                "type": "git",
                "url": "https://github.com/mid/mono",
                "tag": "sub/v1.4.0",
                "commit": "",
                "dest": "vendor/github.com/mid/mono",
            },
            {
                "type": "git",
                "url": "https://github.com/zeta/lib",
                "tag": "v2.1.0",
                "commit": "",
                "dest": "vendor/github.com/zeta/lib/v2",
            },
        ]
        assert fake_http.instances[0].closed

    def test_direct_only(self, fake_http):
        config = ResolverConfig(direct_only=True)
        sources = asyncio.run(modsource.resolve_sources(PackageRef("example.org/app"), config))
        assert [s.dest for s in sources] == ["vendor/github.com/mid/mono", "vendor/github.com/zeta/lib/v2"]

    def test_pinned_version_skips_latest(self, fake_http):
        sources = asyncio.run(modsource.resolve_sources(PackageRef("example.org/app", "v1.0.0"), ResolverConfig()))
        assert sources == []
        assert fake_http.instances[0].calls == [f"{PROXY}/example.org/app/@v/v1.0.0.mod"]

    def test_missing_manifest(self, fake_http):
        with pytest.raises(NetworkError, match="get modfile of example.org/app@v9.9.9"):
            asyncio.run(modsource.resolve_sources(PackageRef("example.org/app", "v9.9.9"), ResolverConfig()))

    def test_unresolvable_dependency(self, fake_http):
        fake_http.responses[f"{PROXY}/example.org/app/@v/v1.0.0.mod"] = (
            b"module example.org/app\nrequire nowhere.example/x v1.0.0\n"
        )
        with pytest.raises(RootDiscoveryError):
            asyncio.run(modsource.resolve_sources(PackageRef("example.org/app", "v1.0.0"), ResolverConfig()))


def _source(dest):
    return SourceDescriptor(type="git", url=f"https://{dest}", tag="v1.0.0", commit="", dest=dest)


class TestMain:
    """Exit codes and output streams."""

    def test_success_writes_json(self, capsys):
        with patch("modsource.run_sync", return_value=[_source("vendor/a")]) as run:
            with pytest.raises(SystemExit) as excinfo:
                modsource.main(["example.org/app@v1.0.0"])
        assert excinfo.value.code == 0
        ref, config = run.call_args[0]
        assert ref == PackageRef("example.org/app", "v1.0.0")
        assert isinstance(config, ResolverConfig)
        out = json.loads(capsys.readouterr().out)
        assert out == [{"type": "git", "url": "https://vendor/a", "tag": "v1.0.0", "commit": "", "dest": "vendor/a"}]

    def test_empty_result_is_empty_array(self, capsys):
        with patch("modsource.run_sync", return_value=[]):
            with pytest.raises(SystemExit) as excinfo:
                modsource.main(["example.org/app"])
        assert excinfo.value.code == 0
        assert json.loads(capsys.readouterr().out) == []

    def test_resolution_error(self, capsys):
        error = RootDiscoveryError("example.org/x: unrecognized import path")
        with patch("modsource.run_sync", side_effect=error):
            with pytest.raises(SystemExit) as excinfo:
                modsource.main(["example.org/app"])
        assert excinfo.value.code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.startswith("Error: example.org/x: unrecognized import path")

    def test_bad_identifier(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            modsource.main(["example.org/app@"])
        assert excinfo.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_missing_argument(self):
        with pytest.raises(SystemExit) as excinfo:
            modsource.main([])
        assert excinfo.value.code == 2

    def test_interrupted(self, capsys):
        with patch("modsource.run_sync", side_effect=asyncio.CancelledError()):
            with pytest.raises(SystemExit) as excinfo:
                modsource.main(["example.org/app"])
        assert excinfo.value.code == 130

    def test_output_file(self, tmp_path, capsys):
        target = tmp_path / "sources.json"
        with patch("modsource.run_sync", return_value=[_source("vendor/b"), _source("vendor/a")]):
            with pytest.raises(SystemExit):
                modsource.main(["example.org/app", "-o", str(target)])
        assert capsys.readouterr().out == ""
        # main writes what run_sync returned; ordering happens in resolve_sources
        assert [s["dest"] for s in json.loads(target.read_text())] == ["vendor/b", "vendor/a"]

    def test_unopenable_log_file(self, tmp_path, capsys):
        target = tmp_path / "missing" / "modsource.log"
        with patch("modsource.run_sync") as run:
            with pytest.raises(SystemExit) as excinfo:
                modsource.main(["example.org/app", "--logfile", str(target)])
        assert excinfo.value.code == 3
        run.assert_not_called()
        err = capsys.readouterr().err
        assert err.startswith("Error: open log file:")
        assert len(err.strip().splitlines()) == 1

    def test_unwritable_output(self, tmp_path):
        target = tmp_path / "missing" / "sources.json"
        with patch("modsource.run_sync", return_value=[]):
            with pytest.raises(SystemExit) as excinfo:
                modsource.main(["example.org/app", "-o", str(target)])
        assert excinfo.value.code == 3


class TestRunSync:
    """Event loop driver."""

    def test_returns_result(self, fake_http):
        sources = modsource.run_sync(PackageRef("example.org/app", "v1.0.0"), ResolverConfig())
        assert sources == []
