"""Module proxy client: latest version, module files and version metadata."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict

from constants import Constants
from common.errors import DecodeError, ParseError
from common.http_client import HttpClient
from common.logging_utils import extra_context, is_debug_enabled

from .escaping import escape_path, escape_version
from .modfile_parser import Manifest, parse_modfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Origin:
    """VCS origin reported by the version-metadata endpoint."""
    vcs: str = ""
    url: str = ""
    ref: str = ""
    hash: str = ""


@dataclass(frozen=True)
class VersionMetadata:
    """Decoded ``.info`` payload."""
    path: str
    version: str
    time: str
    origin: Origin


def _decode_json(raw: bytes, what: str) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(f"{what}: parse response: {exc}") from exc
    if not isinstance(data, dict):
        raise DecodeError(f"{what}: parse response: expected a JSON object")
    return data


class GoProxyClient:
    """Client for the module proxy protocol."""

    def __init__(self, http: HttpClient, base_url: str = Constants.REGISTRY_URL_GOPROXY):
        """Initialize the client.

        Args:
            http: Shared HTTP client.
            base_url: Proxy base URL.
        """
        self._http = http
        self._base_url = base_url.rstrip("/")

    @property
    def base_url(self) -> str:
        """Proxy base URL without trailing slash."""
        return self._base_url

    def proxy_url(self, path: str, endpoint: str) -> str:
        """Build the URL of ``endpoint`` for module ``path``.

        Raises:
            ParseError: If the path cannot be escaped.
        """
        return f"{self._base_url}/{escape_path(path)}/{endpoint}"

    def _version_url(self, path: str, version: str, extension: str) -> str:
        return self.proxy_url(path, f"@v/{escape_version(version)}.{extension}")

    async def fetch_latest_version(self, path: str) -> str:
        """Return the latest version the proxy knows for ``path``.

        Raises:
            NetworkError: On request failure.
            DecodeError: If the response is not the expected JSON.
        """
        what = f"get latest version of {path}"
        url = self.proxy_url(path, "@latest")
        raw = await self._http.get_bytes(url, context=what)
        data = _decode_json(raw, what)
        version = data.get("Version")
        if not isinstance(version, str) or not version:
            raise DecodeError(f"{what}: parse response: missing Version")
        if is_debug_enabled(logger):
            logger.debug(
                "Resolved latest version",
                extra=extra_context(
                    event="decision",
                    component="goproxy",
                    action="latest",
                    target=path,
                    outcome=version,
                ),
            )
        return version

    async def fetch_manifest(self, path: str, version: str) -> Manifest:
        """Fetch and parse the module file of ``path@version``.

        Raises:
            NetworkError: On request failure.
            ParseError: If the module file is malformed.
        """
        what = f"get modfile of {path}@{version}"
        url = self._version_url(path, version, "mod")
        raw = await self._http.get_bytes(url, context=what)
        try:
            return parse_modfile(raw, filename=f"{path}@{version}.mod")
        except ParseError as exc:
            raise ParseError(f"{what}: parse: {exc}") from exc

    async def fetch_info(self, path: str, version: str) -> VersionMetadata:
        """Fetch version metadata (``.info``) of ``path@version``.

        Raises:
            NetworkError: On request failure.
            DecodeError: If the response is not the expected JSON.
        """
        what = f"get info of {path}@{version}"
        url = self._version_url(path, version, "info")
        raw = await self._http.get_bytes(url, context=what)
        data = _decode_json(raw, what)

        origin_data = data.get("Origin") or {}
        if not isinstance(origin_data, dict):
            raise DecodeError(f"{what}: parse response: Origin is not an object")
        origin = Origin(
            vcs=str(origin_data.get("VCS", "") or ""),
            url=str(origin_data.get("URL", "") or ""),
            ref=str(origin_data.get("Ref", "") or ""),
            hash=str(origin_data.get("Hash", "") or ""),
        )
        return VersionMetadata(
            path=path,
            version=str(data.get("Version", "") or version),
            time=str(data.get("Time", "") or ""),
            origin=origin,
        )
