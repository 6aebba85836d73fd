"""Exception hierarchy shared by the registry, repository and versioning layers.

Every failure the resolution pipeline can surface derives from
``ResolutionError`` so the entry point can report it as a single line.
Messages lead with the failing operation and end with the underlying cause.
"""
from __future__ import annotations

from typing import Optional


class ResolutionError(Exception):
    """Base class for all resolution failures."""


class NetworkError(ResolutionError):
    """An outbound request failed or returned a non-success status."""

    def __init__(self, message: str, *, url: str = "", status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


class DecodeError(ResolutionError):
    """A registry response body could not be decoded."""


class ParseError(ResolutionError):
    """A manifest, module path, version or package identifier is malformed."""


class RootDiscoveryError(ResolutionError):
    """A package path could not be mapped to a repository root."""


class PseudoVersionParseError(ResolutionError):
    """A version string looks like a pseudo-version but is malformed."""


class ConfigError(ResolutionError):
    """Configuration file or values are invalid."""
