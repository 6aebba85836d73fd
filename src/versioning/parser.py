"""Token parsing utilities for package identifiers."""

from typing import Optional, Tuple

from common.errors import ParseError
from .models import PackageRef


def tokenize_version_pin(s: str) -> Tuple[str, Optional[str]]:
    """Return (path, version or None) split on the first ``@``.

    Module paths never contain ``@``, so the first one separates the pin.
    """
    s = s.strip()
    if "@" not in s:
        return s, None
    path, version = s.split("@", 1)
    return path.strip(), version.strip()


def parse_cli_token(token: str) -> PackageRef:
    """Parse a ``<path>[@<version>]`` CLI token into a PackageRef.

    A missing pin and the exact literal ``latest`` both request the newest
    version; the literal is case-sensitive.

    Raises:
        ParseError: If the path is empty or the ``@`` is not followed by a version.
    """
    path, version = tokenize_version_pin(token)
    if not path:
        raise ParseError(f"parse package identifier {token!r}: empty module path")
    if version is None:
        return PackageRef(path=path)
    if not version:
        raise ParseError(f"parse package identifier {token!r}: empty version after '@'")
    return PackageRef(path=path, version=version)
