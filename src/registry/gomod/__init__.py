"""Module proxy registry package.

This package provides module proxy support:
- client.py: HTTP interactions with the module proxy (@latest, .mod, .info)
- modfile_parser.py: module file (go.mod) parsing into a Manifest
- escaping.py: case-escaping of module paths and versions for proxy URLs
"""

from .client import GoProxyClient, Origin, VersionMetadata  # noqa: F401
from .escaping import escape_path, escape_version  # noqa: F401
from .modfile_parser import Manifest, Replacement, parse_modfile  # noqa: F401

__all__ = [
    "GoProxyClient",
    "Origin",
    "VersionMetadata",
    "Manifest",
    "Replacement",
    "parse_modfile",
    "escape_path",
    "escape_version",
]
