"""Case-escaping of module paths and versions for proxy URLs.

The module proxy serves case-insensitive filesystems, so every uppercase
letter is written as ``!`` followed by its lowercase form.
Example: github.com/Sirupsen/logrus -> github.com/!sirupsen/logrus
"""

import re

from common.errors import ParseError

_UPPER = re.compile(r"([A-Z])")


def _escape(value: str, what: str) -> str:
    if "!" in value:
        raise ParseError(f"escape {what} {value!r}: invalid character '!'")
    if not value.isprintable() or any(c.isspace() for c in value):
        raise ParseError(f"escape {what} {value!r}: invalid character")
    return _UPPER.sub(lambda m: "!" + m.group(1).lower(), value)


def escape_path(path: str) -> str:
    """Escape a module path for use in a proxy URL.

    Raises:
        ParseError: If the path is empty or contains characters that cannot be escaped.
    """
    if not path:
        raise ParseError("escape path '': empty module path")
    if path.startswith("/") or path.endswith("/") or "//" in path:
        raise ParseError(f"escape path {path!r}: malformed path element")
    return _escape(path, "path")


def escape_version(version: str) -> str:
    """Escape a module version for use in a proxy URL."""
    if not version:
        raise ParseError("escape version '': empty version")
    if "/" in version:
        raise ParseError(f"escape version {version!r}: invalid character '/'")
    return _escape(version, "version")
