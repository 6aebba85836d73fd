"""Pseudo-version grammar.

A pseudo-version names a revision that has no stable tag. It takes one of
three forms, each ending in a 14-digit UTC timestamp and a revision id:

    vX.0.0-yyyymmddhhmmss-abcdefabcdef        no earlier tag
    vX.Y.Z-pre.0.yyyymmddhhmmss-abcdefabcdef  after prerelease vX.Y.Z-pre
    vX.Y.(Z+1)-0.yyyymmddhhmmss-abcdefabcdef  after release vX.Y.Z

optionally followed by build metadata such as ``+incompatible``. Strings that
do not match one of these forms exactly are ordinary tags.
"""

import re
from datetime import datetime
from typing import Optional, Tuple

import semantic_version

from common.errors import PseudoVersionParseError

_PSEUDO_GRAMMAR = re.compile(
    r"^v\d+\.(?:0\.0-|\d+\.\d+-(?:[^+]*\.)?0\.)\d{14}-[A-Za-z0-9]+"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)

_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def is_pseudo_version(version: str) -> bool:
    """Return True if ``version`` has the form of a pseudo-version.

    The grammar, at least two dashes and a valid semantic version are
    required. The timestamp's calendar value is not checked here.
    """
    if not version or version.count("-") < 2 or not _PSEUDO_GRAMMAR.match(version):
        return False
    try:
        semantic_version.Version(version[1:])
    except ValueError:
        return False
    return True


def parse_pseudo_version(version: str) -> Tuple[str, str]:
    """Split a pseudo-version into its (timestamp, revision) parts.

    Raises:
        PseudoVersionParseError: If the string is not a pseudo-version or its
            timestamp is not a real UTC time.
    """
    if not is_pseudo_version(version):
        raise PseudoVersionParseError(f"malformed pseudo-version {version!r}")

    base = version.split("+", 1)[0]
    head, rev = base.rsplit("-", 1)
    timestamp = re.split(r"[-.]", head)[-1]
    try:
        datetime.strptime(timestamp, _TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise PseudoVersionParseError(
            f"malformed pseudo-version {version!r}: invalid timestamp {timestamp}"
        ) from exc
    return timestamp, rev


def pseudo_version_rev(version: str) -> str:
    """Return the revision identifier embedded in a pseudo-version."""
    return parse_pseudo_version(version)[1]


def classify_pseudo(version: str) -> Optional[str]:
    """Return the revision if ``version`` is a pseudo-version, else None.

    Raises:
        PseudoVersionParseError: If the string has the pseudo-version form but
            its timestamp is impossible (e.g. month 13).
    """
    if not is_pseudo_version(version):
        return None
    return pseudo_version_rev(version)
