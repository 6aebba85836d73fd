"""Pure classification of registry version strings.

Nothing here performs I/O, so the tag/commit and major-version rules can be
exercised in isolation from networked resolution.
"""

from typing import Optional

import semantic_version

from constants import Constants
from .models import VersionInfo, VersionKind
from .pseudo import classify_pseudo


def parse_major(version: str) -> Optional[int]:
    """Return the semantic-version major number of ``version``, if any.

    Only canonical ``vMAJOR.MINOR.PATCH`` strings (with optional prerelease
    and build metadata) carry a major version; other tags yield None.
    """
    if not version or not version.startswith("v"):
        return None
    try:
        return semantic_version.Version(version[1:]).major
    except ValueError:
        return None


def strip_incompatible(tag: str):
    """Return (tag without ``+incompatible``, whether the marker was present)."""
    if tag.endswith(Constants.INCOMPATIBLE_SUFFIX):
        return tag[: -len(Constants.INCOMPATIBLE_SUFFIX)], True
    return tag, False


def classify_version(version: str) -> VersionInfo:
    """Classify a version string into tag or commit form.

    Raises:
        PseudoVersionParseError: For strings shaped like a malformed
            pseudo-version.
    """
    revision = classify_pseudo(version)
    tag, incompatible = strip_incompatible(version)
    major = parse_major(version)

    if revision is not None:
        return VersionInfo(
            raw=version,
            kind=VersionKind.PSEUDO,
            tag="",
            commit=revision,
            incompatible=incompatible,
            major=major,
        )

    return VersionInfo(
        raw=version,
        kind=VersionKind.SEMVER if major is not None else VersionKind.TAG,
        tag=tag,
        commit="",
        incompatible=incompatible,
        major=major,
    )


def major_suffix(info: VersionInfo) -> str:
    """Return the ``/vN`` path segment for a classified version.

    Empty for v0/v1, for ``+incompatible`` versions and for versions without a
    semantic major.
    """
    if info.incompatible or info.major is None or info.major < 2:
        return ""
    return f"/v{info.major}"
