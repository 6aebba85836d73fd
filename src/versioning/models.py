"""Data models for versioning and source resolution."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from constants import Constants, Strategies


class VersionKind(Enum):
    """Classification of a version string."""
    PSEUDO = "pseudo"
    SEMVER = "semver"
    TAG = "tag"


@dataclass(frozen=True)
class PackageRef:
    """Root package identifier as given on the command line."""
    path: str
    version: str = ""

    @property
    def wants_latest(self) -> bool:
        """True when the version must be looked up in the registry."""
        return not self.version or self.version == Constants.LATEST


@dataclass(frozen=True)
class DependencyRecord:
    """A single requirement extracted from a manifest."""
    path: str
    version: str
    indirect: bool = False

    def __str__(self) -> str:
        return f"{self.path}@{self.version}"


@dataclass(frozen=True)
class VersionInfo:
    """Result of classifying a version string.

    Exactly one of ``tag``/``commit`` is non-empty.
    """
    raw: str
    kind: VersionKind
    tag: str
    commit: str
    incompatible: bool
    major: Optional[int]


@dataclass(frozen=True)
class RepoRoot:
    """Repository root that serves a package path."""
    vcs_kind: str
    repo_url: str
    root_path: str


@dataclass(frozen=True)
class ResolverConfig:
    """Options threaded explicitly into every resolver."""
    registry_url: str = Constants.REGISTRY_URL_GOPROXY
    vendor_dir: str = Constants.VENDOR_DIR
    disable_shallow_clone: bool = False
    disable_submodules: bool = False
    disable_fsckobjects: bool = False
    strategy: str = Strategies.DISCOVER.value
    direct_only: bool = False
    max_concurrency: int = 0
    request_timeout: float = Constants.REQUEST_TIMEOUT
    dynamic_discovery: bool = True

    def vcs_flags(self) -> Dict[str, bool]:
        """Return the enabled VCS flags keyed by their output field name."""
        flags = {
            Constants.FLAG_DISABLE_SHALLOW_CLONE: self.disable_shallow_clone,
            Constants.FLAG_DISABLE_SUBMODULES: self.disable_submodules,
            Constants.FLAG_DISABLE_FSCKOBJECTS: self.disable_fsckobjects,
        }
        return {name: True for name, enabled in flags.items() if enabled}


@dataclass(frozen=True)
class SourceDescriptor:
    """Resolved source-fetch descriptor for one dependency."""
    type: str
    url: str
    tag: str
    commit: str
    dest: str
    flags: Dict[str, bool] = field(default_factory=dict, hash=False, compare=False)

    def sort_key(self):
        """Ordering key: destination first, remaining fields break ties."""
        return (self.dest, self.url, self.tag, self.commit, self.type)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the output schema."""
        out: Dict[str, Any] = {
            "type": self.type,
            "url": self.url,
            "tag": self.tag,
            "commit": self.commit,
            "dest": self.dest,
        }
        out.update(self.flags)
        return out
