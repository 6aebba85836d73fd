"""Resolver deriving tags and commits from repository-root discovery.

Given ``(path, version)`` and the repository root serving ``path``:

- pseudo-versions resolve to their embedded commit, everything else to a tag;
- ``+incompatible`` is stripped from the tag and suppresses the major suffix;
- the ``/vN`` major suffix applies to v2+ versions only;
- a package below its repository root gets its tag namespaced by the
  subdirectory (``sub/dir/v1.2.3``), the monorepo tagging convention;
- the destination is ``<vendor>/<root>[/vN]``.
"""

import logging
import os

from common.errors import RootDiscoveryError
from common.logging_utils import extra_context, is_debug_enabled
from constants import Strategies
from repository.vcs_root import RepoRootDiscovery

from ..classify import classify_version, major_suffix
from ..models import DependencyRecord, RepoRoot, ResolverConfig, SourceDescriptor
from .base import SourceResolver

logger = logging.getLogger(__name__)


def subdirectory(package_path: str, root_path: str, suffix: str) -> str:
    """Return the package's directory relative to its repository root.

    The major-version suffix is not part of the directory.

    Raises:
        RootDiscoveryError: If ``package_path`` is not served by ``root_path``.
    """
    if package_path != root_path and not package_path.startswith(root_path + "/"):
        raise RootDiscoveryError(
            f"repository root {root_path!r} is not a prefix of {package_path!r}"
        )
    remainder = package_path[len(root_path):]
    if suffix and remainder.endswith(suffix):
        remainder = remainder[: -len(suffix)]
    return remainder.lstrip("/")


def build_source(record: DependencyRecord, root: RepoRoot, config: ResolverConfig) -> SourceDescriptor:
    """Build the descriptor for ``record`` served from ``root``.

    Raises:
        PseudoVersionParseError: For a malformed pseudo-version.
        RootDiscoveryError: If ``root`` does not serve ``record.path``.
    """
    info = classify_version(record.version)
    suffix = major_suffix(info)

    subdir = subdirectory(record.path, root.root_path, suffix)
    tag = info.tag
    if tag and subdir:
        tag = f"{subdir}/{tag}"

    dest = os.path.join(config.vendor_dir, *root.root_path.split("/"))
    if suffix:
        dest = os.path.join(dest, suffix.lstrip("/"))

    return SourceDescriptor(
        type=root.vcs_kind,
        url=root.repo_url,
        tag=tag,
        commit=info.commit,
        dest=dest,
        flags=config.vcs_flags(),
    )


class DiscoveryResolver(SourceResolver):
    """Resolves dependencies through repository-root discovery."""

    def __init__(self, config: ResolverConfig, discovery: RepoRootDiscovery):
        super().__init__(config)
        self.discovery = discovery

    @property
    def strategy(self) -> str:
        return Strategies.DISCOVER.value

    async def resolve(self, record: DependencyRecord) -> SourceDescriptor:
        root = await self.discovery.repo_root_for_path(record.path)
        source = build_source(record, root, self.config)
        if is_debug_enabled(logger):
            logger.debug(
                "Resolved source",
                extra=extra_context(
                    event="function_exit",
                    component="resolver",
                    action="discover",
                    target=str(record),
                    outcome=source.tag or source.commit,
                ),
            )
        return source
