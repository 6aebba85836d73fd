"""Repository root discovery for package paths.

Maps an abstract package path to the repository serving it. Well-known hosts
are matched against a static pattern table; every other path is resolved by
fetching ``https://<path>?go-get=1`` and reading its go-import meta tags.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from constants import Constants, VcsKinds
from common.errors import NetworkError, RootDiscoveryError
from common.http_client import HttpClient
from common.logging_utils import extra_context, is_debug_enabled
from versioning.models import RepoRoot

from .go_import import match_meta_import, parse_meta_imports

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HostPattern:
    """Static mapping of a host's import paths to repositories."""
    path_prefix: str
    pattern: "re.Pattern[str]"
    vcs: str
    repo_template: str = "https://{root}"


_ELEM = r"[\w.\-]+"

STATIC_HOSTS: List[HostPattern] = [
    HostPattern(
        path_prefix="github.com",
        pattern=re.compile(rf"^(?P<root>github\.com/{_ELEM}/{_ELEM})(/{_ELEM})*$"),
        vcs=VcsKinds.GIT.value,
    ),
    HostPattern(
        path_prefix="bitbucket.org",
        pattern=re.compile(rf"^(?P<root>bitbucket\.org/{_ELEM}/{_ELEM})(/{_ELEM})*$"),
        vcs=VcsKinds.GIT.value,
    ),
    HostPattern(
        path_prefix="hub.jazz.net/git",
        pattern=re.compile(rf"^(?P<root>hub\.jazz\.net/git/[a-z0-9]+/{_ELEM})(/{_ELEM})*$"),
        vcs=VcsKinds.GIT.value,
    ),
    HostPattern(
        path_prefix="git.apache.org",
        pattern=re.compile(rf"^(?P<root>git\.apache\.org/[a-z0-9_.\-]+\.git)(/{_ELEM})*$"),
        vcs=VcsKinds.GIT.value,
    ),
    HostPattern(
        path_prefix="git.openstack.org",
        pattern=re.compile(rf"^(?P<root>git\.openstack\.org/{_ELEM}/{_ELEM})(\.git)?(/{_ELEM})*$"),
        vcs=VcsKinds.GIT.value,
    ),
    HostPattern(
        path_prefix="chiselapp.com",
        pattern=re.compile(r"^(?P<root>chiselapp\.com/user/[A-Za-z0-9]+/repository/[\w.\-]+)$"),
        vcs=VcsKinds.FOSSIL.value,
    ),
]

# <host>/<path>.<vcs>[/<subdir>]; the repository URL drops the VCS suffix.
GENERIC_PATTERN = re.compile(
    r"^(?P<root>(?P<repo>([a-z0-9.\-]+\.)+[a-z0-9.\-]+(:[0-9]+)?(/~?[\w.\-]+)+?)"
    r"\.(?P<vcs>bzr|fossil|git|hg|svn))(/~?[\w.\-]+)*$"
)


def _has_path_prefix(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def _check_import_path(path: str) -> None:
    if not path or path.startswith("/") or path.endswith("/") or "//" in path:
        raise RootDiscoveryError(f"discover repository root of {path!r}: malformed import path")
    host = path.split("/", 1)[0]
    if "." not in host:
        raise RootDiscoveryError(
            f"discover repository root of {path!r}: import path does not begin with hostname"
        )


def match_static_root(path: str) -> Optional[RepoRoot]:
    """Resolve ``path`` against the static host table.

    Returns:
        The repository root, or None when no table entry applies.

    Raises:
        RootDiscoveryError: If the path belongs to a known host but does not
            match that host's layout.
    """
    for host in STATIC_HOSTS:
        if not _has_path_prefix(path, host.path_prefix):
            continue
        match = host.pattern.match(path)
        if not match:
            raise RootDiscoveryError(
                f"discover repository root of {path!r}: invalid {host.path_prefix} import path"
            )
        root = match.group("root")
        return RepoRoot(
            vcs_kind=host.vcs,
            repo_url=host.repo_template.format(root=root),
            root_path=root,
        )

    match = GENERIC_PATTERN.match(path)
    if match:
        return RepoRoot(
            vcs_kind=match.group("vcs"),
            repo_url=f"https://{match.group('repo')}",
            root_path=match.group("root"),
        )
    return None


class RepoRootDiscovery:
    """Stateless repository-root lookup, safe for concurrent use."""

    def __init__(self, http: Optional[HttpClient] = None, *, dynamic: bool = True):
        """Initialize discovery.

        Args:
            http: Shared HTTP client for go-import lookups.
            dynamic: Whether paths outside the static table may be looked up
                over the network.
        """
        self._http = http
        self._dynamic = dynamic

    async def repo_root_for_path(self, path: str) -> RepoRoot:
        """Return the repository root serving ``path``.

        Raises:
            RootDiscoveryError: If the path cannot be mapped to a repository.
        """
        _check_import_path(path)

        root = match_static_root(path)
        if root is not None:
            if is_debug_enabled(logger):
                logger.debug(
                    "Repository root from static table",
                    extra=extra_context(
                        event="decision",
                        component="vcs_root",
                        action="static_match",
                        target=path,
                        outcome=root.root_path,
                    ),
                )
            return root

        if not self._dynamic or self._http is None:
            raise RootDiscoveryError(
                f"discover repository root of {path!r}: unrecognized import path"
            )
        return await self._discover_dynamic(path)

    async def _discover_dynamic(self, path: str) -> RepoRoot:
        url = f"https://{path}?{Constants.GO_GET_QUERY}"
        what = f"discover repository root of {path!r}"
        assert self._http is not None
        try:
            body = await self._http.get_bytes(url, context=what)
        except NetworkError as exc:
            raise RootDiscoveryError(str(exc)) from exc

        imports = parse_meta_imports(body.decode("utf-8", errors="replace"))
        meta = match_meta_import(imports, path, Constants.SUPPORTED_VCS)
        if meta is None:
            raise RootDiscoveryError(f"{what}: no go-import meta tag matches {url}")

        if is_debug_enabled(logger):
            logger.debug(
                "Repository root from go-import meta tag",
                extra=extra_context(
                    event="decision",
                    component="vcs_root",
                    action="meta_import",
                    target=path,
                    outcome=meta.prefix,
                ),
            )
        return RepoRoot(vcs_kind=meta.vcs, repo_url=meta.repo_url, root_path=meta.prefix)
