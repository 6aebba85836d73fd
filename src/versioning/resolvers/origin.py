"""Resolver using the origin recorded by the module proxy.

The proxy's version-metadata endpoint reports the VCS, repository URL, ref
and commit it fetched a version from; no repository-root discovery is done.
"""

import logging
import os

from common.errors import DecodeError
from constants import Constants, Strategies
from registry.gomod.client import GoProxyClient, VersionMetadata
from registry.gomod.escaping import escape_path

from ..models import DependencyRecord, ResolverConfig, SourceDescriptor
from .base import SourceResolver

logger = logging.getLogger(__name__)


def source_from_metadata(meta: VersionMetadata, config: ResolverConfig) -> SourceDescriptor:
    """Build a descriptor from proxy version metadata.

    A ``refs/tags/`` ref yields a tag; any other ref yields the commit hash.

    Raises:
        DecodeError: If the metadata carries no usable origin.
    """
    origin = meta.origin
    what = f"resolve origin of {meta.path}@{meta.version}"
    if not origin.vcs or not origin.url:
        raise DecodeError(f"{what}: proxy reported no origin")

    tag, commit = "", ""
    if origin.ref.startswith(Constants.TAG_REF_PREFIX):
        tag = origin.ref[len(Constants.TAG_REF_PREFIX):]
    elif origin.hash:
        commit = origin.hash
    else:
        raise DecodeError(f"{what}: origin has neither tag ref nor hash")

    dest = os.path.join(config.vendor_dir, *escape_path(meta.path).split("/"))
    return SourceDescriptor(
        type=origin.vcs,
        url=origin.url,
        tag=tag,
        commit=commit,
        dest=dest,
        flags=config.vcs_flags(),
    )


class OriginResolver(SourceResolver):
    """Resolves dependencies from proxy-reported origins."""

    def __init__(self, config: ResolverConfig, registry: GoProxyClient):
        super().__init__(config)
        self.registry = registry

    @property
    def strategy(self) -> str:
        return Strategies.ORIGIN.value

    async def resolve(self, record: DependencyRecord) -> SourceDescriptor:
        meta = await self.registry.fetch_info(record.path, record.version)
        logger.debug("Origin for %s: %s %s", record, meta.origin.vcs, meta.origin.url)
        return source_from_metadata(meta, self.config)
