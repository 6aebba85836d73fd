"""Source resolvers for the supported resolution strategies."""

from constants import Strategies

from .base import SourceResolver
from .discover import DiscoveryResolver, build_source
from .origin import OriginResolver, source_from_metadata

__all__ = [
    "SourceResolver",
    "DiscoveryResolver",
    "OriginResolver",
    "build_source",
    "source_from_metadata",
    "make_resolver",
]


def make_resolver(config, registry, discovery) -> SourceResolver:
    """Return the resolver selected by ``config.strategy``.

    Raises:
        ValueError: For an unknown strategy name.
    """
    if config.strategy == Strategies.DISCOVER.value:
        return DiscoveryResolver(config, discovery)
    if config.strategy == Strategies.ORIGIN.value:
        return OriginResolver(config, registry)
    raise ValueError(f"Unsupported strategy: {config.strategy}")
