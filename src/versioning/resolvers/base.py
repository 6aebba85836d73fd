"""Base class for source resolvers."""

from abc import ABC, abstractmethod

from ..models import DependencyRecord, ResolverConfig, SourceDescriptor


class SourceResolver(ABC):
    """Maps one dependency record to exactly one source descriptor.

    Implementations hold no per-call mutable state and may be awaited
    concurrently for any number of records.
    """

    def __init__(self, config: ResolverConfig):
        self.config = config

    @property
    @abstractmethod
    def strategy(self) -> str:
        """Name of the resolution strategy."""

    @abstractmethod
    async def resolve(self, record: DependencyRecord) -> SourceDescriptor:
        """Resolve ``record`` into a source descriptor.

        Raises:
            ResolutionError: Any subclass; the caller treats it as fatal.
        """
