"""Concurrent resolution of every dependency record.

One task is started per record. The first failing task cancels all others;
the call returns only after every task has finished, so no work outlives it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional

from common.logging_utils import extra_context, is_debug_enabled, Timer

from .models import DependencyRecord, SourceDescriptor
from .resolvers.base import SourceResolver

logger = logging.getLogger(__name__)


class VersionResolutionService:
    """Fan-out executor over a SourceResolver."""

    def __init__(self, resolver: SourceResolver, max_concurrency: int = 0):
        """Initialize the service.

        Args:
            resolver: Resolver applied to each record.
            max_concurrency: Upper bound on simultaneously running
                resolutions; 0 runs every record at once.
        """
        self.resolver = resolver
        self.max_concurrency = max_concurrency

    async def _resolve_one(
        self,
        record: DependencyRecord,
        semaphore: Optional[asyncio.Semaphore],
        results: List[SourceDescriptor],
    ) -> None:
        if semaphore is None:
            source = await self.resolver.resolve(record)
        else:
            async with semaphore:
                source = await self.resolver.resolve(record)
        # Appends happen on the event loop thread, one at a time.
        results.append(source)
        logger.debug("Resolved %s", record)

    async def resolve_all(self, records: Iterable[DependencyRecord]) -> List[SourceDescriptor]:
        """Resolve every record concurrently.

        Returns:
            The descriptors in completion order (unordered); see
            ``assemble.sort_sources`` for the stable ordering.

        Raises:
            ResolutionError: The first failure; all other resolutions are
                cancelled and awaited before it propagates.
        """
        records = list(records)
        if not records:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency > 0 else None
        results: List[SourceDescriptor] = []
        tasks = [
            asyncio.create_task(self._resolve_one(record, semaphore, results), name=f"resolve {record}")
            for record in records
        ]

        if is_debug_enabled(logger):
            logger.debug(
                "Resolution fan-out started",
                extra=extra_context(
                    event="function_entry",
                    component="service",
                    action="resolve_all",
                    count=len(tasks),
                    strategy=self.resolver.strategy,
                ),
            )

        with Timer() as t:
            try:
                done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
                for task in tasks:
                    if task in done and not task.cancelled() and task.exception() is not None:
                        raise task.exception()
            finally:
                pending = [task for task in tasks if not task.done()]
                if pending:
                    logger.debug("Cancelling %d in-flight resolutions", len(pending))
                    for task in pending:
                        task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)

        if is_debug_enabled(logger):
            logger.debug(
                "Resolution fan-out finished",
                extra=extra_context(
                    event="function_exit",
                    component="service",
                    action="resolve_all",
                    outcome="success",
                    count=len(results),
                    duration_ms=t.duration_ms(),
                ),
            )
        return results
