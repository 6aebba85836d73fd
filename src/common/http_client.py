"""Shared HTTP client used by the registry and repository layers.

Wraps a single ``aiohttp.ClientSession`` so every outbound request shares one
connection pool and the same error handling and DEBUG traces. Requests are
cancelled by cancelling the awaiting task; there are no retries.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

import aiohttp

from constants import Constants
from common.errors import NetworkError
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


class HttpClient:
    """Async GET client with consistent error handling."""

    def __init__(
        self,
        timeout: float = Constants.REQUEST_TIMEOUT,
        limit: int = Constants.HTTP_CONNECTION_LIMIT,
    ):
        """Initialize the client.

        Args:
            timeout: Total request timeout in seconds; 0 disables it.
            limit: Maximum number of pooled connections.
        """
        self._timeout = aiohttp.ClientTimeout(total=timeout or None)
        self._limit = limit
        self._session: Optional[aiohttp.ClientSession] = None

    async def start(self) -> None:
        """Start the HTTP session."""
        if self._session is None:
            connector = aiohttp.TCPConnector(limit=self._limit)
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                connector=connector,
                headers={"User-Agent": Constants.USER_AGENT},
            )

    async def stop(self) -> None:
        """Stop the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def get_bytes(
        self,
        url: str,
        *,
        context: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> bytes:
        """Perform a GET request and return the response body.

        Args:
            url: Target URL.
            context: Human-readable operation tag for logs and errors.
            headers: Optional extra request headers.

        Returns:
            bytes: The response body of a 200 response.

        Raises:
            NetworkError: On transport failure, timeout or non-200 status.
        """
        if self._session is None:
            await self.start()
        assert self._session is not None

        safe_target = safe_url(url)
        with Timer() as t:
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP request",
                    extra=extra_context(
                        event="http_request",
                        component="http_client",
                        action="GET",
                        target=safe_target,
                        context=context,
                    ),
                )
            try:
                async with self._session.get(url, headers=headers) as response:
                    body = await response.read()
                    status = response.status
            except asyncio.TimeoutError as exc:
                raise NetworkError(
                    f"{context}: fetch {safe_target}: request timed out", url=url
                ) from exc
            except aiohttp.ClientError as exc:
                raise NetworkError(
                    f"{context}: fetch {safe_target}: {exc}", url=url
                ) from exc

        if status != 200:
            logger.debug(
                "HTTP non-200 response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="unexpected_status",
                    status_code=status,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                ),
            )
            detail = body[:200].decode("utf-8", errors="replace").strip()
            message = f"{context}: fetch {safe_target}: unexpected status {status}"
            if detail:
                message = f"{message}: {detail.splitlines()[0]}"
            raise NetworkError(message, url=url, status=status)

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response ok",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="success",
                    status_code=status,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                ),
            )
        return body

    async def __aenter__(self) -> "HttpClient":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.stop()
