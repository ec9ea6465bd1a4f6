# SPDX-License-Identifier: Apache-2.0
"""HTTP transports used by the request executor."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, runtime_checkable

import aiohttp

from doc_translate.network.errors import InvalidURLError, NetworkError
from doc_translate.network.request import PreparedRequest

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class HTTPResponse:
    """Status, headers and fully read body of one response."""

    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status <= 299

    def text(self) -> str | None:
        """Decode the body as UTF-8, or None if it is empty or not text."""
        if not self.body:
            return None
        try:
            return self.body.decode("utf-8")
        except UnicodeDecodeError:
            return None


@runtime_checkable
class Transport(Protocol):
    """Protocol for sending a prepared request."""

    async def send(
        self,
        request: PreparedRequest,
        on_headers: Callable[[], None] | None = None,
    ) -> HTTPResponse:
        """Send ``request`` and read the whole response.

        Args:
            request: Prepared request.
            on_headers: Invoked once the response headers have arrived.

        Returns:
            The response.

        Raises:
            NetworkError: On a transport-level failure.
            InvalidURLError: If the transport rejects the URL.
        """
        ...


class AiohttpTransport:
    """Transport backed by an ``aiohttp.ClientSession``."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize AiohttpTransport.

        Args:
            timeout: Total timeout per request in seconds.
        """
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> AiohttpTransport:
        """Enter async context manager."""
        await self._ensure_session()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Exit async context manager."""
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure aiohttp session exists.

        Returns:
            Active aiohttp session.
        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def send(
        self,
        request: PreparedRequest,
        on_headers: Callable[[], None] | None = None,
    ) -> HTTPResponse:
        session = await self._ensure_session()
        try:
            async with session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.data,
            ) as response:
                if on_headers is not None:
                    on_headers()
                body = await response.read()
                return HTTPResponse(
                    status=response.status,
                    body=body,
                    headers=dict(response.headers),
                )
        except aiohttp.InvalidURL as e:
            raise InvalidURLError(str(request.url), e) from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Request failed: {e}", cause=e) from e
        except asyncio.TimeoutError as e:
            raise NetworkError("Request timed out", cause=e) from e

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None
