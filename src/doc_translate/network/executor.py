# SPDX-License-Identifier: Apache-2.0
"""Request executor: one HTTP exchange with retry, decoding and cancellation."""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

from pydantic import TypeAdapter, ValidationError

from doc_translate.network import progress as milestones
from doc_translate.network.errors import (
    MAX_RETRIES_MESSAGE,
    DecodingError,
    InvalidResponseError,
    ServerError,
    backoff_delay,
    is_retryable_status,
)
from doc_translate.network.progress import ProgressCallback, ProgressTracker
from doc_translate.network.registry import TaskRegistry, TaskToken
from doc_translate.network.request import Request, prepare_request
from doc_translate.network.result import Result, ResultCallback
from doc_translate.network.transport import HTTPResponse, Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[Any]]

DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE = 0.5


@functools.lru_cache(maxsize=64)
def _adapter(response_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(response_type)


def decode_response(response: HTTPResponse, response_type: type[T]) -> T:
    """Decode a 2xx response body into ``response_type``.

    ``bytes`` returns the raw body unchanged.

    Raises:
        InvalidResponseError: If a typed response has an empty body.
        DecodingError: If the body does not validate against the type.
    """
    if response_type is bytes:
        return response.body  # type: ignore[return-value]
    if not response.body:
        raise InvalidResponseError("Response body is empty")
    try:
        return _adapter(response_type).validate_json(response.body)  # type: ignore[no-any-return]
    except ValidationError as e:
        raise DecodingError(f"Failed to decode response: {e}", cause=e) from e


class RequestExecutor:
    """Issues HTTP requests with automatic retry for transient failures.

    Every request runs in its own ``asyncio.Task`` registered in a
    ``TaskRegistry`` under the request's identifier, so a caller can cancel
    one logical operation without touching the others.
    """

    def __init__(
        self,
        transport: Transport,
        registry: TaskRegistry | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_base: float = DEFAULT_BACKOFF_BASE,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize RequestExecutor.

        Args:
            transport: Transport used to send requests.
            registry: Registry of in-flight requests (a private one if None).
            max_retries: Default maximum number of retries per request.
            backoff_base: Base of the exponential backoff, in seconds.
            sleep: Non-blocking delay coroutine used between retries.
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self._transport = transport
        self._registry = registry if registry is not None else TaskRegistry()
        self._max_retries = max_retries
        self._backoff_base = backoff_base
        self._sleep = sleep

    @property
    def registry(self) -> TaskRegistry:
        """Return the registry of in-flight requests."""
        return self._registry

    @property
    def transport(self) -> Transport:
        """Return the underlying transport."""
        return self._transport

    def start(
        self,
        request: Request,
        response_type: type[T],
        *,
        max_retries: int | None = None,
        progress: ProgressCallback | None = None,
    ) -> asyncio.Task[T]:
        """Schedule ``request`` and register it under its identifier.

        Any request already registered under the same identifier is
        cancelled first. Must be called from a running event loop.

        Returns:
            The task performing the request.
        """
        return self._spawn(request, response_type, max_retries, progress, None)

    async def execute(
        self,
        request: Request,
        response_type: type[T],
        *,
        max_retries: int | None = None,
        progress: ProgressCallback | None = None,
    ) -> T:
        """Perform ``request`` and return the decoded response.

        Raises:
            APIError: On any classified failure.
            asyncio.CancelledError: If the request was cancelled.
        """
        task = self.start(
            request, response_type, max_retries=max_retries, progress=progress
        )
        return await task

    def submit(
        self,
        request: Request,
        response_type: type[T],
        callback: ResultCallback[T],
        *,
        max_retries: int | None = None,
        progress: ProgressCallback | None = None,
    ) -> asyncio.Task[T]:
        """Perform ``request`` and deliver one ``Result`` to ``callback``.

        The callback always runs from the event loop, never inside this call.
        Cancelled requests, and requests replaced by a newer request with the
        same identifier, deliver no callback.
        """
        return self._spawn(request, response_type, max_retries, progress, callback)

    def cancel(self, request_id: str) -> bool:
        """Cancel the request registered under ``request_id`` (no-op if absent)."""
        return self._registry.cancel(request_id)

    def cancel_all(self) -> int:
        """Cancel every in-flight request."""
        return self._registry.cancel_all()

    def _spawn(
        self,
        request: Request,
        response_type: type[T],
        max_retries: int | None,
        progress: ProgressCallback | None,
        callback: ResultCallback[T] | None,
    ) -> asyncio.Task[T]:
        retries = self._max_retries if max_retries is None else max_retries
        task = asyncio.get_running_loop().create_task(
            self._perform(request, response_type, retries, ProgressTracker(progress)),
            name=f"request:{request.request_id}",
        )
        token = self._registry.register(request.request_id, task)
        task.add_done_callback(functools.partial(self._on_done, token, callback))
        return task

    def _on_done(
        self,
        token: TaskToken,
        callback: ResultCallback[Any] | None,
        task: asyncio.Task[Any],
    ) -> None:
        current = self._registry.complete(token)
        if task.cancelled():
            logger.debug("Request %r cancelled", token.identifier)
            return
        error = task.exception()
        if callback is None:
            return
        if not current:
            logger.debug("Discarding stale completion for %r", token.identifier)
            return
        if error is not None:
            callback(Result.failure(error))
        else:
            callback(Result.success(task.result()))

    async def _perform(
        self,
        request: Request,
        response_type: type[T],
        max_retries: int,
        tracker: ProgressTracker,
    ) -> T:
        retries = 0
        while True:
            prepared = prepare_request(request)
            logger.debug(
                "%s %s (request %r, attempt %d)",
                prepared.method,
                prepared.url,
                request.request_id,
                retries + 1,
            )
            tracker.report(milestones.SENT)
            response = await self._transport.send(
                prepared,
                on_headers=lambda: tracker.report(milestones.HEADERS_RECEIVED),
            )

            if not response.ok:
                if not is_retryable_status(response.status):
                    raise ServerError(response.status, response.text())
                if retries >= max_retries:
                    logger.warning(
                        "Request %r failed with status %d after %d retries",
                        request.request_id,
                        response.status,
                        retries,
                    )
                    raise ServerError(
                        response.status, MAX_RETRIES_MESSAGE, retries_exhausted=True
                    )
                retries += 1
                delay = backoff_delay(retries, self._backoff_base)
                logger.warning(
                    "Request %r got status %d, retry %d/%d in %.1fs",
                    request.request_id,
                    response.status,
                    retries,
                    max_retries,
                    delay,
                )
                await self._sleep(delay)
                continue

            tracker.report(milestones.BODY_PARSED)
            value = decode_response(response, response_type)
            tracker.report(milestones.COMPLETE)
            return value
