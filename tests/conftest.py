# SPDX-License-Identifier: Apache-2.0
"""Shared fakes for network tests."""

from __future__ import annotations

import asyncio
import json
from collections import defaultdict, deque
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from doc_translate.network.executor import RequestExecutor
from doc_translate.network.registry import TaskRegistry
from doc_translate.network.request import PreparedRequest
from doc_translate.network.transport import HTTPResponse


def json_response(payload: Any, status: int = 200) -> HTTPResponse:
    return HTTPResponse(status=status, body=json.dumps(payload).encode("utf-8"))


class FakeTransport:
    """Scripted transport that records every request it receives.

    Responses are served per URL path when routed, otherwise from a shared
    queue. An exception in the script is raised instead of responding.
    """

    def __init__(self, *responses: HTTPResponse | BaseException) -> None:
        self.calls: list[PreparedRequest] = []
        self._queue: deque[HTTPResponse | BaseException] = deque(responses)
        self._routes: dict[str, deque[HTTPResponse | BaseException]] = defaultdict(deque)
        self.gate: asyncio.Event | None = None

    def queue(self, *responses: HTTPResponse | BaseException) -> None:
        self._queue.extend(responses)

    def route(self, path: str, *responses: HTTPResponse | BaseException) -> None:
        self._routes[path].extend(responses)

    def hold(self) -> asyncio.Event:
        """Block every send until the returned event is set."""
        self.gate = asyncio.Event()
        return self.gate

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def paths(self) -> list[str]:
        return [call.url.path for call in self.calls]

    async def send(
        self,
        request: PreparedRequest,
        on_headers: Callable[[], None] | None = None,
    ) -> HTTPResponse:
        self.calls.append(request)
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)

        path = request.url.path
        if self._routes.get(path):
            response = self._routes[path].popleft()
        elif self._queue:
            response = self._queue.popleft()
        else:
            raise AssertionError(f"Unexpected request to {request.url}")

        if isinstance(response, BaseException):
            raise response
        if on_headers is not None:
            on_headers()
        return response


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def fake_sleep() -> AsyncMock:
    """Records backoff/poll delays without waiting."""
    return AsyncMock(return_value=None)


@pytest.fixture
def registry() -> TaskRegistry:
    return TaskRegistry()


@pytest.fixture
def executor(
    fake_transport: FakeTransport,
    registry: TaskRegistry,
    fake_sleep: AsyncMock,
) -> RequestExecutor:
    return RequestExecutor(fake_transport, registry=registry, sleep=fake_sleep)
