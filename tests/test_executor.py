# SPDX-License-Identifier: Apache-2.0
"""Tests for the request executor."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel

from doc_translate.network import (
    MAX_RETRIES_MESSAGE,
    DecodingError,
    FormField,
    HTTPResponse,
    InvalidResponseError,
    InvalidURLError,
    NetworkError,
    Request,
    RequestExecutor,
    RequestPreparationError,
    Result,
    ServerError,
    TaskRegistry,
    backoff_delay,
    is_retryable_status,
)

from conftest import FakeTransport, json_response


class Greeting(BaseModel):
    text: str


URL = "https://api.example.com/v2/greet"


def _request(request_id: str = "greet") -> Request:
    return Request(url=URL, request_id=request_id)


class TestRetryPolicy:
    """Tests for status classification and backoff."""

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 599])
    def test_retryable(self, status: int) -> None:
        """429 and 5xx are retryable."""
        assert is_retryable_status(status)

    @pytest.mark.parametrize("status", [200, 400, 401, 403, 404, 456, 600])
    def test_not_retryable(self, status: int) -> None:
        """Other statuses are not retryable."""
        assert not is_retryable_status(status)

    def test_backoff_delays(self) -> None:
        """Default backoff is 1s, 2s, 4s."""
        assert [backoff_delay(n) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]

    def test_backoff_custom_base(self) -> None:
        """Test backoff with a custom base."""
        assert backoff_delay(2, base=1.0) == 4.0

    def test_negative_max_retries(self, fake_transport: FakeTransport) -> None:
        """Negative max_retries is rejected."""
        with pytest.raises(ValueError):
            RequestExecutor(fake_transport, max_retries=-1)


class TestExecute:
    """Tests for RequestExecutor.execute."""

    @pytest.mark.asyncio
    async def test_success_decodes_model(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """Test a 200 body decodes into the model."""
        fake_transport.queue(json_response({"text": "Hallo"}))

        result = await executor.execute(_request(), Greeting)

        assert result == Greeting(text="Hallo")
        assert fake_transport.call_count == 1

    @pytest.mark.asyncio
    async def test_success_decodes_plain_types(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """Test decoding into a plain dict."""
        fake_transport.queue(json_response({"a": 1}))
        assert await executor.execute(_request(), dict) == {"a": 1}

    @pytest.mark.asyncio
    async def test_bytes_returns_raw_body(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """Requesting bytes returns the body unchanged."""
        fake_transport.queue(HTTPResponse(status=200, body=b"\x00\x01binary"))
        assert await executor.execute(_request(), bytes) == b"\x00\x01binary"

    @pytest.mark.asyncio
    async def test_undecodable_body_is_decoding_error(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """A 2xx body of the wrong shape is a DecodingError, never a success."""
        fake_transport.queue(json_response({"unexpected": True}))

        with pytest.raises(DecodingError) as exc_info:
            await executor.execute(_request(), Greeting)
        assert exc_info.value.cause is not None

    @pytest.mark.asyncio
    async def test_invalid_json_is_decoding_error(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """A non-JSON body is a DecodingError."""
        fake_transport.queue(HTTPResponse(status=200, body=b"<html>oops</html>"))

        with pytest.raises(DecodingError):
            await executor.execute(_request(), Greeting)

    @pytest.mark.asyncio
    async def test_empty_body_is_invalid_response(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """An empty 2xx body is an InvalidResponseError."""
        fake_transport.queue(HTTPResponse(status=200, body=b""))

        with pytest.raises(InvalidResponseError):
            await executor.execute(_request(), Greeting)

    @pytest.mark.asyncio
    async def test_invalid_url_makes_no_call(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """An invalid URL fails before anything is sent."""
        with pytest.raises(InvalidURLError):
            await executor.execute(Request(url="::not-a-url::"), Greeting)
        assert fake_transport.call_count == 0

    @pytest.mark.asyncio
    async def test_encoding_failure_makes_no_call(
        self,
        executor: RequestExecutor,
        fake_transport: FakeTransport,
        fake_sleep: AsyncMock,
    ) -> None:
        """A body that cannot be encoded fails at once without sending or retrying."""
        request = Request(url=URL, fields=(FormField("count", 3),))  # type: ignore[arg-type]

        with pytest.raises(RequestPreparationError) as exc_info:
            await executor.execute(request, Greeting)

        assert isinstance(exc_info.value.cause, TypeError)
        assert fake_transport.call_count == 0
        fake_sleep.assert_not_awaited()
        assert len(executor.registry) == 0

    @pytest.mark.asyncio
    async def test_network_error_not_retried(
        self,
        executor: RequestExecutor,
        fake_transport: FakeTransport,
        fake_sleep: AsyncMock,
    ) -> None:
        """Transport failures are not retried."""
        fake_transport.queue(NetworkError("connection reset"))

        with pytest.raises(NetworkError):
            await executor.execute(_request(), Greeting)
        assert fake_transport.call_count == 1
        fake_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 403, 404, 456])
    async def test_non_retryable_status(
        self,
        executor: RequestExecutor,
        fake_transport: FakeTransport,
        fake_sleep: AsyncMock,
        status: int,
    ) -> None:
        """Non-retryable statuses fail on the first response."""
        fake_transport.queue(HTTPResponse(status=status, body=b"Quota exceeded"))

        with pytest.raises(ServerError) as exc_info:
            await executor.execute(_request(), Greeting)

        error = exc_info.value
        assert error.status_code == status
        assert error.message == "Quota exceeded"
        assert error.retries_exhausted is False
        assert fake_transport.call_count == 1
        fake_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_server_error_without_body(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """A ServerError without body has no message."""
        fake_transport.queue(HTTPResponse(status=404))

        with pytest.raises(ServerError) as exc_info:
            await executor.execute(_request(), Greeting)
        assert exc_info.value.message is None


class TestRetry:
    """Tests for retry with exponential backoff."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [429, 500, 503])
    async def test_retry_then_success(
        self,
        executor: RequestExecutor,
        fake_transport: FakeTransport,
        fake_sleep: AsyncMock,
        status: int,
    ) -> None:
        """A retryable status is retried after 1s."""
        fake_transport.queue(
            HTTPResponse(status=status),
            json_response({"text": "Hallo"}),
        )

        result = await executor.execute(_request(), Greeting)

        assert result.text == "Hallo"
        assert fake_transport.call_count == 2
        fake_sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_retries_exhausted(
        self,
        executor: RequestExecutor,
        fake_transport: FakeTransport,
        fake_sleep: AsyncMock,
    ) -> None:
        """Three retries at 1s, 2s, 4s, then a ServerError sentinel."""
        fake_transport.queue(*[HTTPResponse(status=503) for _ in range(4)])

        with pytest.raises(ServerError) as exc_info:
            await executor.execute(_request(), Greeting)

        error = exc_info.value
        assert error.retries_exhausted is True
        assert error.message == MAX_RETRIES_MESSAGE
        assert error.status_code == 503
        assert fake_transport.call_count == 4
        assert [call.args[0] for call in fake_sleep.await_args_list] == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_max_retries_override(
        self,
        executor: RequestExecutor,
        fake_transport: FakeTransport,
        fake_sleep: AsyncMock,
    ) -> None:
        """A per-request max_retries overrides the default."""
        fake_transport.queue(HTTPResponse(status=500), HTTPResponse(status=500))

        with pytest.raises(ServerError):
            await executor.execute(_request(), Greeting, max_retries=1)
        assert fake_transport.call_count == 2
        fake_sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_zero_retries(
        self,
        executor: RequestExecutor,
        fake_transport: FakeTransport,
        fake_sleep: AsyncMock,
    ) -> None:
        """With zero retries the first retryable status fails."""
        fake_transport.queue(HTTPResponse(status=429))

        with pytest.raises(ServerError) as exc_info:
            await executor.execute(_request(), Greeting, max_retries=0)
        assert exc_info.value.retries_exhausted is True
        fake_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retry_then_non_retryable(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """A non-retryable status after a retry fails at once."""
        fake_transport.queue(HTTPResponse(status=502), HTTPResponse(status=403, body=b"denied"))

        with pytest.raises(ServerError) as exc_info:
            await executor.execute(_request(), Greeting)
        assert exc_info.value.status_code == 403
        assert exc_info.value.retries_exhausted is False


class TestProgress:
    """Tests for progress milestones."""

    @pytest.mark.asyncio
    async def test_milestones(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """Progress reports 0.1, 0.7, 0.9, 1.0."""
        fake_transport.queue(json_response({"text": "Hallo"}))
        values: list[float] = []

        await executor.execute(_request(), Greeting, progress=values.append)

        assert values == [0.1, 0.7, 0.9, 1.0]

    @pytest.mark.asyncio
    async def test_monotonic_across_retries(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """Progress never goes backwards across retries."""
        fake_transport.queue(HTTPResponse(status=500), json_response({"text": "Hallo"}))
        values: list[float] = []

        await executor.execute(_request(), Greeting, progress=values.append)

        assert values == sorted(values)
        assert all(0.0 <= v <= 1.0 for v in values)
        assert values[-1] == 1.0

    @pytest.mark.asyncio
    async def test_no_completion_on_decode_failure(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """A decoding failure never reports 1.0."""
        fake_transport.queue(json_response({"other": 1}))
        values: list[float] = []

        with pytest.raises(DecodingError):
            await executor.execute(_request(), Greeting, progress=values.append)
        assert 1.0 not in values


class TestSubmit:
    """Tests for callback delivery."""

    @pytest.mark.asyncio
    async def test_callback_not_synchronous(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """The callback never runs inside submit()."""
        fake_transport.queue(json_response({"text": "Hallo"}))
        results: list[Result[Greeting]] = []

        task = executor.submit(_request(), Greeting, results.append)
        assert results == []

        await task
        await asyncio.sleep(0)

        assert len(results) == 1
        assert results[0].ok
        assert results[0].unwrap().text == "Hallo"

    @pytest.mark.asyncio
    async def test_callback_failure(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """Failures are delivered as a failed Result."""
        fake_transport.queue(HTTPResponse(status=400, body=b"bad request"))
        results: list[Result[Greeting]] = []

        task = executor.submit(_request(), Greeting, results.append)
        with pytest.raises(ServerError):
            await task
        await asyncio.sleep(0)

        assert len(results) == 1
        assert not results[0].ok
        assert isinstance(results[0].error, ServerError)
        with pytest.raises(ServerError):
            results[0].unwrap()

    @pytest.mark.asyncio
    async def test_cancelled_request_delivers_no_callback(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """Cancelled requests deliver no callback."""
        gate = fake_transport.hold()
        fake_transport.queue(json_response({"text": "Hallo"}))
        results: list[Result[Greeting]] = []

        task = executor.submit(_request("translation"), Greeting, results.append)
        await asyncio.sleep(0)
        assert executor.cancel("translation") is True
        gate.set()

        with pytest.raises(asyncio.CancelledError):
            await task
        await asyncio.sleep(0)
        assert results == []

    @pytest.mark.asyncio
    async def test_reused_identifier_replaces_request(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """Reusing an identifier cancels the older request."""
        gate = fake_transport.hold()
        fake_transport.queue(json_response({"text": "first"}), json_response({"text": "second"}))
        results: list[Result[Greeting]] = []

        first = executor.submit(_request("translation"), Greeting, results.append)
        await asyncio.sleep(0)
        second = executor.submit(_request("translation"), Greeting, results.append)
        gate.set()

        assert (await second).text in {"first", "second"}
        await asyncio.sleep(0)
        assert first.cancelled()
        assert len(results) == 1
        assert results[0].ok

    @pytest.mark.asyncio
    async def test_stale_completion_discarded(
        self, executor: RequestExecutor, fake_transport: FakeTransport
    ) -> None:
        """A request that finished but was superseded before delivery is dropped."""
        fake_transport.queue(json_response({"text": "old"}))
        results: list[Result[Greeting]] = []

        old = executor.submit(_request("translation"), Greeting, results.append)
        # Let the request finish without running its done callbacks yet
        while not old.done():
            await asyncio.sleep(0)

        gate = fake_transport.hold()
        fake_transport.queue(json_response({"text": "new"}))
        new = executor.submit(_request("translation"), Greeting, results.append)
        gate.set()
        await new
        await asyncio.sleep(0)

        assert [r.unwrap().text for r in results] == ["new"]


class TestCancellation:
    """Tests for cancellation by identifier."""

    @pytest.mark.asyncio
    async def test_cancel_absent_is_noop(self, executor: RequestExecutor) -> None:
        """Cancelling an unknown identifier is a no-op."""
        assert executor.cancel("nothing") is False

    @pytest.mark.asyncio
    async def test_cancel_during_backoff(
        self, fake_transport: FakeTransport, registry: TaskRegistry
    ) -> None:
        """Cancelling during backoff stops further attempts."""
        sleeping = asyncio.Event()

        async def slow_sleep(delay: float) -> None:
            sleeping.set()
            await asyncio.sleep(3600)

        executor = RequestExecutor(fake_transport, registry=registry, sleep=slow_sleep)
        fake_transport.queue(HTTPResponse(status=503))

        task = executor.start(_request("upload"), Greeting)
        await sleeping.wait()
        executor.cancel("upload")

        with pytest.raises(asyncio.CancelledError):
            await task
        assert fake_transport.call_count == 1

    @pytest.mark.asyncio
    async def test_cancel_all(
        self, executor: RequestExecutor, fake_transport: FakeTransport, registry: TaskRegistry
    ) -> None:
        """Test cancel_all stops every request."""
        fake_transport.hold()
        tasks = [executor.start(_request(f"req-{i}"), Greeting) for i in range(3)]
        await asyncio.sleep(0)

        assert executor.cancel_all() == 3
        results = await asyncio.gather(*tasks, return_exceptions=True)
        assert all(isinstance(r, asyncio.CancelledError) for r in results)
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_registry_cleared_after_completion(
        self, executor: RequestExecutor, fake_transport: FakeTransport, registry: TaskRegistry
    ) -> None:
        """Finished requests leave the registry."""
        fake_transport.queue(json_response({"text": "Hallo"}))

        await executor.execute(_request("translation"), Greeting)
        await asyncio.sleep(0)

        assert "translation" not in registry
