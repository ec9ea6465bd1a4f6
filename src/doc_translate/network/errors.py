# SPDX-License-Identifier: Apache-2.0
"""Error taxonomy for HTTP requests issued by the request executor."""

from __future__ import annotations

from doc_translate.errors import DocTranslateError

MAX_RETRIES_MESSAGE = "Max retries exceeded"


class APIError(DocTranslateError):
    """Base exception for a failed API request."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class InvalidURLError(APIError):
    """The endpoint URL could not be parsed into an absolute http(s) URL."""

    def __init__(self, url: str, cause: Exception | None = None) -> None:
        super().__init__(f"Invalid URL: {url!r}", cause)
        self.url = url


class RequestPreparationError(APIError):
    """The request body could not be encoded."""


class NetworkError(APIError):
    """Transport-level failure (DNS, timeout, connection reset, ...)."""


class ServerError(APIError):
    """Non-2xx HTTP status.

    Attributes:
        status_code: HTTP status of the last response.
        message: Response body text or a sentinel, if any.
        retries_exhausted: True when the status was retryable but every
            retry was used up.
    """

    def __init__(
        self,
        status_code: int,
        message: str | None = None,
        retries_exhausted: bool = False,
    ) -> None:
        text = f"Server error (status {status_code})"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)
        self.status_code = status_code
        self.message = message
        self.retries_exhausted = retries_exhausted


class InvalidResponseError(APIError):
    """The response envelope is unusable (e.g. no body where one is required)."""


class DecodingError(APIError):
    """The response body does not match the expected shape."""


def is_retryable_status(status: int) -> bool:
    """Return True for statuses worth retrying (429 and 5xx)."""
    return status == 429 or 500 <= status <= 599


def backoff_delay(attempt: int, base: float = 0.5) -> float:
    """Delay in seconds before retry number ``attempt`` (1-indexed).

    With the default base this gives 1s, 2s, 4s for attempts 1, 2, 3.
    """
    return float(2**attempt) * base
