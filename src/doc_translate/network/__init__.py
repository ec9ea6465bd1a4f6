# SPDX-License-Identifier: Apache-2.0
"""Network layer: retrying request executor, task registry and transports.

Usage:
    from doc_translate.network import AiohttpTransport, Request, RequestExecutor

    async with AiohttpTransport() as transport:
        executor = RequestExecutor(transport)
        data = await executor.execute(Request(url="https://example.com"), dict)
"""

from doc_translate.network.errors import (
    MAX_RETRIES_MESSAGE,
    APIError,
    DecodingError,
    InvalidResponseError,
    InvalidURLError,
    NetworkError,
    RequestPreparationError,
    ServerError,
    backoff_delay,
    is_retryable_status,
)
from doc_translate.network.executor import RequestExecutor, decode_response
from doc_translate.network.progress import ProgressCallback, ProgressTracker
from doc_translate.network.registry import Cancellable, TaskRegistry, TaskToken
from doc_translate.network.request import FormField, PreparedRequest, Request, prepare_request
from doc_translate.network.result import Result, ResultCallback
from doc_translate.network.transport import AiohttpTransport, HTTPResponse, Transport

__all__ = [
    # Errors
    "APIError",
    "DecodingError",
    "InvalidResponseError",
    "InvalidURLError",
    "MAX_RETRIES_MESSAGE",
    "NetworkError",
    "RequestPreparationError",
    "ServerError",
    "backoff_delay",
    "is_retryable_status",
    # Requests and results
    "FormField",
    "PreparedRequest",
    "Request",
    "Result",
    "ResultCallback",
    "prepare_request",
    "decode_response",
    # Execution
    "AiohttpTransport",
    "Cancellable",
    "HTTPResponse",
    "ProgressCallback",
    "ProgressTracker",
    "RequestExecutor",
    "TaskRegistry",
    "TaskToken",
    "Transport",
]
