# SPDX-License-Identifier: Apache-2.0
"""Document job error definitions."""

from __future__ import annotations

from doc_translate.errors import DocTranslateError


class JobError(DocTranslateError):
    """Base exception for document job errors."""

    def __init__(
        self,
        message: str,
        stage: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.cause = cause


class JobFailedError(JobError):
    """The job reached a terminal failure."""


class UnknownStatusError(JobError):
    """The server reported a status this client does not understand."""

    def __init__(self, value: str) -> None:
        super().__init__(f"unknown status: {value}", stage="poll")
        self.value = value


class JobTimeoutError(JobError):
    """Polling gave up before the document was translated."""
