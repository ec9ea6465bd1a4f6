# SPDX-License-Identifier: Apache-2.0
"""Base exceptions shared across doc_translate."""


class DocTranslateError(Exception):
    """Base exception for doc_translate."""

    pass


class ConfigurationError(DocTranslateError):
    """Configuration error (missing API key, invalid parameters, etc.).

    This error type is NOT retryable - fix the configuration first.
    """

    pass


class EmptyTextError(DocTranslateError):
    """Raised before any network call when the input text is empty."""

    def __init__(self, message: str = "Text is empty") -> None:
        super().__init__(message)
