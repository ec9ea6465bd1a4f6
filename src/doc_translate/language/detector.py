# SPDX-License-Identifier: Apache-2.0
"""Language detection with local and remote classifiers."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from enum import Enum

from doc_translate.deepl.client import DeepLClient
from doc_translate.errors import DocTranslateError, EmptyTextError
from doc_translate.language.local import LangdetectClassifier, LocalClassifier
from doc_translate.language.names import display_name
from doc_translate.network.errors import APIError, ServerError
from doc_translate.network.executor import RequestExecutor

logger = logging.getLogger(__name__)


class DetectionMethod(str, Enum):
    """Source of a language detection result."""

    LOCAL = "local"
    API = "api"


@dataclass(frozen=True)
class DetectionResult:
    """Detected language.

    Attributes:
        language_code: Code as reported by the classifier ("en", "DE", ...).
        confidence: Confidence in [0, 1].
        display_name: English language name, if known.
        method: Classifier that produced the result.
    """

    language_code: str
    confidence: float
    display_name: str | None
    method: DetectionMethod


class DetectionError(DocTranslateError):
    """Base exception for language detection."""


class NoDetectionMethodError(DetectionError):
    """Local detection failed and no API key is available."""


class DetectionAPIError(DetectionError):
    """Remote detection failed."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


def _clamp(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


class LanguageDetector:
    """Detects the language of a text sample.

    Prefers the fast local classifier by default and falls back to the
    DeepL API when a key is available; with ``DetectionMethod.API`` the
    order is reversed.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        local: LocalClassifier | None = None,
        base_url: str | None = None,
    ) -> None:
        """Initialize LanguageDetector.

        Args:
            executor: Executor used for remote detection requests.
            local: Local classifier (langdetect if None).
            base_url: DeepL API base URL override.
        """
        self._executor = executor
        self._local = local if local is not None else LangdetectClassifier()
        self._base_url = base_url
        self._current_request_id: str | None = None

    async def detect(
        self,
        text: str,
        api_key: str | None = None,
        preferred: DetectionMethod = DetectionMethod.LOCAL,
    ) -> DetectionResult:
        """Detect the language of ``text``.

        A detection still in flight from a previous call is cancelled.

        Args:
            text: Text sample (must be non-empty).
            api_key: DeepL API key; remote detection is skipped without one.
            preferred: Method to try first.

        Returns:
            The detected language.

        Raises:
            EmptyTextError: If ``text`` is empty (no network call is made).
            NoDetectionMethodError: If local detection fails and no API key
                is available.
            DetectionAPIError: If remote detection fails and local detection
                cannot stand in.
        """
        self.cancel()

        if not text:
            raise EmptyTextError()

        key = (api_key or "").strip()

        if preferred is DetectionMethod.LOCAL:
            result = await self._detect_locally(text)
            if result is not None:
                return result
            if not key:
                raise NoDetectionMethodError(
                    "API key not provided and local detection failed"
                )
            return await self._detect_with_api(text, key)

        api_error: DetectionAPIError | None = None
        if key:
            try:
                return await self._detect_with_api(text, key)
            except DetectionAPIError as e:
                logger.warning("Remote language detection failed, trying local: %s", e)
                api_error = e

        result = await self._detect_locally(text)
        if result is not None:
            return result
        if api_error is not None:
            raise api_error
        raise NoDetectionMethodError("API key not provided and local detection failed")

    def cancel(self) -> bool:
        """Cancel the remote detection in flight, if any."""
        request_id = self._current_request_id
        self._current_request_id = None
        if request_id is None:
            return False
        return self._executor.cancel(request_id)

    async def _detect_locally(self, text: str) -> DetectionResult | None:
        classified = await asyncio.to_thread(self._local.classify, text)
        if classified is None:
            return None
        code, confidence = classified
        return DetectionResult(
            language_code=code,
            confidence=_clamp(confidence),
            display_name=display_name(code),
            method=DetectionMethod.LOCAL,
        )

    async def _detect_with_api(self, text: str, api_key: str) -> DetectionResult:
        client = DeepLClient(api_key, self._executor, base_url=self._base_url)
        request_id = f"language-detection:{uuid.uuid4()}"
        self._current_request_id = request_id
        try:
            detection = await client.detect_language(text, request_id=request_id)
        except ServerError as e:
            raise DetectionAPIError(e.message or "Unknown server error", cause=e) from e
        except APIError as e:
            raise DetectionAPIError(str(e), cause=e) from e
        finally:
            if self._current_request_id == request_id:
                self._current_request_id = None

        return DetectionResult(
            language_code=detection.language,
            confidence=_clamp(detection.confidence),
            display_name=display_name(detection.language),
            method=DetectionMethod.API,
        )
