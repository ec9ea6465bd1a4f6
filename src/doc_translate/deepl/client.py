# SPDX-License-Identifier: Apache-2.0
"""DeepL API client built on the request executor."""

from __future__ import annotations

import logging

from doc_translate.deepl.languages import TargetLanguage, base_url_for_key
from doc_translate.deepl.models import (
    DetectionResponse,
    DocumentHandle,
    DocumentStatus,
    LanguageDetection,
    TextTranslation,
    TranslationResponse,
)
from doc_translate.errors import ConfigurationError, EmptyTextError
from doc_translate.network.errors import InvalidResponseError
from doc_translate.network.executor import RequestExecutor
from doc_translate.network.progress import ProgressCallback
from doc_translate.network.request import FormField, Request

logger = logging.getLogger(__name__)

TRANSLATION_REQUEST_ID = "translation"
DOCUMENT_UPLOAD_REQUEST_ID = "document-upload"


def status_request_id(document_id: str) -> str:
    return f"document-status:{document_id}"


def result_request_id(document_id: str) -> str:
    return f"document-result:{document_id}"


def _lang_code(lang: TargetLanguage | str) -> str:
    if isinstance(lang, TargetLanguage):
        return lang.value
    return lang.strip().upper()


class DeepLClient:
    """DeepL translation API client.

    Free-account keys (":fx" suffix) talk to the free endpoint, all others to
    the pro endpoint, unless ``base_url`` is given.

    Attributes:
        name: Backend identifier ("deepl").
    """

    def __init__(
        self,
        api_key: str,
        executor: RequestExecutor,
        base_url: str | None = None,
    ) -> None:
        """Initialize DeepLClient.

        Args:
            api_key: DeepL API key.
            executor: Executor used for every request.
            base_url: API base URL (default: chosen by account tier).

        Raises:
            ConfigurationError: If API key is not provided.
        """
        api_key = api_key.strip() if api_key else ""
        if not api_key:
            raise ConfigurationError("DeepL API key is required")

        self._api_key = api_key
        self._executor = executor
        self._base_url = (base_url or base_url_for_key(api_key)).rstrip("/")

    @property
    def name(self) -> str:
        """Return backend name."""
        return "deepl"

    @property
    def base_url(self) -> str:
        """Return the API base URL."""
        return self._base_url

    @property
    def executor(self) -> RequestExecutor:
        """Return the request executor."""
        return self._executor

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"DeepL-Auth-Key {self._api_key}"}

    def _request(
        self,
        path: str,
        fields: tuple[FormField, ...],
        request_id: str | None = None,
    ) -> Request:
        request = Request(
            url=f"{self._base_url}{path}",
            method="POST",
            headers=self._headers(),
            fields=fields,
        )
        if request_id is not None:
            request.request_id = request_id
        return request

    async def translate_text(
        self,
        text: str,
        target_lang: TargetLanguage | str,
        source_lang: str | None = None,
        preserve_formatting: bool = True,
        request_id: str = TRANSLATION_REQUEST_ID,
        progress: ProgressCallback | None = None,
    ) -> TextTranslation:
        """Translate a single text.

        Starting a translation cancels any translation still in flight under
        the same ``request_id``.

        Args:
            text: Text to translate.
            target_lang: Target language code ("DE", "JA", ...).
            source_lang: Source language code (None lets DeepL detect it).
            preserve_formatting: Ask DeepL to keep the original formatting.
            request_id: Identifier used for cancellation.
            progress: Optional progress callback.

        Returns:
            Translated text and detected source language.

        Raises:
            EmptyTextError: If ``text`` is empty.
            APIError: On request failure.
        """
        if not text:
            raise EmptyTextError("No text to translate")

        fields = [
            FormField("text", text),
            FormField("target_lang", _lang_code(target_lang)),
            FormField("preserve_formatting", "1" if preserve_formatting else "0"),
        ]
        if source_lang and source_lang.lower() != "auto":
            fields.append(FormField("source_lang", source_lang.upper()))

        response = await self._executor.execute(
            self._request("/translate", tuple(fields), request_id),
            TranslationResponse,
            progress=progress,
        )
        if not response.translations:
            raise InvalidResponseError("No translation returned from server")
        return response.translations[0]

    async def upload_document(
        self,
        payload: bytes,
        target_lang: TargetLanguage | str,
        filename: str = "document.pdf",
        content_type: str = "application/pdf",
        request_id: str = DOCUMENT_UPLOAD_REQUEST_ID,
    ) -> DocumentHandle:
        """Upload a document for translation.

        Returns:
            Document id and key of the created job.

        Raises:
            APIError: On request failure.
        """
        fields = (
            FormField("target_lang", _lang_code(target_lang)),
            FormField("file", payload, filename=filename, content_type=content_type),
        )
        handle = await self._executor.execute(
            self._request("/document", fields, request_id), DocumentHandle
        )
        logger.info("Uploaded document %s (%d bytes)", handle.document_id, len(payload))
        return handle

    async def document_status(self, handle: DocumentHandle) -> DocumentStatus:
        """Fetch the translation status of an uploaded document."""
        return await self._executor.execute(
            self._request(
                f"/document/{handle.document_id}",
                (FormField("document_key", handle.document_key),),
                status_request_id(handle.document_id),
            ),
            DocumentStatus,
        )

    async def download_document(self, handle: DocumentHandle) -> bytes:
        """Download the translated document bytes."""
        return await self._executor.execute(
            self._request(
                f"/document/{handle.document_id}/result",
                (FormField("document_key", handle.document_key),),
                result_request_id(handle.document_id),
            ),
            bytes,
        )

    async def detect_language(
        self,
        text: str,
        request_id: str | None = None,
    ) -> LanguageDetection:
        """Detect the language of ``text`` remotely.

        Raises:
            EmptyTextError: If ``text`` is empty.
            InvalidResponseError: If the server returns no detection.
            APIError: On request failure.
        """
        if not text:
            raise EmptyTextError()

        response = await self._executor.execute(
            self._request("/detect", (FormField("text", text),), request_id),
            DetectionResponse,
        )
        if not response.detections:
            raise InvalidResponseError("No detection returned from server")
        return response.detections[0]

    def cancel(self, request_id: str) -> bool:
        """Cancel the request registered under ``request_id``."""
        return self._executor.cancel(request_id)

    def cancel_translation(self) -> bool:
        """Cancel the current text translation, if any."""
        return self._executor.cancel(TRANSLATION_REQUEST_ID)

    def cancel_all(self) -> int:
        """Cancel every in-flight request of the underlying executor."""
        return self._executor.cancel_all()
