# SPDX-License-Identifier: Apache-2.0
"""DeepL API client.

Usage:
    from doc_translate.deepl import DeepLClient
    from doc_translate.network import AiohttpTransport, RequestExecutor

    async with AiohttpTransport() as transport:
        client = DeepLClient(api_key, RequestExecutor(transport))
        result = await client.translate_text("Hello", "DE")
"""

from doc_translate.deepl.client import (
    DOCUMENT_UPLOAD_REQUEST_ID,
    TRANSLATION_REQUEST_ID,
    DeepLClient,
    result_request_id,
    status_request_id,
)
from doc_translate.deepl.languages import (
    FREE_API_URL,
    PRO_API_URL,
    TargetLanguage,
    base_url_for_key,
    is_free_api_key,
    is_valid_api_key,
)
from doc_translate.deepl.models import (
    DetectionResponse,
    DocumentHandle,
    DocumentStatus,
    LanguageDetection,
    TextTranslation,
    TranslationResponse,
)

__all__ = [
    "DOCUMENT_UPLOAD_REQUEST_ID",
    "FREE_API_URL",
    "PRO_API_URL",
    "TRANSLATION_REQUEST_ID",
    "DeepLClient",
    "DetectionResponse",
    "DocumentHandle",
    "DocumentStatus",
    "LanguageDetection",
    "TargetLanguage",
    "TextTranslation",
    "TranslationResponse",
    "base_url_for_key",
    "is_free_api_key",
    "is_valid_api_key",
    "result_request_id",
    "status_request_id",
]
