# SPDX-License-Identifier: Apache-2.0
"""Response models for the DeepL API."""

from __future__ import annotations

from pydantic import BaseModel


class TextTranslation(BaseModel):
    text: str
    detected_source_language: str


class TranslationResponse(BaseModel):
    translations: list[TextTranslation]


class DocumentHandle(BaseModel):
    """Identifies an uploaded document. Both fields are needed for later calls."""

    document_id: str
    document_key: str


class DocumentStatus(BaseModel):
    """Body of a document status response.

    ``status`` is kept as a plain string; unknown values are handled by the
    job coordinator rather than rejected here.
    """

    status: str
    document_id: str | None = None
    seconds_remaining: int | None = None
    billed_characters: int | None = None
    error_message: str | None = None


class LanguageDetection(BaseModel):
    language: str
    confidence: float


class DetectionResponse(BaseModel):
    detections: list[LanguageDetection]
