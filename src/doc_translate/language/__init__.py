# SPDX-License-Identifier: Apache-2.0
"""Language detection."""

from doc_translate.language.detector import (
    DetectionAPIError,
    DetectionError,
    DetectionMethod,
    DetectionResult,
    LanguageDetector,
    NoDetectionMethodError,
)
from doc_translate.language.local import LangdetectClassifier, LocalClassifier
from doc_translate.language.names import LANGUAGE_NAMES, display_name

__all__ = [
    "DetectionAPIError",
    "DetectionError",
    "DetectionMethod",
    "DetectionResult",
    "LANGUAGE_NAMES",
    "LangdetectClassifier",
    "LanguageDetector",
    "LocalClassifier",
    "NoDetectionMethodError",
    "display_name",
]
