# SPDX-License-Identifier: Apache-2.0
"""doc_translate - resilient DeepL client for text and document translation."""

from doc_translate.config import ClientConfig
from doc_translate.deepl import DeepLClient, TargetLanguage
from doc_translate.errors import ConfigurationError, DocTranslateError, EmptyTextError
from doc_translate.jobs import DocumentJobCoordinator, JobHandle
from doc_translate.language import DetectionMethod, DetectionResult, LanguageDetector
from doc_translate.network import (
    AiohttpTransport,
    Request,
    RequestExecutor,
    Result,
    TaskRegistry,
)

__version__ = "0.1.0"

__all__ = [
    "AiohttpTransport",
    "ClientConfig",
    "ConfigurationError",
    "DeepLClient",
    "DetectionMethod",
    "DetectionResult",
    "DocTranslateError",
    "DocumentJobCoordinator",
    "EmptyTextError",
    "JobHandle",
    "LanguageDetector",
    "Request",
    "RequestExecutor",
    "Result",
    "TargetLanguage",
    "TaskRegistry",
]
