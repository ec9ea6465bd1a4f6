# SPDX-License-Identifier: Apache-2.0
"""On-device language classification using langdetect."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from langdetect import DetectorFactory, LangDetectException, detect_langs

logger = logging.getLogger(__name__)


@runtime_checkable
class LocalClassifier(Protocol):
    """Synchronous, offline language classifier."""

    def classify(self, text: str) -> tuple[str, float] | None:
        """Return (language code, confidence), or None if undetermined."""
        ...


class LangdetectClassifier:
    """Classifier backed by langdetect (port of Google's language-detection).

    langdetect is randomized; a fixed seed makes results reproducible.
    """

    def __init__(self, min_confidence: float = 0.5, seed: int = 0) -> None:
        """Initialize LangdetectClassifier.

        Args:
            min_confidence: Best guesses below this probability count as
                a failed detection.
            seed: Seed for langdetect's detector factory.
        """
        self._min_confidence = min_confidence
        DetectorFactory.seed = seed

    def classify(self, text: str) -> tuple[str, float] | None:
        try:
            candidates = detect_langs(text)
        except LangDetectException as e:
            logger.debug("Local language detection failed: %s", e)
            return None

        if not candidates:
            return None
        best = candidates[0]
        if best.prob < self._min_confidence:
            logger.debug("Local detection too uncertain: %s (%.2f)", best.lang, best.prob)
            return None
        return best.lang, float(best.prob)
