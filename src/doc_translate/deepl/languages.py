# SPDX-License-Identifier: Apache-2.0
"""Supported target languages, API key format and account tiers."""

from __future__ import annotations

import re
from enum import Enum

FREE_API_URL = "https://api-free.deepl.com/v2"
PRO_API_URL = "https://api.deepl.com/v2"

FREE_KEY_SUFFIX = ":fx"

# UUID keys, plus the older 32-alphanumeric form; both take an optional ":fx"
_API_KEY_PATTERN = re.compile(
    r"^(?:[0-9a-fA-F]{8}-(?:[0-9a-fA-F]{4}-){3}[0-9a-fA-F]{12}|[a-zA-Z0-9]{32})(?::fx)?$"
)


class TargetLanguage(str, Enum):
    """Languages offered as translation targets."""

    ENGLISH = "EN"
    GERMAN = "DE"
    FRENCH = "FR"
    ITALIAN = "IT"
    SPANISH = "ES"
    PORTUGUESE = "PT"
    DUTCH = "NL"
    POLISH = "PL"
    RUSSIAN = "RU"
    JAPANESE = "JA"
    CHINESE = "ZH"

    @property
    def display_name(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, code: str) -> TargetLanguage:
        """Look up a language by code, case-insensitively.

        Raises:
            ValueError: If the code is not supported.
        """
        try:
            return cls(code.strip().upper())
        except ValueError:
            supported = ", ".join(lang.value for lang in cls)
            raise ValueError(
                f"Unsupported target language {code!r} (supported: {supported})"
            ) from None


def is_free_api_key(api_key: str) -> bool:
    """True if the key belongs to a free account."""
    return api_key.strip().endswith(FREE_KEY_SUFFIX)


def is_valid_api_key(api_key: str) -> bool:
    """Check the key format (UUID or 32 alphanumerics, optional ":fx")."""
    return _API_KEY_PATTERN.match(api_key.strip()) is not None


def base_url_for_key(api_key: str) -> str:
    """API base URL for the account tier of ``api_key``."""
    return FREE_API_URL if is_free_api_key(api_key) else PRO_API_URL
