# SPDX-License-Identifier: Apache-2.0
"""Client configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from doc_translate.errors import ConfigurationError


@dataclass
class ClientConfig:
    """Configuration for the DeepL client and document jobs.

    Attributes:
        api_key: DeepL API key. Keys ending in ":fx" belong to free accounts.
        base_url: API base URL. If None, chosen from the key's account tier.
        timeout: Total timeout per HTTP request in seconds.
        max_retries: Retries for 429 / 5xx responses.
        backoff_base: Backoff base in seconds (delay = 2**attempt * base).
        poll_interval: Constant delay between document status polls.
        max_polls: Maximum number of status polls per document job.
        poll_timeout: Optional wall-clock limit for the polling phase.
        output_dir: Directory for downloaded documents (system temp if None).
    """

    api_key: str = ""
    base_url: str | None = None
    timeout: float = 30.0
    max_retries: int = 3
    backoff_base: float = 0.5
    poll_interval: float = 2.0
    max_polls: int = 300
    poll_timeout: float | None = None
    output_dir: Path | None = None

    # Environment variable names
    ENV_VARS: ClassVar[dict[str, str]] = {
        "api_key": "DEEPL_API_KEY",
        "base_url": "DEEPL_API_URL",
        "timeout": "DOC_TRANSLATE_TIMEOUT",
        "max_retries": "DOC_TRANSLATE_MAX_RETRIES",
        "poll_interval": "DOC_TRANSLATE_POLL_INTERVAL",
        "max_polls": "DOC_TRANSLATE_MAX_POLLS",
        "poll_timeout": "DOC_TRANSLATE_POLL_TIMEOUT",
        "output_dir": "DOC_TRANSLATE_OUTPUT_DIR",
    }

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be >= 0")
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")
        if self.poll_interval < 0:
            raise ConfigurationError("poll_interval must be >= 0")
        if self.max_polls < 1:
            raise ConfigurationError("max_polls must be >= 1")
        if self.backoff_base < 0:
            raise ConfigurationError("backoff_base must be >= 0")
        if self.poll_timeout is not None and self.poll_timeout <= 0:
            raise ConfigurationError("poll_timeout must be positive")

    @property
    def is_free_tier(self) -> bool:
        """True for free-account keys (":fx" suffix)."""
        return self.api_key.strip().endswith(":fx")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Build a configuration from environment variables.

        Unset variables keep their defaults.

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed.
        """
        env = os.environ if environ is None else environ
        names = cls.ENV_VARS
        kwargs: dict[str, object] = {"api_key": env.get(names["api_key"], "").strip()}

        if env.get(names["base_url"]):
            kwargs["base_url"] = env[names["base_url"]]
        if env.get(names["output_dir"]):
            kwargs["output_dir"] = Path(env[names["output_dir"]])

        for attr, parse in (
            ("timeout", float),
            ("max_retries", int),
            ("poll_interval", float),
            ("max_polls", int),
            ("poll_timeout", float),
        ):
            raw = env.get(names[attr])
            if not raw:
                continue
            try:
                kwargs[attr] = parse(raw)
            except ValueError:
                raise ConfigurationError(
                    f"Invalid value for {names[attr]}: {raw!r}"
                ) from None

        return cls(**kwargs)  # type: ignore[arg-type]
