# SPDX-License-Identifier: Apache-2.0
"""Tests for ClientConfig."""

from __future__ import annotations

from pathlib import Path

import pytest

from doc_translate.config import ClientConfig
from doc_translate.errors import ConfigurationError


class TestClientConfig:
    """Tests for defaults and validation."""

    def test_defaults(self) -> None:
        """Test default values."""
        config = ClientConfig()
        assert config.api_key == ""
        assert config.base_url is None
        assert config.max_retries == 3
        assert config.backoff_base == 0.5
        assert config.poll_interval == 2.0
        assert config.max_polls == 300
        assert config.poll_timeout is None

    def test_free_tier(self) -> None:
        """Keys ending in ":fx" belong to the free tier."""
        assert ClientConfig(api_key="abc:fx").is_free_tier
        assert not ClientConfig(api_key="abc").is_free_tier

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_retries": -1},
            {"timeout": 0},
            {"poll_interval": -0.5},
            {"max_polls": 0},
            {"backoff_base": -0.5},
            {"poll_timeout": 0},
            {"poll_timeout": -5.0},
        ],
    )
    def test_invalid_values(self, kwargs: dict[str, object]) -> None:
        """Out-of-range values raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            ClientConfig(**kwargs)  # type: ignore[arg-type]


class TestFromEnv:
    """Tests for ClientConfig.from_env."""

    def test_empty_environment(self) -> None:
        """An empty environment gives the defaults."""
        assert ClientConfig.from_env({}) == ClientConfig()

    def test_reads_variables(self) -> None:
        """Every variable is parsed into its field."""
        config = ClientConfig.from_env(
            {
                "DEEPL_API_KEY": " secret:fx \n",
                "DEEPL_API_URL": "http://localhost:8080/v2",
                "DOC_TRANSLATE_TIMEOUT": "10",
                "DOC_TRANSLATE_MAX_RETRIES": "5",
                "DOC_TRANSLATE_POLL_INTERVAL": "0.5",
                "DOC_TRANSLATE_MAX_POLLS": "20",
                "DOC_TRANSLATE_POLL_TIMEOUT": "60",
                "DOC_TRANSLATE_OUTPUT_DIR": "/tmp/translations",
            }
        )

        assert config.api_key == "secret:fx"
        assert config.base_url == "http://localhost:8080/v2"
        assert config.timeout == 10.0
        assert config.max_retries == 5
        assert config.poll_interval == 0.5
        assert config.max_polls == 20
        assert config.poll_timeout == 60.0
        assert config.output_dir == Path("/tmp/translations")

    def test_negative_poll_timeout(self) -> None:
        """A negative poll timeout is rejected instead of ending polling early."""
        with pytest.raises(ConfigurationError) as exc_info:
            ClientConfig.from_env({"DOC_TRANSLATE_POLL_TIMEOUT": "-5"})
        assert "poll_timeout" in str(exc_info.value)

    def test_invalid_number(self) -> None:
        """A non-numeric value names the offending variable."""
        with pytest.raises(ConfigurationError) as exc_info:
            ClientConfig.from_env({"DOC_TRANSLATE_MAX_RETRIES": "many"})
        assert "DOC_TRANSLATE_MAX_RETRIES" in str(exc_info.value)

    def test_reads_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without a mapping, os.environ is used."""
        monkeypatch.setenv("DEEPL_API_KEY", "from-env")
        assert ClientConfig.from_env().api_key == "from-env"
