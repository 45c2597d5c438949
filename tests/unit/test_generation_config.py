"""Unit tests for generation configuration and the generator factory."""

from __future__ import annotations

import pytest

from matins.generation.config import OpenAIGenerationConfig, parse_api_key_secret
from matins.generation.errors import GeneratorConfigError, OpenAIConfigError
from matins.generation.factory import create_document_generator
from matins.generation.openai_client import OpenAIDocumentGenerator


class TestParseApiKeySecret:
    """Tests for ``parse_api_key_secret``."""

    @pytest.mark.parametrize(
        ("secret", "expected"),
        [
            ("sk-raw", "sk-raw"),
            ("  sk-raw  ", "sk-raw"),
            ('{"apiKey": "sk-json"}', "sk-json"),
            ('{"OPENAI_API_KEY": " sk-env "}', "sk-env"),
            ('{"apiKey": "", "OPENAI_API_KEY": "sk-second"}', "sk-second"),
            ('{"other": "value"}', None),
            ('["sk-list"]', '["sk-list"]'),
            ("", None),
            ("   ", None),
            (None, None),
        ],
        ids=[
            "raw",
            "raw-padded",
            "json-apiKey",
            "json-env-name",
            "json-fallthrough",
            "json-without-key",
            "json-non-object",
            "empty",
            "blank",
            "unset",
        ],
    )
    def test_parse(self, secret: str | None, expected: str | None) -> None:
        """Raw keys and JSON secrets both resolve to the key."""
        assert parse_api_key_secret(secret) == expected


@pytest.mark.usefixtures("clean_env")
class TestOpenAIGenerationConfigFromEnv:
    """Tests for ``OpenAIGenerationConfig.from_env``."""

    def test_missing_key(self) -> None:
        """An absent key variable is a configuration error."""
        with pytest.raises(OpenAIConfigError, match="MATINS_OPENAI_API_KEY"):
            OpenAIGenerationConfig.from_env()

    def test_empty_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A key variable without a usable key is a configuration error."""
        monkeypatch.setenv("MATINS_OPENAI_API_KEY", '{"apiKey": ""}')
        with pytest.raises(OpenAIConfigError, match="non-empty"):
            OpenAIGenerationConfig.from_env()

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Only the key is required."""
        monkeypatch.setenv("MATINS_OPENAI_API_KEY", "sk-test")
        config = OpenAIGenerationConfig.from_env()
        assert config.api_key == "sk-test"
        assert config.model == "gpt-4o-mini"
        assert config.endpoint == "https://api.openai.com/v1/chat/completions"
        assert config.max_tokens == 4096
        assert config.timeout_s == pytest.approx(60.0)

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Every setting can be overridden from the environment."""
        monkeypatch.setenv("MATINS_OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("MATINS_OPENAI_ENDPOINT", "http://localhost:8080/v1/chat")
        monkeypatch.setenv("MATINS_OPENAI_MODEL", "local-model")
        monkeypatch.setenv("MATINS_OPENAI_TEMPERATURE", "0.7")
        monkeypatch.setenv("MATINS_OPENAI_MAX_TOKENS", "2048")
        monkeypatch.setenv("MATINS_OPENAI_TIMEOUT_S", "15")
        config = OpenAIGenerationConfig.from_env()
        assert config.endpoint == "http://localhost:8080/v1/chat"
        assert config.model == "local-model"
        assert config.temperature == pytest.approx(0.7)
        assert config.max_tokens == 2048
        assert config.timeout_s == pytest.approx(15.0)

    @pytest.mark.parametrize(
        ("variable", "value"),
        [
            ("MATINS_OPENAI_TEMPERATURE", "hot"),
            ("MATINS_OPENAI_TEMPERATURE", "2.5"),
            ("MATINS_OPENAI_MAX_TOKENS", "many"),
            ("MATINS_OPENAI_MAX_TOKENS", "0"),
            ("MATINS_OPENAI_TIMEOUT_S", "-1"),
        ],
    )
    def test_invalid_values(
        self, monkeypatch: pytest.MonkeyPatch, variable: str, value: str
    ) -> None:
        """Out-of-range or unparsable settings name the offending variable."""
        monkeypatch.setenv("MATINS_OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv(variable, value)
        with pytest.raises(GeneratorConfigError, match=variable):
            OpenAIGenerationConfig.from_env()


@pytest.mark.usefixtures("clean_env")
class TestCreateDocumentGenerator:
    """Tests for ``create_document_generator``."""

    def test_without_key_returns_none(self) -> None:
        """No key selects the deterministic renderer."""
        assert create_document_generator() is None

    def test_blank_secret_returns_none(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A secret without a usable key also selects deterministic rendering."""
        monkeypatch.setenv("MATINS_OPENAI_API_KEY", '{"apiKey": "  "}')
        assert create_document_generator() is None

    @pytest.mark.asyncio
    async def test_with_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A usable key builds the OpenAI generator."""
        monkeypatch.setenv("MATINS_OPENAI_API_KEY", '{"apiKey": "sk-test"}')
        generator = create_document_generator()
        assert isinstance(generator, OpenAIDocumentGenerator)
        assert generator.config.api_key == "sk-test"
        await generator.aclose()

    def test_invalid_setting_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Invalid settings are reported even though a key is present."""
        monkeypatch.setenv("MATINS_OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("MATINS_OPENAI_MAX_TOKENS", "-5")
        with pytest.raises(GeneratorConfigError):
            create_document_generator()
