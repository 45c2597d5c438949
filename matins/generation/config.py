"""Configuration for the OpenAI-compatible document generator."""

from __future__ import annotations

import dataclasses
import os

import msgspec

from matins.generation.constants import MAX_TEMPERATURE, MIN_TEMPERATURE
from matins.generation.errors import GeneratorConfigError, OpenAIConfigError

# Default configuration values - single source of truth
_DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
_DEFAULT_MODEL = "gpt-4o-mini"
_DEFAULT_TIMEOUT_S = 60.0
_DEFAULT_TEMPERATURE = 0.2
_DEFAULT_MAX_TOKENS = 4096

_SECRET_KEY_FIELDS = ("apiKey", "OPENAI_API_KEY")


def parse_api_key_secret(secret: str | None) -> str | None:
    """Extract an API key from a resolved secret value.

    The secret is either the raw key or a JSON object carrying it under
    ``apiKey`` or ``OPENAI_API_KEY``. Returns ``None`` when no usable key is
    present, which selects the deterministic renderer.

    Examples
    --------
    >>> parse_api_key_secret('{"apiKey": " sk-test "}')
    'sk-test'
    >>> parse_api_key_secret("sk-raw")
    'sk-raw'
    >>> parse_api_key_secret("   ") is None
    True

    """
    if secret is None:
        return None
    stripped = secret.strip()
    if not stripped:
        return None
    try:
        decoded = msgspec.json.decode(stripped)
    except msgspec.DecodeError:
        return stripped

    if not isinstance(decoded, dict):
        return stripped
    for field in _SECRET_KEY_FIELDS:
        value = decoded.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def api_key_from_env() -> str | None:
    """Return the API key from ``MATINS_OPENAI_API_KEY``, if one is set."""
    return parse_api_key_secret(os.environ.get("MATINS_OPENAI_API_KEY"))


@dataclasses.dataclass(frozen=True, slots=True)
class OpenAIGenerationConfig:
    """Configuration for the OpenAI-compatible document generator.

    Attributes
    ----------
    api_key
        API key for authentication with the OpenAI API.
    endpoint
        Chat completions endpoint URL.
    model
        Model identifier to use for completions.
    timeout_s
        Request timeout in seconds.
    temperature
        Sampling temperature (0.0 to 2.0).
    max_tokens
        Maximum tokens in the completion response.

    """

    api_key: str
    endpoint: str = _DEFAULT_ENDPOINT
    model: str = _DEFAULT_MODEL
    timeout_s: float = _DEFAULT_TIMEOUT_S
    temperature: float = _DEFAULT_TEMPERATURE
    max_tokens: int = _DEFAULT_MAX_TOKENS

    @staticmethod
    def _parse_temperature_from_env() -> float:
        """Parse and validate temperature from environment.

        Raises
        ------
        GeneratorConfigError
            If temperature value is invalid.

        """
        raw_temperature = os.environ.get("MATINS_OPENAI_TEMPERATURE")
        if raw_temperature is None:
            return _DEFAULT_TEMPERATURE

        try:
            temperature = float(raw_temperature)
        except ValueError as exc:
            raise GeneratorConfigError.invalid_temperature(raw_temperature) from exc

        if not MIN_TEMPERATURE <= temperature <= MAX_TEMPERATURE:
            raise GeneratorConfigError.invalid_temperature(raw_temperature)

        return temperature

    @staticmethod
    def _parse_max_tokens_from_env() -> int:
        """Parse and validate max_tokens from environment.

        Raises
        ------
        GeneratorConfigError
            If max_tokens value is invalid.

        """
        raw_max_tokens = os.environ.get("MATINS_OPENAI_MAX_TOKENS")
        if raw_max_tokens is None:
            return _DEFAULT_MAX_TOKENS

        try:
            max_tokens = int(raw_max_tokens)
        except ValueError as exc:
            raise GeneratorConfigError.invalid_max_tokens(raw_max_tokens) from exc

        if max_tokens <= 0:
            raise GeneratorConfigError.invalid_max_tokens(raw_max_tokens)

        return max_tokens

    @staticmethod
    def _parse_timeout_from_env() -> float:
        raw_timeout = os.environ.get("MATINS_OPENAI_TIMEOUT_S")
        if raw_timeout is None:
            return _DEFAULT_TIMEOUT_S

        try:
            timeout_s = float(raw_timeout)
        except ValueError as exc:
            raise GeneratorConfigError.invalid_timeout(raw_timeout) from exc

        if timeout_s <= 0:
            raise GeneratorConfigError.invalid_timeout(raw_timeout)

        return timeout_s

    @classmethod
    def from_env(cls) -> OpenAIGenerationConfig:
        """Build configuration from environment variables.

        Reads the following environment variables:

        - ``MATINS_OPENAI_API_KEY``: Required key, raw or as a JSON secret
        - ``MATINS_OPENAI_ENDPOINT``: Optional endpoint override
        - ``MATINS_OPENAI_MODEL``: Optional model override
        - ``MATINS_OPENAI_TEMPERATURE``: Optional temperature (0.0 to 2.0)
        - ``MATINS_OPENAI_MAX_TOKENS``: Optional max tokens (positive integer)
        - ``MATINS_OPENAI_TIMEOUT_S``: Optional request timeout in seconds

        Returns
        -------
        OpenAIGenerationConfig
            Configuration instance with values from environment.

        Raises
        ------
        OpenAIConfigError
            If the API key is missing or empty.
        GeneratorConfigError
            If temperature, max_tokens or timeout values are invalid.

        """
        if "MATINS_OPENAI_API_KEY" not in os.environ:
            raise OpenAIConfigError.missing_api_key()
        api_key = api_key_from_env()
        if api_key is None:
            raise OpenAIConfigError.empty_api_key()

        return cls(
            api_key=api_key,
            endpoint=os.environ.get("MATINS_OPENAI_ENDPOINT", _DEFAULT_ENDPOINT),
            model=os.environ.get("MATINS_OPENAI_MODEL", _DEFAULT_MODEL),
            timeout_s=cls._parse_timeout_from_env(),
            temperature=cls._parse_temperature_from_env(),
            max_tokens=cls._parse_max_tokens_from_env(),
        )
