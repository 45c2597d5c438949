"""OpenAI-compatible implementation of the DocumentGenerator protocol."""

from __future__ import annotations

import json
import typing as typ

import httpx
import msgspec

from matins.generation.errors import (
    OpenAIAPIError,
    OpenAIConfigError,
    OpenAIResponseShapeError,
)
from matins.generation.metrics import ModelInvocationMetrics
from matins.generation.prompts import ConfirmationResponse, build_confirmation_prompt

if typ.TYPE_CHECKING:
    from matins.document.models import DocumentCounts
    from matins.generation.config import OpenAIGenerationConfig
    from matins.generation.prompts import GenerationPrompt

_HTTP_ERROR_STATUS_THRESHOLD = 400
_HTTP_RATE_LIMITED = 429


def _to_int_or_none(value: object) -> int | None:
    """Return ``int`` for integer values, else ``None``."""
    if isinstance(value, int):
        return value
    return None


def _get_retry_after(response: httpx.Response) -> int | None:
    """Extract Retry-After header value if present and numeric."""
    retry_after = response.headers.get("Retry-After")
    if retry_after and retry_after.isdigit():
        return int(retry_after)
    return None


def _get_nested(data: dict[str, object], *keys: str) -> object:
    """Traverse nested dict path, returning None for missing keys."""
    current: object = data
    for key in keys:
        if not isinstance(current, dict):
            return None
        current_dict = typ.cast("dict[str, object]", current)
        current = current_dict.get(key)
    return current


class OpenAIDocumentGenerator:
    """Document generator backed by an OpenAI-compatible chat endpoint.

    Parameters
    ----------
    config
        Configuration for the OpenAI API client.
    http_client
        Optional httpx.AsyncClient for testing. If not provided, the instance
        creates and owns its own client.

    Examples
    --------
    >>> import asyncio
    >>> from matins.generation import OpenAIDocumentGenerator, OpenAIGenerationConfig
    >>> generator = OpenAIDocumentGenerator(OpenAIGenerationConfig(api_key="sk-..."))
    >>> asyncio.run(generator.aclose())

    """

    def __init__(
        self,
        config: OpenAIGenerationConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with configuration."""
        if not config.api_key.strip():
            raise OpenAIConfigError.empty_api_key()

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
            },
        )
        self._last_invocation_metrics: ModelInvocationMetrics | None = None

    @property
    def config(self) -> OpenAIGenerationConfig:
        """Read-only access to the client configuration."""
        return self._config

    @property
    def model(self) -> str:
        """Model identifier sent with every request."""
        return self._config.model

    @property
    def last_invocation_metrics(self) -> ModelInvocationMetrics | None:
        """Return metrics captured from the most recent invocation."""
        return self._last_invocation_metrics

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def generate_markdown(self, prompt: GenerationPrompt) -> str:
        """Request a markdown completion for ``prompt``.

        Raises
        ------
        OpenAIAPIError
            If the API returns an error response or times out.
        OpenAIResponseShapeError
            If the response is missing expected fields or is not JSON.

        """
        return await self._call_chat_completion(prompt, json_response=False)

    async def confirm_counts(self, markdown: str, expected: DocumentCounts) -> bool:
        """Ask the service to confirm the summary counts of ``markdown``.

        Raises
        ------
        OpenAIAPIError
            If the API returns an error response or times out.
        OpenAIResponseShapeError
            If the verdict is missing or not valid JSON.

        """
        prompt = build_confirmation_prompt(markdown, expected)
        content = await self._call_chat_completion(prompt, json_response=True)
        try:
            verdict = msgspec.json.decode(content, type=ConfirmationResponse)
        except msgspec.DecodeError as exc:
            raise OpenAIResponseShapeError.invalid_json(content) from exc
        return verdict.matches

    async def _call_chat_completion(
        self,
        prompt: GenerationPrompt,
        *,
        json_response: bool,
    ) -> str:
        """Call the chat completions endpoint and return assistant content."""
        payload = self._build_payload(prompt, json_response=json_response)
        response = await self._send_request(payload)
        self._check_response_errors(response)
        return self._parse_json_response(response)

    def _build_payload(
        self,
        prompt: GenerationPrompt,
        *,
        json_response: bool,
    ) -> dict[str, object]:
        payload: dict[str, object] = {
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": prompt.system},
                {"role": "user", "content": prompt.user},
            ],
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
        }
        if json_response:
            payload["response_format"] = {"type": "json_object"}
        return payload

    async def _send_request(
        self,
        payload: dict[str, object],
    ) -> httpx.Response:
        """Perform HTTP POST request to the chat completions endpoint.

        Raises
        ------
        OpenAIAPIError
            If a timeout or network error occurs.

        """
        try:
            return await self._client.post(
                self._config.endpoint,
                json=payload,
            )
        except httpx.TimeoutException as exc:
            raise OpenAIAPIError.timeout() from exc
        except httpx.RequestError as exc:
            raise OpenAIAPIError.network_error(str(exc)) from exc

    def _check_response_errors(self, response: httpx.Response) -> None:
        if response.status_code == _HTTP_RATE_LIMITED:
            raise OpenAIAPIError.rate_limited(_get_retry_after(response))

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise OpenAIAPIError.http_error(response.status_code, response.text)

    def _parse_json_response(self, response: httpx.Response) -> str:
        """Parse JSON response and extract assistant message content.

        Raises
        ------
        OpenAIResponseShapeError
            If the response is not valid JSON or missing expected fields.

        """
        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            raise OpenAIResponseShapeError.invalid_json(response.text) from exc
        if not isinstance(data, dict):
            raise OpenAIResponseShapeError.missing("choices")
        data_dict = typ.cast("dict[str, object]", data)
        self._last_invocation_metrics = self._extract_usage_metrics(data_dict)
        return self._extract_content(data_dict)

    def _extract_usage_metrics(
        self,
        data: dict[str, object],
    ) -> ModelInvocationMetrics:
        """Extract token usage metrics from the API response payload."""
        usage = data.get("usage")
        if not isinstance(usage, dict):
            return ModelInvocationMetrics()

        usage_dict = typ.cast("dict[str, object]", usage)
        return ModelInvocationMetrics(
            prompt_tokens=_to_int_or_none(usage_dict.get("prompt_tokens")),
            completion_tokens=_to_int_or_none(usage_dict.get("completion_tokens")),
            total_tokens=_to_int_or_none(usage_dict.get("total_tokens")),
        )

    def _extract_content(self, data: dict[str, object]) -> str:
        """Extract assistant message content from API response.

        Raises
        ------
        OpenAIResponseShapeError
            If the response is missing expected fields.

        """
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise OpenAIResponseShapeError.missing("choices")

        first_choice = choices[0]
        if not isinstance(first_choice, dict):
            raise OpenAIResponseShapeError.missing("choices[0]")

        first_choice_dict = typ.cast("dict[str, object]", first_choice)
        content = _get_nested(first_choice_dict, "message", "content")
        if not isinstance(content, str):
            raise OpenAIResponseShapeError.missing("choices[0].message.content")

        return content
