"""Unit tests for the OpenAI-compatible document generator."""

from __future__ import annotations

import contextlib
import json
import typing as typ

import httpx
import pytest

from matins.document.models import DocumentCounts
from matins.generation.config import OpenAIGenerationConfig
from matins.generation.errors import (
    OpenAIAPIError,
    OpenAIConfigError,
    OpenAIResponseShapeError,
)
from matins.generation.openai_client import OpenAIDocumentGenerator
from matins.generation.prompts import GenerationPrompt

if typ.TYPE_CHECKING:
    import collections.abc as cabc

_PROMPT = GenerationPrompt(system="system text", user="user text")
_COUNTS = DocumentCounts(today=2, incomplete=1, due_today=0)


def _completion(content: str, *, usage: dict[str, int] | None = None) -> dict:
    body: dict[str, object] = {
        "choices": [{"message": {"role": "assistant", "content": content}}]
    }
    if usage is not None:
        body["usage"] = usage
    return body


@pytest.fixture
def config() -> OpenAIGenerationConfig:
    """Provide a test configuration."""
    return OpenAIGenerationConfig(
        api_key="sk-test",
        endpoint="https://llm.example.test/v1/chat/completions",
    )


@contextlib.asynccontextmanager
async def generator_with_handler(
    config: OpenAIGenerationConfig,
    handler: cabc.Callable[[httpx.Request], httpx.Response],
) -> cabc.AsyncIterator[OpenAIDocumentGenerator]:
    """Create a generator over ``httpx.MockTransport``, handling cleanup."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    generator = OpenAIDocumentGenerator(config, http_client=client)
    try:
        yield generator
    finally:
        await generator.aclose()
        await client.aclose()


class TestConstruction:
    """Tests for generator construction."""

    def test_rejects_blank_api_key(self) -> None:
        """A whitespace-only key is refused up front."""
        with pytest.raises(OpenAIConfigError, match="non-empty"):
            OpenAIDocumentGenerator(OpenAIGenerationConfig(api_key="  "))

    def test_defaults(self, config: OpenAIGenerationConfig) -> None:
        """The default model and temperature match the briefing service."""
        assert config.model == "gpt-4o-mini"
        assert config.temperature == pytest.approx(0.2)


class TestGenerateMarkdown:
    """Tests for ``generate_markdown``."""

    @pytest.mark.asyncio
    async def test_request_and_response(self, config: OpenAIGenerationConfig) -> None:
        """The prompt is sent as chat messages and the content returned."""
        seen: list[dict[str, object]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(
                200,
                json=_completion(
                    "# Briefing",
                    usage={
                        "prompt_tokens": 120,
                        "completion_tokens": 30,
                        "total_tokens": 150,
                    },
                ),
            )

        async with generator_with_handler(config, handler) as generator:
            assert generator.last_invocation_metrics is None
            markdown = await generator.generate_markdown(_PROMPT)
            metrics = generator.last_invocation_metrics

        assert markdown == "# Briefing"
        [payload] = seen
        assert payload["model"] == "gpt-4o-mini"
        assert payload["messages"] == [
            {"role": "system", "content": "system text"},
            {"role": "user", "content": "user text"},
        ]
        assert "response_format" not in payload
        assert metrics is not None
        assert metrics.total_tokens == 150
        assert metrics.prompt_tokens == 120

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("response", "error_type", "fragment"),
        [
            (
                httpx.Response(429, headers={"Retry-After": "30"}, json={}),
                OpenAIAPIError,
                "retry after 30s",
            ),
            (httpx.Response(500, text="upstream broke"), OpenAIAPIError, "500"),
            (httpx.Response(200, text="not json"), OpenAIResponseShapeError, "JSON"),
            (
                httpx.Response(200, json={"choices": []}),
                OpenAIResponseShapeError,
                "choices",
            ),
            (
                httpx.Response(200, json={"choices": [{"message": {}}]}),
                OpenAIResponseShapeError,
                "content",
            ),
        ],
        ids=["rate-limited", "server-error", "not-json", "no-choices", "no-content"],
    )
    async def test_error_handling(
        self,
        config: OpenAIGenerationConfig,
        response: httpx.Response,
        error_type: type[Exception],
        fragment: str,
    ) -> None:
        """Error responses map onto the generation error hierarchy."""
        async with generator_with_handler(config, lambda _request: response) as gen:
            with pytest.raises(error_type, match=fragment):
                await gen.generate_markdown(_PROMPT)

    @pytest.mark.asyncio
    async def test_timeout(self, config: OpenAIGenerationConfig) -> None:
        """Transport timeouts become API errors."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with generator_with_handler(config, handler) as generator:
            with pytest.raises(OpenAIAPIError, match="timed out"):
                await generator.generate_markdown(_PROMPT)

    @pytest.mark.asyncio
    async def test_network_error(self, config: OpenAIGenerationConfig) -> None:
        """Connection failures become API errors."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with generator_with_handler(config, handler) as generator:
            with pytest.raises(OpenAIAPIError, match="network error"):
                await generator.generate_markdown(_PROMPT)


class TestConfirmCounts:
    """Tests for ``confirm_counts``."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("matches", [True, False])
    async def test_verdict(
        self, config: OpenAIGenerationConfig, *, matches: bool
    ) -> None:
        """The JSON verdict is decoded and the expected counts are sent."""
        seen: list[dict[str, typ.Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            verdict = json.dumps({"matches": matches, "reason": "checked"})
            return httpx.Response(200, json=_completion(verdict))

        async with generator_with_handler(config, handler) as generator:
            result = await generator.confirm_counts("# Doc", _COUNTS)

        assert result is matches
        [payload] = seen
        assert payload["response_format"] == {"type": "json_object"}
        user_message = payload["messages"][1]["content"]
        assert "Scheduled today: 2" in user_message
        assert "Incomplete: 1" in user_message
        assert user_message.endswith("# Doc")

    @pytest.mark.asyncio
    async def test_malformed_verdict(self, config: OpenAIGenerationConfig) -> None:
        """A verdict that is not the expected JSON is a shape error."""

        def handler(_request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_completion("yes, they match"))

        async with generator_with_handler(config, handler) as generator:
            with pytest.raises(OpenAIResponseShapeError, match="yes, they match"):
                await generator.confirm_counts("# Doc", _COUNTS)
