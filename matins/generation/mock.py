"""Scripted implementation of DocumentGenerator for testing and development."""

from __future__ import annotations

import typing as typ

from matins.generation.metrics import ModelInvocationMetrics

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from matins.document.models import DocumentCounts
    from matins.generation.prompts import GenerationPrompt

_DEFAULT_MARKDOWN = "# Mock briefing\n"

type _Scripted[T] = T | BaseException


def _next_scripted[T](script: list[_Scripted[T]], default: T) -> T:
    """Pop the next scripted entry, raising it when it is an exception."""
    entry: _Scripted[T] = script.pop(0) if script else default
    if isinstance(entry, BaseException):
        raise entry
    return entry


class MockDocumentGenerator:
    """Deterministic generator that replays scripted responses.

    Each call consumes the next scripted entry. An exception entry is raised
    instead of returned. Once a script is exhausted the defaults apply: the
    configured markdown for generation and ``True`` for confirmation.

    Parameters
    ----------
    documents
        Scripted completions (or exceptions) for :meth:`generate_markdown`.
    confirmations
        Scripted verdicts (or exceptions) for :meth:`confirm_counts`.
    markdown
        Completion returned once ``documents`` is exhausted.

    Examples
    --------
    >>> import asyncio
    >>> from matins.generation.prompts import GenerationPrompt
    >>> generator = MockDocumentGenerator(documents=["# A"])
    >>> asyncio.run(generator.generate_markdown(GenerationPrompt(system="", user="")))
    '# A'

    """

    model = "mock"

    def __init__(
        self,
        *,
        documents: cabc.Iterable[_Scripted[str]] = (),
        confirmations: cabc.Iterable[_Scripted[bool]] = (),
        markdown: str = _DEFAULT_MARKDOWN,
    ) -> None:
        """Store the scripts and reset call tracking."""
        self._documents = list(documents)
        self._confirmations = list(confirmations)
        self._markdown = markdown
        self.prompts: list[GenerationPrompt] = []
        self.confirmed: list[tuple[str, DocumentCounts]] = []
        self._last_invocation_metrics: ModelInvocationMetrics | None = None

    @property
    def generate_calls(self) -> int:
        """Number of :meth:`generate_markdown` calls so far."""
        return len(self.prompts)

    @property
    def confirm_calls(self) -> int:
        """Number of :meth:`confirm_counts` calls so far."""
        return len(self.confirmed)

    @property
    def last_invocation_metrics(self) -> ModelInvocationMetrics | None:
        """Return metrics captured from the latest invocation."""
        return self._last_invocation_metrics

    async def generate_markdown(self, prompt: GenerationPrompt) -> str:
        """Return the next scripted completion."""
        self.prompts.append(prompt)
        self._last_invocation_metrics = ModelInvocationMetrics(
            prompt_tokens=0,
            completion_tokens=0,
            total_tokens=0,
        )
        return _next_scripted(self._documents, self._markdown)

    async def confirm_counts(self, markdown: str, expected: DocumentCounts) -> bool:
        """Return the next scripted verdict."""
        self.confirmed.append((markdown, expected))
        return _next_scripted(self._confirmations, True)  # noqa: FBT003
