"""AI-assisted document renderer with validation, bounded retry and fallback.

The renderer asks a :class:`~matins.generation.protocol.DocumentGenerator`
for the briefing markdown, checks the summary counts with a second round
trip, and retries up to ``max_attempts`` times. When every attempt fails, or
when an attempt fails unexpectedly, the deterministic renderer produces the
document instead. :meth:`AssistedDocumentRenderer.render` never raises.

Usage
-----
>>> from matins.generation import AssistedDocumentRenderer, MockDocumentGenerator
>>> renderer = AssistedDocumentRenderer(MockDocumentGenerator())
>>> outcome = await renderer.render(project, generated_at)
>>> outcome.source
<DocumentSource.GENERATED: 'generated'>

"""

from __future__ import annotations

import dataclasses as dc
import re
import time
import typing as typ

from matins.common.time import to_local
from matins.document.config import DEFAULT_DOCUMENT_CONFIG
from matins.document.markdown import render_document
from matins.document.models import Document, DocumentCounts, document_file_name
from matins.generation.constants import MAX_GENERATION_ATTEMPTS
from matins.generation.errors import GenerationError
from matins.generation.metrics import ModelInvocationMetrics
from matins.generation.prompts import build_generation_prompt
from matins.generation.results import (
    DocumentSource,
    FailureReason,
    GeneratedMarkdown,
    GenerationFailure,
    RenderOutcome,
)
from matins.logging import get_logger, log_debug, log_exception

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from matins.document.config import DocumentConfig
    from matins.generation.observability import BriefingEventLogger
    from matins.generation.prompts import GenerationPrompt
    from matins.generation.protocol import DocumentGenerator
    from matins.generation.results import AttemptResult
    from matins.issues.models import ProjectDocumentInput

logger = get_logger(__name__)

_LEADING_FENCE = re.compile(r"^```(?:markdown|md)?[ \t]*\n?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\n?```\s*$")


def strip_code_fence(markdown: str) -> str:
    """Remove a fenced-code wrapper around a completion.

    Returns the trimmed markdown with a single trailing newline, or an empty
    string when nothing remains.

    Examples
    --------
    >>> strip_code_fence("```markdown\\n# Title\\n```")
    '# Title\\n'

    """
    stripped = markdown.strip()
    stripped = _LEADING_FENCE.sub("", stripped, count=1)
    stripped = _TRAILING_FENCE.sub("", stripped, count=1).strip()
    if not stripped:
        return ""
    return stripped + "\n"


class AssistedDocumentRenderer:
    """Render briefing documents through a generator, with fallback.

    Parameters
    ----------
    generator
        Generation handle. ``None`` selects the deterministic renderer
        without logging a fallback.
    config
        Presentation settings shared with the deterministic renderer.
    max_attempts
        Generate-then-validate cycles before falling back.
    event_logger
        Optional structured event logger.
    fallback_renderer
        Deterministic renderer used on exhaustion.

    """

    def __init__(
        self,
        generator: DocumentGenerator | None,
        *,
        config: DocumentConfig = DEFAULT_DOCUMENT_CONFIG,
        max_attempts: int = MAX_GENERATION_ATTEMPTS,
        event_logger: BriefingEventLogger | None = None,
        fallback_renderer: cabc.Callable[
            [ProjectDocumentInput, dt.datetime, DocumentConfig], Document
        ] = render_document,
    ) -> None:
        """Store collaborators and validate the attempt budget."""
        if max_attempts < 1:
            msg = f"max_attempts must be >= 1, got {max_attempts}"
            raise ValueError(msg)
        self._generator = generator
        self._config = config
        self._max_attempts = max_attempts
        self._event_logger = event_logger
        self._fallback_renderer = fallback_renderer

    @property
    def generator_name(self) -> str:
        """Model name of the generator, or ``deterministic``."""
        if self._generator is None:
            return "deterministic"
        return str(getattr(self._generator, "model", type(self._generator).__name__))

    async def render(
        self,
        project: ProjectDocumentInput,
        generated_at: dt.datetime,
    ) -> RenderOutcome:
        """Render ``project`` and report how the document was obtained.

        Parameters
        ----------
        project
            Classified project input.
        generated_at
            Generation timestamp.

        Returns
        -------
        RenderOutcome
            Always carries a valid document.

        """
        if self._event_logger is not None:
            self._event_logger.log_document_started(
                project_key=project.project_key, generator=self.generator_name
            )

        metrics: ModelInvocationMetrics | None = None
        if self._generator is None:
            outcome = RenderOutcome(
                document=self._fallback_renderer(project, generated_at, self._config),
                source=DocumentSource.DETERMINISTIC,
            )
        else:
            outcome, metrics = await self._render_with_retries(
                self._generator, project, generated_at
            )

        if self._event_logger is not None:
            self._event_logger.log_document_completed(outcome=outcome, metrics=metrics)
        return outcome

    async def _render_with_retries(
        self,
        generator: DocumentGenerator,
        project: ProjectDocumentInput,
        generated_at: dt.datetime,
    ) -> tuple[RenderOutcome, ModelInvocationMetrics | None]:
        """Run attempts until one is accepted or the budget is spent.

        Returns the outcome together with the metrics of the latest
        generation call made for this project.
        """
        expected = DocumentCounts.from_input(project)
        failures: list[GenerationFailure] = []
        metrics: ModelInvocationMetrics | None = None
        attempt = 0

        while attempt < self._max_attempts:
            attempt += 1
            try:
                prompt = build_generation_prompt(project, generated_at, self._config)
                result, metrics = await self._attempt(
                    generator, prompt, expected, attempt
                )
            except Exception as exc:  # noqa: BLE001
                log_exception(
                    logger,
                    f"Unexpected generation error for project {project.project_key}",
                    exc,
                )
                result = GenerationFailure(
                    reason=FailureReason.UNEXPECTED_ERROR,
                    attempt=attempt,
                    detail=f"{type(exc).__name__}: {exc}",
                )

            if isinstance(result, GeneratedMarkdown):
                log_debug(
                    logger,
                    "Accepted generated draft for project %s on attempt %d",
                    project.project_key,
                    attempt,
                )
                outcome = RenderOutcome(
                    document=self._generated_document(
                        project, generated_at, result.markdown
                    ),
                    source=DocumentSource.GENERATED,
                    attempts=attempt,
                    failures=tuple(failures),
                )
                return outcome, metrics

            failures.append(result)
            if self._event_logger is not None:
                self._event_logger.log_attempt_failed(
                    project_key=project.project_key,
                    failure=result,
                    max_attempts=self._max_attempts,
                )
            if not result.retryable:
                break

        if self._event_logger is not None:
            self._event_logger.log_document_fallback(
                project_key=project.project_key, attempts=attempt
            )
        outcome = RenderOutcome(
            document=self._fallback_renderer(project, generated_at, self._config),
            source=DocumentSource.FALLBACK,
            attempts=attempt,
            failures=tuple(failures),
        )
        return outcome, metrics

    async def _attempt(
        self,
        generator: DocumentGenerator,
        prompt: GenerationPrompt,
        expected: DocumentCounts,
        attempt: int,
    ) -> tuple[AttemptResult, ModelInvocationMetrics]:
        """Run one generate-then-validate cycle."""
        started_at = time.monotonic()
        try:
            raw = await generator.generate_markdown(prompt)
        except GenerationError as exc:
            failure = GenerationFailure(
                reason=FailureReason.SERVICE_ERROR, attempt=attempt, detail=str(exc)
            )
            return failure, _invocation_metrics(generator, started_at)
        metrics = _invocation_metrics(generator, started_at)

        markdown = strip_code_fence(raw) if isinstance(raw, str) else ""
        if not markdown:
            failure = GenerationFailure(
                reason=FailureReason.EMPTY_RESPONSE, attempt=attempt
            )
            return failure, metrics

        try:
            matches = await generator.confirm_counts(markdown, expected)
        except GenerationError as exc:
            failure = GenerationFailure(
                reason=FailureReason.VALIDATION_ERROR, attempt=attempt, detail=str(exc)
            )
            return failure, metrics
        if not matches:
            failure = GenerationFailure(
                reason=FailureReason.COUNT_MISMATCH,
                attempt=attempt,
                detail=(
                    f"expected today={expected.today} "
                    f"incomplete={expected.incomplete} "
                    f"due_today={expected.due_today}"
                ),
            )
            return failure, metrics
        return GeneratedMarkdown(markdown=markdown, attempt=attempt), metrics

    def _generated_document(
        self,
        project: ProjectDocumentInput,
        generated_at: dt.datetime,
        markdown: str,
    ) -> Document:
        local_day = to_local(generated_at, self._config.timezone).date()
        return Document(
            project_key=project.project_key,
            project_name=project.project_name,
            file_name=document_file_name(project.project_key, local_day),
            content=markdown,
        )


def _invocation_metrics(
    generator: DocumentGenerator, started_at: float
) -> ModelInvocationMetrics:
    """Merge adapter metrics with the latency measured since ``started_at``.

    Must run before the next suspension point: adapters overwrite
    ``last_invocation_metrics`` on every call.
    """
    latency_ms = (time.monotonic() - started_at) * 1000.0
    raw_metrics = getattr(generator, "last_invocation_metrics", None)
    if isinstance(raw_metrics, ModelInvocationMetrics):
        return dc.replace(raw_metrics, latency_ms=latency_ms)
    return ModelInvocationMetrics(latency_ms=latency_ms)
