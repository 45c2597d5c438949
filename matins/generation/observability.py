"""Emit structured observability events for briefing document rendering.

Usage
-----
>>> event_logger = BriefingEventLogger()
>>> event_logger.log_document_started(project_key="PROJ", generator="mock")

"""

from __future__ import annotations

import enum
import typing as typ

from matins.logging import get_logger, log_info, log_warning

if typ.TYPE_CHECKING:
    from matins.generation.metrics import ModelInvocationMetrics
    from matins.generation.results import GenerationFailure, RenderOutcome

logger = get_logger(__name__)


class BriefingEventType(enum.StrEnum):
    """Structured log event types for briefing rendering."""

    DOCUMENT_STARTED = "briefing.document.started"
    DOCUMENT_COMPLETED = "briefing.document.completed"
    DOCUMENT_FALLBACK = "briefing.document.fallback"
    ATTEMPT_FAILED = "briefing.generation.attempt_failed"


class BriefingEventLogger:
    """Emit structured briefing events via femtologging."""

    def log_document_started(self, *, project_key: str, generator: str) -> None:
        """Log the start of rendering for one project."""
        log_info(
            logger,
            "[%s] project_key=%s generator=%s",
            BriefingEventType.DOCUMENT_STARTED,
            project_key,
            generator,
        )

    def log_attempt_failed(
        self,
        *,
        project_key: str,
        failure: GenerationFailure,
        max_attempts: int,
    ) -> None:
        """Log one failed generation attempt.

        Parameters
        ----------
        project_key
            Key of the project being rendered.
        failure
            The failed attempt, with its reason and attempt number.
        max_attempts
            Attempt budget of the render call.

        """
        log_warning(
            logger,
            "[%s] project_key=%s attempt=%d max_attempts=%d reason=%s detail=%s",
            BriefingEventType.ATTEMPT_FAILED,
            project_key,
            failure.attempt,
            max_attempts,
            failure.reason,
            failure.detail,
        )

    def log_document_fallback(self, *, project_key: str, attempts: int) -> None:
        """Log that the deterministic renderer replaced generation."""
        log_warning(
            logger,
            "[%s] project_key=%s attempts=%d",
            BriefingEventType.DOCUMENT_FALLBACK,
            project_key,
            attempts,
        )

    def log_document_completed(
        self,
        *,
        outcome: RenderOutcome,
        metrics: ModelInvocationMetrics | None,
    ) -> None:
        """Log a finished render with its source and token fields.

        Parameters
        ----------
        outcome
            Result of the render call.
        metrics
            Metrics of the last model invocation, when one happened.

        """
        latency = metrics.latency_ms if metrics is not None else None
        total_tokens = metrics.total_tokens if metrics is not None else None
        latency_text = "None" if latency is None else f"{latency:.3f}"
        log_info(
            logger,
            "[%s] project_key=%s source=%s attempts=%d latency_ms=%s "
            "total_tokens=%s file_name=%s",
            BriefingEventType.DOCUMENT_COMPLETED,
            outcome.document.project_key,
            outcome.source,
            outcome.attempts,
            latency_text,
            total_tokens,
            outcome.document.file_name,
        )
