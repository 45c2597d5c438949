"""Explicit results of generation attempts and of a whole render call.

Each generate-then-validate attempt yields either :class:`GeneratedMarkdown`
or a :class:`GenerationFailure` tagged with a :class:`FailureReason`. The
assisted renderer folds the attempts into a :class:`RenderOutcome`.
"""

from __future__ import annotations

import enum

import msgspec

from matins.document.models import Document  # noqa: TC001


class FailureReason(enum.StrEnum):
    """Why a generation attempt did not produce an accepted document."""

    SERVICE_ERROR = "service_error"
    EMPTY_RESPONSE = "empty_response"
    VALIDATION_ERROR = "validation_error"
    COUNT_MISMATCH = "count_mismatch"
    UNEXPECTED_ERROR = "unexpected_error"


class DocumentSource(enum.StrEnum):
    """Which renderer produced the returned document."""

    GENERATED = "generated"
    FALLBACK = "fallback"
    DETERMINISTIC = "deterministic"


class GeneratedMarkdown(msgspec.Struct, kw_only=True, frozen=True):
    """Accepted, post-processed markdown from one attempt."""

    markdown: str
    attempt: int


class GenerationFailure(msgspec.Struct, kw_only=True, frozen=True):
    """A failed attempt.

    Attributes
    ----------
    reason
        Failure category.
    attempt
        One-based attempt number.
    detail
        Human-readable detail, usually the error message.

    """

    reason: FailureReason
    attempt: int
    detail: str = ""

    @property
    def retryable(self) -> bool:
        """Return whether another attempt may follow this failure."""
        return self.reason is not FailureReason.UNEXPECTED_ERROR


type AttemptResult = GeneratedMarkdown | GenerationFailure


class RenderOutcome(msgspec.Struct, kw_only=True, frozen=True):
    """The document returned by a render call and how it was obtained.

    Attributes
    ----------
    document
        Rendered document; always present.
    source
        ``generated`` when an attempt was accepted, ``fallback`` when the
        attempts were exhausted or aborted, ``deterministic`` when no
        generator was configured.
    attempts
        Number of generation attempts made.
    failures
        Failed attempts, in order.

    """

    document: Document
    source: DocumentSource
    attempts: int = 0
    failures: tuple[GenerationFailure, ...] = ()

    @property
    def used_fallback(self) -> bool:
        """Return whether generation was attempted and abandoned."""
        return self.source is DocumentSource.FALLBACK
