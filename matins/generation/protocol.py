"""DocumentGenerator protocol for AI-assisted document rendering."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from matins.document.models import DocumentCounts
    from matins.generation.prompts import GenerationPrompt


@typ.runtime_checkable
class DocumentGenerator(typ.Protocol):
    """Protocol for generative services that draft briefing markdown.

    Implementations wrap a text-generation backend. They raise
    :class:`~matins.generation.errors.GenerationError` subclasses on service
    problems; retry and fallback policy belongs to the caller.

    Examples
    --------
    >>> from matins.generation import DocumentGenerator, MockDocumentGenerator
    >>> generator: DocumentGenerator = MockDocumentGenerator()
    >>> isinstance(generator, DocumentGenerator)
    True

    """

    async def generate_markdown(self, prompt: GenerationPrompt) -> str:
        """Return the raw completion for a document prompt.

        Parameters
        ----------
        prompt
            System and user messages describing the document to produce.

        Returns
        -------
        str
            Completion text. May be empty or wrapped in a code fence; the
            caller post-processes it.

        """
        ...

    async def confirm_counts(self, markdown: str, expected: DocumentCounts) -> bool:
        """Ask the service whether ``markdown`` reports the ``expected`` counts.

        Parameters
        ----------
        markdown
            Post-processed document produced by :meth:`generate_markdown`.
        expected
            Counts computed locally from the classified input.

        Returns
        -------
        bool
            ``True`` when the summary table in ``markdown`` matches.

        """
        ...
