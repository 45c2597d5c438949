"""Factory for creating a DocumentGenerator from environment configuration."""

from __future__ import annotations

import typing as typ

from matins.generation.config import OpenAIGenerationConfig, api_key_from_env
from matins.generation.openai_client import OpenAIDocumentGenerator

if typ.TYPE_CHECKING:
    import httpx

    from matins.generation.protocol import DocumentGenerator


def create_document_generator(
    *,
    http_client: httpx.AsyncClient | None = None,
) -> DocumentGenerator | None:
    """Create the configured generator, or ``None`` when no key is available.

    A missing or blank ``MATINS_OPENAI_API_KEY`` is not an error: it selects
    the deterministic renderer. The remaining ``MATINS_OPENAI_*`` variables
    are validated by :meth:`OpenAIGenerationConfig.from_env`.

    Raises
    ------
    GeneratorConfigError
        If a key is present but another generation setting is invalid.

    Examples
    --------
    >>> import os
    >>> os.environ.pop("MATINS_OPENAI_API_KEY", None)
    >>> create_document_generator() is None
    True

    """
    if api_key_from_env() is None:
        return None
    config = OpenAIGenerationConfig.from_env()
    return OpenAIDocumentGenerator(config, http_client=http_client)
