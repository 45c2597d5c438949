"""AI-assisted rendering of briefing documents.

The `DocumentGenerator` protocol abstracts the generative service, while
`AssistedDocumentRenderer` wraps it with count validation, bounded retry and
a guaranteed deterministic fallback.

Public API
----------
DocumentGenerator
    Protocol for services that draft briefing markdown.
OpenAIDocumentGenerator
    OpenAI-compatible implementation over httpx.
MockDocumentGenerator
    Scripted implementation for testing.
OpenAIGenerationConfig
    Configuration dataclass for the OpenAI client.
create_document_generator
    Build the configured generator, or ``None`` without a key.
AssistedDocumentRenderer
    Retrying renderer that never raises.
RenderOutcome, DocumentSource, GenerationFailure, FailureReason
    Explicit results of a render call.
GenerationError
    Base exception for generation-service errors.

"""

from __future__ import annotations

from matins.generation.config import (
    OpenAIGenerationConfig,
    api_key_from_env,
    parse_api_key_secret,
)
from matins.generation.constants import MAX_GENERATION_ATTEMPTS
from matins.generation.errors import (
    GenerationError,
    GeneratorConfigError,
    OpenAIAPIError,
    OpenAIConfigError,
    OpenAIResponseShapeError,
)
from matins.generation.factory import create_document_generator
from matins.generation.metrics import ModelInvocationMetrics
from matins.generation.mock import MockDocumentGenerator
from matins.generation.observability import BriefingEventLogger, BriefingEventType
from matins.generation.openai_client import OpenAIDocumentGenerator
from matins.generation.prompts import (
    GenerationPrompt,
    build_confirmation_prompt,
    build_generation_payload,
    build_generation_prompt,
)
from matins.generation.protocol import DocumentGenerator
from matins.generation.renderer import AssistedDocumentRenderer, strip_code_fence
from matins.generation.results import (
    DocumentSource,
    FailureReason,
    GeneratedMarkdown,
    GenerationFailure,
    RenderOutcome,
)

__all__ = [
    "MAX_GENERATION_ATTEMPTS",
    "AssistedDocumentRenderer",
    "BriefingEventLogger",
    "BriefingEventType",
    "DocumentGenerator",
    "DocumentSource",
    "FailureReason",
    "GeneratedMarkdown",
    "GenerationError",
    "GenerationFailure",
    "GenerationPrompt",
    "GeneratorConfigError",
    "MockDocumentGenerator",
    "ModelInvocationMetrics",
    "OpenAIAPIError",
    "OpenAIConfigError",
    "OpenAIDocumentGenerator",
    "OpenAIGenerationConfig",
    "OpenAIResponseShapeError",
    "RenderOutcome",
    "api_key_from_env",
    "build_confirmation_prompt",
    "build_generation_payload",
    "build_generation_prompt",
    "create_document_generator",
    "parse_api_key_secret",
    "strip_code_fence",
]
