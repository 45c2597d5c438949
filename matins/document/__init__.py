"""Canonical briefing documents and the deterministic renderer.

Public API
----------
Document, DocumentCounts
    Rendered document and its summary counts.
DocumentConfig
    Presentation settings (time zone, title marker).
render_document, render_markdown
    Deterministic, total renderer.

"""

from __future__ import annotations

from matins.document.config import DEFAULT_DOCUMENT_CONFIG, DocumentConfig
from matins.document.markdown import (
    escape_cell,
    format_day,
    render_document,
    render_markdown,
)
from matins.document.models import Document, DocumentCounts, document_file_name

__all__ = [
    "DEFAULT_DOCUMENT_CONFIG",
    "Document",
    "DocumentConfig",
    "DocumentCounts",
    "document_file_name",
    "escape_cell",
    "format_day",
    "render_document",
    "render_markdown",
]
