"""Presentation settings for briefing documents."""

from __future__ import annotations

import dataclasses as dc

_DEFAULT_TIMEZONE = "Asia/Tokyo"
_DEFAULT_TITLE_MARKER = "[Morning Meeting] "


@dc.dataclass(frozen=True, slots=True)
class DocumentConfig:
    """Settings shared by the document renderers and channel formatters.

    Attributes
    ----------
    timezone
        IANA zone name of the organisation. Dates, times and the "today"
        boundary are resolved in this zone.
    title_marker
        Prefix of the document title and of email subjects.

    """

    timezone: str = _DEFAULT_TIMEZONE
    title_marker: str = _DEFAULT_TITLE_MARKER


DEFAULT_DOCUMENT_CONFIG = DocumentConfig()
