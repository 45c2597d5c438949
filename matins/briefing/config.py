"""Configuration for briefing runs.

Usage
-----
Create a configuration with defaults:

>>> config = BriefingConfig()
>>> config.timezone
'Asia/Tokyo'

Or load from environment variables:

>>> import os
>>> os.environ["MATINS_TIMEZONE"] = "Europe/London"
>>> BriefingConfig.from_env().timezone
'Europe/London'

"""

from __future__ import annotations

import dataclasses as dc
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from matins.document.config import DocumentConfig
from matins.issues.classification import ClassificationConfig

from .errors import BriefingConfigError

_DEFAULT_DOCUMENT = DocumentConfig()
_DEFAULT_CLASSIFICATION = ClassificationConfig()


@dc.dataclass(frozen=True, slots=True)
class BriefingConfig:
    """Settings shared by classification, rendering and channel formatting.

    Attributes
    ----------
    timezone
        IANA zone of the organisation; defines "today" and displayed times.
    title_marker
        Prefix of document titles and email subjects.
    complete_statuses
        Status names treated as terminal by the incomplete rule.
    unassigned_label
        Group label for issues without an assignee.

    """

    timezone: str = _DEFAULT_DOCUMENT.timezone
    title_marker: str = _DEFAULT_DOCUMENT.title_marker
    complete_statuses: tuple[str, ...] = _DEFAULT_CLASSIFICATION.complete_statuses
    unassigned_label: str = _DEFAULT_CLASSIFICATION.unassigned_label

    @property
    def document_config(self) -> DocumentConfig:
        """Presentation settings for the renderers."""
        return DocumentConfig(timezone=self.timezone, title_marker=self.title_marker)

    @property
    def classification_config(self) -> ClassificationConfig:
        """Rules for the issue classifier."""
        return ClassificationConfig(
            complete_statuses=self.complete_statuses,
            unassigned_label=self.unassigned_label,
        )

    @staticmethod
    def _parse_timezone(default: str) -> str:
        raw = os.environ.get("MATINS_TIMEZONE", "")
        if not raw.strip():
            return default
        name = raw.strip()
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise BriefingConfigError.invalid_timezone(raw) from exc
        return name

    @staticmethod
    def _parse_statuses(default: tuple[str, ...]) -> tuple[str, ...]:
        raw = os.environ.get("MATINS_COMPLETE_STATUSES")
        if raw is None:
            return default
        statuses = tuple(part.strip() for part in raw.split(",") if part.strip())
        if not statuses:
            raise BriefingConfigError.empty_value("MATINS_COMPLETE_STATUSES")
        return statuses

    @classmethod
    def from_env(cls) -> BriefingConfig:
        """Create configuration from environment variables.

        Reads the following environment variables:

        - ``MATINS_TIMEZONE``: IANA zone name (default ``Asia/Tokyo``).
        - ``MATINS_TITLE_MARKER``: Title and subject prefix.
        - ``MATINS_COMPLETE_STATUSES``: Comma-separated terminal statuses.
        - ``MATINS_UNASSIGNED_LABEL``: Label for unassigned issues.

        Raises
        ------
        BriefingConfigError
            If the zone is unknown or a list variable is blank.

        """
        defaults = cls()
        unassigned = os.environ.get("MATINS_UNASSIGNED_LABEL", "").strip()
        return cls(
            timezone=cls._parse_timezone(defaults.timezone),
            title_marker=os.environ.get("MATINS_TITLE_MARKER", defaults.title_marker),
            complete_statuses=cls._parse_statuses(defaults.complete_statuses),
            unassigned_label=unassigned or defaults.unassigned_label,
        )
