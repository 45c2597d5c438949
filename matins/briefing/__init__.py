"""Briefing runs: configuration, per-project and batch rendering, CLI.

Public API
----------
BriefingService
    Classifies raw issues and renders project documents, singly or in batch.
BriefingDependencies
    Injected collaborators (generator handle, event logger).
BriefingConfig
    Environment-driven settings.
BatchRenderError, BriefingConfigError
    Errors raised by the service and configuration.

"""

from __future__ import annotations

from matins.briefing.config import BriefingConfig
from matins.briefing.errors import BatchRenderError, BriefingConfigError, BriefingError
from matins.briefing.service import BriefingDependencies, BriefingService

__all__ = [
    "BatchRenderError",
    "BriefingConfig",
    "BriefingConfigError",
    "BriefingDependencies",
    "BriefingError",
    "BriefingService",
]
