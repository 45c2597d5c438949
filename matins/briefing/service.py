"""Briefing service: classify, render and batch project documents.

Usage
-----
>>> from matins.briefing import BriefingConfig, BriefingDependencies, BriefingService
>>> from matins.generation import MockDocumentGenerator
>>> service = BriefingService(
...     BriefingDependencies(generator=MockDocumentGenerator()),
...     config=BriefingConfig(),
... )
>>> outcomes = await service.render_batch(projects)

"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import typing as typ

from matins.common.time import local_today, utcnow
from matins.generation.renderer import AssistedDocumentRenderer
from matins.issues.classification import build_project_input
from matins.logging import get_logger, log_error, log_info

from .config import BriefingConfig
from .errors import BatchRenderError

logger = get_logger(__name__)

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from matins.generation.observability import BriefingEventLogger
    from matins.generation.protocol import DocumentGenerator
    from matins.generation.results import RenderOutcome
    from matins.issues.models import (
        Issue,
        MeetingIssue,
        ProjectDocumentInput,
        RosterMember,
    )


@dc.dataclass(frozen=True, slots=True)
class BriefingDependencies:
    """Collaborators injected into :class:`BriefingService`.

    Attributes
    ----------
    generator
        Generation handle, or ``None`` for deterministic rendering.
    event_logger
        Optional structured event logger.

    """

    generator: DocumentGenerator | None = None
    event_logger: BriefingEventLogger | None = None


def _process_gathered_results(
    gathered: list[RenderOutcome | BaseException],
) -> list[RenderOutcome]:
    """Unwrap ``asyncio.gather`` results, failing the batch on any error.

    Raises
    ------
    BaseException
        Re-raised immediately for system-level exceptions.
    BatchRenderError
        Wraps every regular exception raised by a project task.

    """
    outcomes: list[RenderOutcome] = []
    exceptions: list[Exception] = []
    for result in gathered:
        if isinstance(result, Exception):
            exceptions.append(result)
        elif isinstance(result, BaseException):
            raise result
        else:
            outcomes.append(result)

    if exceptions:
        log_error(
            logger,
            "Briefing batch failed: %d of %d project task(s) raised",
            len(exceptions),
            len(gathered),
        )
        raise BatchRenderError(exceptions)

    return outcomes


class BriefingService:
    """Orchestrates briefing document generation for one or more projects."""

    def __init__(
        self,
        dependencies: BriefingDependencies,
        *,
        config: BriefingConfig | None = None,
    ) -> None:
        """Build the renderer from the injected collaborators."""
        self._config = config or BriefingConfig()
        self._renderer = AssistedDocumentRenderer(
            dependencies.generator,
            config=self._config.document_config,
            event_logger=dependencies.event_logger,
        )

    @property
    def config(self) -> BriefingConfig:
        """Settings this service was built with."""
        return self._config

    def prepare_project(  # noqa: PLR0913
        self,
        *,
        project_key: str,
        project_name: str,
        issues: cabc.Iterable[Issue],
        generated_at: dt.datetime,
        meetings: cabc.Iterable[MeetingIssue] = (),
        roster: cabc.Iterable[RosterMember] = (),
        active_assignee_ids: cabc.Iterable[int] = (),
    ) -> ProjectDocumentInput:
        """Classify raw issues against the organisation-local day.

        Parameters
        ----------
        project_key
            Tracker project key.
        project_name
            Human-readable project name.
        issues
            Raw issues of the project.
        generated_at
            Generation timestamp; its local calendar day is "today".
        meetings
            Meeting-type issues with extracted details.
        roster
            Organisation roster used for participant-name resolution.
        active_assignee_ids
            Optional assignee filter; empty keeps every issue.

        Returns
        -------
        ProjectDocumentInput
            Classified, grouped input for the renderers.

        """
        return build_project_input(
            project_key=project_key,
            project_name=project_name,
            issues=issues,
            today=local_today(generated_at, self._config.timezone),
            meetings=meetings,
            roster=roster,
            config=self._config.classification_config,
            active_assignee_ids=active_assignee_ids,
        )

    async def render_project(
        self,
        project: ProjectDocumentInput,
        *,
        generated_at: dt.datetime | None = None,
    ) -> RenderOutcome:
        """Render one project's document. Never raises for service failures."""
        return await self._renderer.render(project, generated_at or utcnow())

    async def render_batch(
        self,
        projects: cabc.Iterable[ProjectDocumentInput],
        *,
        generated_at: dt.datetime | None = None,
    ) -> list[RenderOutcome]:
        """Render every project concurrently and join the results.

        All projects share one generation timestamp. Outcomes are returned in
        input order.

        Raises
        ------
        BatchRenderError
            If any project task raised; the batch is not partially returned.

        """
        moment = generated_at or utcnow()
        materialised = list(projects)
        gathered = await asyncio.gather(
            *(self.render_project(p, generated_at=moment) for p in materialised),
            return_exceptions=True,
        )
        outcomes = _process_gathered_results(gathered)
        log_info(
            logger,
            "Rendered %d briefing document(s) (%d via fallback)",
            len(outcomes),
            sum(1 for outcome in outcomes if outcome.used_fallback),
        )
        return outcomes
