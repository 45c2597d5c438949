"""Split raw issues into briefing categories and group them by assignee.

The three categories are evaluated independently, so one issue may land in
several of them. Each category is rendered as its own section, which is why
the same issue can legitimately appear more than once in a document.
"""

from __future__ import annotations

import collections
import typing as typ

import msgspec

from .models import Issue, IssueGroup, ProjectDocumentInput

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from .models import MeetingIssue, RosterMember


class ClassificationConfig(msgspec.Struct, kw_only=True, frozen=True):
    """Configurable rules for issue classification.

    Attributes
    ----------
    complete_statuses
        Status names treated as terminal. Compared case-insensitively.
    unassigned_label
        Group label used for issues without an assignee.

    """

    complete_statuses: tuple[str, ...] = ("完了", "Closed", "Done")
    unassigned_label: str = "Unassigned"


DEFAULT_CLASSIFICATION_CONFIG = ClassificationConfig()


class ClassifiedIssues(msgspec.Struct, kw_only=True, frozen=True):
    """Issues per briefing category, before grouping."""

    today: tuple[Issue, ...] = ()
    incomplete: tuple[Issue, ...] = ()
    due_today: tuple[Issue, ...] = ()


def is_scheduled_today(issue: Issue, today: dt.date) -> bool:
    """Return whether ``today`` falls inside the issue's start/due span."""
    if issue.start_date is None or issue.due_date is None:
        return False
    return issue.start_date <= today <= issue.due_date


def is_due_today(issue: Issue, today: dt.date) -> bool:
    """Return whether the issue is due on ``today``."""
    return issue.due_date is not None and issue.due_date == today


def is_incomplete(
    issue: Issue,
    today: dt.date,
    config: ClassificationConfig = DEFAULT_CLASSIFICATION_CONFIG,
) -> bool:
    """Return whether the issue started before ``today`` and is still open."""
    if issue.start_date is None or issue.start_date >= today:
        return False
    complete = {status.strip().lower() for status in config.complete_statuses}
    return issue.status.strip().lower() not in complete


def _deduplicate(issues: cabc.Iterable[Issue]) -> list[Issue]:
    """Drop repeated issue keys, keeping the first occurrence."""
    seen: set[str] = set()
    unique: list[Issue] = []
    for issue in issues:
        if issue.key in seen:
            continue
        seen.add(issue.key)
        unique.append(issue)
    return unique


def _is_active(issue: Issue, active_assignee_ids: frozenset[int]) -> bool:
    if not active_assignee_ids:
        return True
    return (
        issue.assignee is not None
        and issue.assignee.id is not None
        and issue.assignee.id in active_assignee_ids
    )


def classify_issues(
    issues: cabc.Iterable[Issue],
    today: dt.date,
    *,
    config: ClassificationConfig = DEFAULT_CLASSIFICATION_CONFIG,
    active_assignee_ids: cabc.Iterable[int] = (),
) -> ClassifiedIssues:
    """Split issues into the today, incomplete and due-today categories.

    Parameters
    ----------
    issues
        Raw issues from the tracker. Repeated keys are collapsed.
    today
        Organisation-local calendar day.
    config
        Classification rules.
    active_assignee_ids
        When non-empty, only issues assigned to one of these ids are kept.

    Returns
    -------
    ClassifiedIssues
        Possibly-overlapping category lists, each in input order.

    """
    active = frozenset(active_assignee_ids)
    candidates = [
        issue for issue in _deduplicate(issues) if _is_active(issue, active)
    ]
    return ClassifiedIssues(
        today=tuple(i for i in candidates if is_scheduled_today(i, today)),
        incomplete=tuple(i for i in candidates if is_incomplete(i, today, config)),
        due_today=tuple(i for i in candidates if is_due_today(i, today)),
    )


def group_by_assignee(
    issues: cabc.Iterable[Issue],
    *,
    config: ClassificationConfig = DEFAULT_CLASSIFICATION_CONFIG,
) -> tuple[IssueGroup, ...]:
    """Bucket issues by assignee display name, sorted by name.

    Examples
    --------
    >>> group_by_assignee([])
    ()

    """
    buckets: dict[str, list[Issue]] = collections.defaultdict(list)
    ids: dict[str, int | None] = {}
    for issue in issues:
        if issue.assignee is None:
            name = config.unassigned_label
            ids.setdefault(name, None)
        else:
            name = issue.assignee.name
            ids.setdefault(name, issue.assignee.id)
        buckets[name].append(issue)

    return tuple(
        IssueGroup(
            assignee_name=name,
            assignee_id=ids[name],
            issues=tuple(buckets[name]),
        )
        for name in sorted(buckets)
    )


def build_project_input(  # noqa: PLR0913
    *,
    project_key: str,
    project_name: str,
    issues: cabc.Iterable[Issue],
    today: dt.date,
    meetings: cabc.Iterable[MeetingIssue] = (),
    roster: cabc.Iterable[RosterMember] = (),
    config: ClassificationConfig = DEFAULT_CLASSIFICATION_CONFIG,
    active_assignee_ids: cabc.Iterable[int] = (),
) -> ProjectDocumentInput:
    """Classify and group raw issues into a project document input."""
    classified = classify_issues(
        issues, today, config=config, active_assignee_ids=active_assignee_ids
    )
    return ProjectDocumentInput(
        project_key=project_key,
        project_name=project_name,
        today=group_by_assignee(classified.today, config=config),
        incomplete=group_by_assignee(classified.incomplete, config=config),
        due_today=group_by_assignee(classified.due_today, config=config),
        meetings=tuple(meetings),
        roster=tuple(roster),
    )
