"""Deterministic markdown renderer for briefing documents.

Builds the canonical markdown directly from a classified
``ProjectDocumentInput``. The renderer is a total function: missing optional
fields render as placeholders and identical input plus timestamp always yields
byte-identical output. It is also the fallback of the AI-assisted path.

Usage
-----
>>> from matins.document.markdown import render_document
>>> document = render_document(project, generated_at)
>>> document.file_name
'morning-meeting-PROJ-2024-01-20.md'

"""

from __future__ import annotations

import typing as typ

from matins.common.time import to_local
from matins.issues.models import resolve_internal_participants
from matins.issues.triage import triage_incomplete

from . import constants as c
from .config import DEFAULT_DOCUMENT_CONFIG
from .models import Document, DocumentCounts, document_file_name

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from matins.issues.models import (
        DelayInfo,
        Issue,
        IssueGroup,
        MeetingIssue,
        ProjectDocumentInput,
    )

    from .config import DocumentConfig


def format_day(value: dt.date | None) -> str:
    """Format a calendar day as ``YYYY/MM/DD`` or the empty-cell marker."""
    if value is None:
        return c.EMPTY_CELL
    return value.strftime("%Y/%m/%d")


def escape_cell(text: str) -> str:
    """Make free text safe for a single table cell or list line."""
    return " ".join(text.replace("|", "\\|").split())


def _render_title(
    lines: list[str],
    project: ProjectDocumentInput,
    local_now: dt.datetime,
    config: DocumentConfig,
) -> None:
    lines.append(
        f"# {config.title_marker}{format_day(local_now.date())} - "
        f"{project.project_name}"
    )
    lines.append("")
    lines.append(f"Generated at: {local_now.strftime('%H:%M')}")
    lines.append("")


def _table_row(cells: cabc.Iterable[str]) -> str:
    return "| " + " | ".join(cells) + " |"


def _render_summary(lines: list[str], counts: DocumentCounts) -> None:
    lines.append(c.SUMMARY_HEADING)
    lines.append("")
    lines.append(_table_row(c.SUMMARY_COLUMNS))
    lines.append("|:---|:---:|")
    lines.append(_table_row((c.TODAY_LABEL, str(counts.today))))
    lines.append(_table_row((c.INCOMPLETE_LABEL, str(counts.incomplete))))
    lines.append(_table_row((c.DUE_TODAY_LABEL, str(counts.due_today))))
    lines.append("")


def _issue_row(issue: Issue) -> str:
    categories = ", ".join(issue.categories) if issue.categories else c.EMPTY_CELL
    return _table_row(
        (
            issue.key,
            escape_cell(issue.title),
            escape_cell(issue.status),
            format_day(issue.start_date),
            format_day(issue.due_date),
            escape_cell(issue.priority) or c.EMPTY_CELL,
            escape_cell(categories),
            f"[{c.ISSUE_LINK_LABEL}]({issue.url})",
        )
    )


def _render_group(lines: list[str], group: IssueGroup) -> None:
    lines.append(f"### {group.assignee_name}")
    lines.append("")
    lines.append(_table_row(c.ISSUE_TABLE_COLUMNS))
    lines.append(_table_row(":---" for _ in c.ISSUE_TABLE_COLUMNS))
    lines.extend(_issue_row(issue) for issue in group.issues)
    lines.append("")
    for issue in group.issues:
        if issue.body.strip():
            lines.append(f"**{issue.key}** details:")
            lines.append(escape_cell(issue.body))
            lines.append("")
    lines.append("---")
    lines.append("")


def _render_listing(
    lines: list[str],
    heading: str,
    groups: tuple[IssueGroup, ...],
    count: int,
) -> None:
    """Append a category listing, groups in assignee-name order."""
    if count == 0:
        return
    lines.append(heading)
    lines.append("")
    for group in sorted(groups, key=lambda g: g.assignee_name):
        _render_group(lines, group)


def _meeting_fields(meeting: MeetingIssue, roster: dict[int, str]) -> list[str]:
    fields: list[str] = []
    if meeting.purpose:
        fields.append(f"Purpose: {escape_cell(meeting.purpose)}")
    if meeting.held_at:
        fields.append(f"Date/time: {escape_cell(meeting.held_at)}")
    internal = resolve_internal_participants(meeting, roster)
    if internal:
        fields.append(f"Internal participants: {', '.join(internal)}")
    if meeting.external_participants:
        external = ", ".join(meeting.external_participants)
        fields.append(f"External participants: {external}")
    if meeting.meeting_url:
        fields.append(f"Meeting link: [{c.MEETING_LINK_LABEL}]({meeting.meeting_url})")
    if meeting.url:
        fields.append(f"Issue: [{meeting.key}]({meeting.url})")
    return fields


def _render_meetings(lines: list[str], project: ProjectDocumentInput) -> None:
    if not project.meetings:
        return
    roster = project.roster_names()
    lines.append(c.MEETINGS_HEADING)
    lines.append("")
    for meeting in project.meetings:
        lines.append(f"### {meeting.key} {escape_cell(meeting.title)}")
        lines.append("")
        lines.extend(f"- {field}" for field in _meeting_fields(meeting, roster))
        lines.append(f"- {c.NOTE_PLACEHOLDER}")
        lines.append("")


def _or_unset(value: str | None) -> str:
    if value is None or not value.strip():
        return c.UNSET_PLACEHOLDER
    return escape_cell(value)


def _delay_reason_label(info: DelayInfo | None) -> str:
    if info is None:
        return c.UNSET_PLACEHOLDER
    reason = info.reason
    if reason is not None:
        return c.DELAY_REASON_LABELS[reason]
    return _or_unset(info.delay_reason)


def _item_line(issue: Issue, suffix: str = "") -> str:
    return f"- **{issue.key}** {escape_cell(issue.title)}{suffix}"


def _action_required_item(issue: Issue) -> list[str]:
    info = issue.delay_info
    return [
        _item_line(issue, f" (due {format_day(issue.due_date)})"),
        f"  - Delay cause: {_delay_reason_label(info)}",
        f"  - Ball holder: {_or_unset(info.ball if info else None)}",
        f"  - Next action: {_or_unset(info.next_action if info else None)}",
        "  - Expected completion: "
        f"{_or_unset(info.expected_completion if info else None)}",
        f"  - {c.NOTE_PLACEHOLDER}",
    ]


def _waiting_item(issue: Issue) -> list[str]:
    info = issue.delay_info
    return [
        _item_line(issue, f" (due {format_day(issue.due_date)})"),
        f"  - Delay cause: {_delay_reason_label(info)}",
        f"  - Ball holder: {_or_unset(info.ball if info else None)}",
        f"  - Status: {c.WAITING_STATUS_PLACEHOLDER}",
        f"  - {c.NOTE_PLACEHOLDER}",
    ]


def _today_item(issue: Issue, today: dt.date) -> list[str]:
    suffix = f" ({c.DUE_TODAY_MARKER})" if issue.due_date == today else ""
    return [_item_line(issue, suffix), f"  - {c.NOTE_PLACEHOLDER}"]


def _issues_by_name(groups: tuple[IssueGroup, ...]) -> dict[str, tuple[Issue, ...]]:
    merged: dict[str, tuple[Issue, ...]] = {}
    for group in groups:
        merged[group.assignee_name] = merged.get(group.assignee_name, ()) + group.issues
    return merged


def _render_minutes_block(
    lines: list[str],
    title: str,
    items: cabc.Iterable[list[str]],
) -> None:
    rendered = [line for item in items for line in item]
    if not rendered:
        return
    lines.append(f"**{title}**")
    lines.append("")
    lines.extend(rendered)
    lines.append("")


def _render_minutes(
    lines: list[str],
    project: ProjectDocumentInput,
    today: dt.date,
) -> None:
    """Append the minutes section, one heading per assignee."""
    triage = triage_incomplete(project.incomplete)
    action = _issues_by_name(triage.action_required)
    waiting = _issues_by_name(triage.waiting_on_other)
    scheduled = _issues_by_name(project.today)
    assignees = sorted(set(action) | set(waiting) | set(scheduled))

    lines.append(c.MINUTES_HEADING)
    lines.append("")
    if not assignees:
        lines.append(c.NO_MINUTES_ITEMS)
        lines.append("")
        return

    for name in assignees:
        lines.append(f"### {name}")
        lines.append("")
        _render_minutes_block(
            lines,
            c.ACTION_REQUIRED_TITLE,
            (_action_required_item(issue) for issue in action.get(name, ())),
        )
        _render_minutes_block(
            lines,
            c.WAITING_ON_OTHER_TITLE,
            (_waiting_item(issue) for issue in waiting.get(name, ())),
        )
        _render_minutes_block(
            lines,
            c.TODAY_TITLE,
            (_today_item(issue, today) for issue in scheduled.get(name, ())),
        )
        lines.append("---")
        lines.append("")


def render_markdown(
    project: ProjectDocumentInput,
    generated_at: dt.datetime,
    config: DocumentConfig = DEFAULT_DOCUMENT_CONFIG,
) -> str:
    """Render the canonical markdown for ``project``.

    Parameters
    ----------
    project
        Classified issue groups, meetings and roster for one project.
    generated_at
        Generation timestamp; converted to the organisation's zone.
    config
        Presentation settings.

    Returns
    -------
    str
        Markdown document ending in a single newline.

    """
    local_now = to_local(generated_at, config.timezone)
    counts = DocumentCounts.from_input(project)
    lines: list[str] = []

    _render_title(lines, project, local_now, config)
    _render_summary(lines, counts)
    _render_listing(lines, c.INCOMPLETE_HEADING, project.incomplete, counts.incomplete)
    _render_listing(lines, c.TODAY_HEADING, project.today, counts.today)
    _render_listing(lines, c.DUE_TODAY_HEADING, project.due_today, counts.due_today)
    _render_meetings(lines, project)
    _render_minutes(lines, project, local_now.date())

    return "\n".join(lines).rstrip() + "\n"


def render_document(
    project: ProjectDocumentInput,
    generated_at: dt.datetime,
    config: DocumentConfig = DEFAULT_DOCUMENT_CONFIG,
) -> Document:
    """Render ``project`` into a :class:`Document`. Never fails."""
    local_day = to_local(generated_at, config.timezone).date()
    return Document(
        project_key=project.project_key,
        project_name=project.project_name,
        file_name=document_file_name(project.project_key, local_day),
        content=render_markdown(project, generated_at, config),
    )
