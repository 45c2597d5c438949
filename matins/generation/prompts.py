"""Prompt templates and payload builders for AI-assisted generation."""

from __future__ import annotations

import typing as typ

import msgspec

from matins.common.time import to_local
from matins.document import constants as c
from matins.document.config import DEFAULT_DOCUMENT_CONFIG
from matins.document.markdown import format_day
from matins.document.models import DocumentCounts
from matins.issues.models import resolve_internal_participants
from matins.issues.triage import classify_delay

if typ.TYPE_CHECKING:
    import datetime as dt

    from matins.document.config import DocumentConfig
    from matins.issues.models import (
        Issue,
        IssueGroup,
        MeetingIssue,
        ProjectDocumentInput,
    )


class GenerationPrompt(msgspec.Struct, kw_only=True, frozen=True):
    """System and user messages for one generation request."""

    system: str
    user: str


class PayloadIssue(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Issue fields sent to the generation service; the body is omitted."""

    key: str
    title: str
    status: str
    start_date: str
    due_date: str
    priority: str
    categories: tuple[str, ...]
    url: str
    triage: str | None = None
    delay_reason: str | None = None
    ball: str | None = None
    next_action: str | None = None
    expected_completion: str | None = None


class PayloadGroup(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """One assignee's issues in the generation payload."""

    assignee: str
    issues: tuple[PayloadIssue, ...]


class PayloadMeeting(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Meeting fields sent to the generation service."""

    key: str
    title: str
    url: str
    purpose: str | None
    held_at: str | None
    meeting_url: str | None
    internal_participants: tuple[str, ...]
    external_participants: tuple[str, ...]


class GenerationPayload(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Size-reduced classified input serialised into the user prompt."""

    date: str
    time: str
    project_key: str
    project_name: str
    counts: DocumentCounts
    incomplete: tuple[PayloadGroup, ...]
    today: tuple[PayloadGroup, ...]
    due_today: tuple[PayloadGroup, ...]
    meetings: tuple[PayloadMeeting, ...]


class ConfirmationResponse(msgspec.Struct, kw_only=True, frozen=True):
    """Structured verdict returned by the count confirmation call."""

    matches: bool
    reason: str = ""


SYSTEM_PROMPT = f"""\
You are an assistant that writes a project's morning-meeting briefing in \
Markdown.

Output Markdown only, with no explanation before or after it and no code \
fence around it. Format every date as YYYY/MM/DD. Omit any listing section \
whose issue count is zero.

## Document layout

1. Title line `# <title marker><date> - <project name>`, then a line \
`Generated at: <time>`.
2. `{c.SUMMARY_HEADING}` with a two-column table ({" | ".join(c.SUMMARY_COLUMNS)}) \
and the rows `{c.TODAY_LABEL}`, `{c.INCOMPLETE_LABEL}` and `{c.DUE_TODAY_LABEL}`. \
Use exactly the counts given in the input.
3. `{c.INCOMPLETE_HEADING}`, `{c.TODAY_HEADING}` and `{c.DUE_TODAY_HEADING}`, in \
that order. Under each, one `###` heading per assignee followed by a table \
with the columns {" / ".join(c.ISSUE_TABLE_COLUMNS)}. Render links as \
`[{c.ISSUE_LINK_LABEL}](<url>)`.
4. `{c.MEETINGS_HEADING}` when meetings are present: one `###` block per \
meeting listing its purpose, date/time, participants and links, followed by \
`- {c.NOTE_PLACEHOLDER}`.
5. `{c.MINUTES_HEADING}` last: one `###` heading per assignee. For issues \
with triage `action_required` list the delay cause, ball holder, next action \
and expected completion, writing `{c.UNSET_PLACEHOLDER}` for missing values. \
For issues with triage `waiting_on_other` list only the delay cause, ball \
holder and `Status: {c.WAITING_STATUS_PLACEHOLDER}`. List today's issues too, \
marking those due today with `{c.DUE_TODAY_MARKER}`. Follow every item with \
`- {c.NOTE_PLACEHOLDER}`.
"""

CONFIRMATION_SYSTEM_PROMPT = """\
You check briefing documents. Read the summary table of the Markdown \
document you are given and compare its counts with the expected counts.

Respond with JSON only: {"matches": true | false, "reason": "<short reason>"}
"""


def _payload_issue(issue: Issue, *, with_triage: bool) -> PayloadIssue:
    info = issue.delay_info
    return PayloadIssue(
        key=issue.key,
        title=issue.title,
        status=issue.status,
        start_date=format_day(issue.start_date),
        due_date=format_day(issue.due_date),
        priority=issue.priority,
        categories=issue.categories,
        url=issue.url,
        triage=classify_delay(info).value if with_triage else None,
        delay_reason=info.delay_reason if info else None,
        ball=info.ball if info else None,
        next_action=info.next_action if info else None,
        expected_completion=info.expected_completion if info else None,
    )


def _payload_groups(
    groups: tuple[IssueGroup, ...],
    *,
    with_triage: bool = False,
) -> tuple[PayloadGroup, ...]:
    return tuple(
        PayloadGroup(
            assignee=group.assignee_name,
            issues=tuple(
                _payload_issue(issue, with_triage=with_triage)
                for issue in group.issues
            ),
        )
        for group in sorted(groups, key=lambda g: g.assignee_name)
    )


def _payload_meeting(meeting: MeetingIssue, roster: dict[int, str]) -> PayloadMeeting:
    return PayloadMeeting(
        key=meeting.key,
        title=meeting.title,
        url=meeting.url,
        purpose=meeting.purpose,
        held_at=meeting.held_at,
        meeting_url=meeting.meeting_url,
        internal_participants=resolve_internal_participants(meeting, roster),
        external_participants=meeting.external_participants,
    )


def build_generation_payload(
    project: ProjectDocumentInput,
    generated_at: dt.datetime,
    config: DocumentConfig = DEFAULT_DOCUMENT_CONFIG,
) -> GenerationPayload:
    """Reduce ``project`` to the payload sent to the generation service.

    Free-text bodies are dropped to bound the prompt size. Incomplete issues
    carry their triage category so the service does not re-derive it.
    """
    local_now = to_local(generated_at, config.timezone)
    roster = project.roster_names()
    return GenerationPayload(
        date=format_day(local_now.date()),
        time=local_now.strftime("%H:%M"),
        project_key=project.project_key,
        project_name=project.project_name,
        counts=DocumentCounts.from_input(project),
        incomplete=_payload_groups(project.incomplete, with_triage=True),
        today=_payload_groups(project.today),
        due_today=_payload_groups(project.due_today),
        meetings=tuple(_payload_meeting(m, roster) for m in project.meetings),
    )


def build_generation_prompt(
    project: ProjectDocumentInput,
    generated_at: dt.datetime,
    config: DocumentConfig = DEFAULT_DOCUMENT_CONFIG,
) -> GenerationPrompt:
    """Build the document-generation prompt for ``project``.

    Parameters
    ----------
    project
        Classified project input.
    generated_at
        Generation timestamp, rendered in the organisation's zone.
    config
        Presentation settings; supplies the title marker.

    Returns
    -------
    GenerationPrompt
        System and user messages for the generation call.

    """
    payload = build_generation_payload(project, generated_at, config)
    user = "\n".join(
        [
            "Write the morning-meeting briefing for the following input.",
            "",
            f"Title marker: {config.title_marker}",
            "",
            "Input JSON:",
            msgspec.json.encode(payload).decode("utf-8"),
        ]
    )
    return GenerationPrompt(system=SYSTEM_PROMPT, user=user)


def build_confirmation_prompt(
    markdown: str,
    expected: DocumentCounts,
) -> GenerationPrompt:
    """Build the prompt asking the service to confirm the summary counts."""
    user = "\n".join(
        [
            "Expected counts:",
            f"- {c.TODAY_LABEL}: {expected.today}",
            f"- {c.INCOMPLETE_LABEL}: {expected.incomplete}",
            f"- {c.DUE_TODAY_LABEL}: {expected.due_today}",
            "",
            "Document:",
            markdown,
        ]
    )
    return GenerationPrompt(system=CONFIRMATION_SYSTEM_PROMPT, user=user)
