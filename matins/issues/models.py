"""Work-item structures consumed by the briefing pipeline.

Records are immutable ``msgspec`` structs. Wire names are camelCase so the
JSON produced by the tracker collaborators decodes without an adapter layer.
"""

from __future__ import annotations

import datetime as dt  # noqa: TC003
import enum

import msgspec


class DelayReason(enum.StrEnum):
    """Enumerated cause of an overdue item."""

    SELF = "self"
    SPEC_CHANGE = "spec_change"
    INTERRUPTION = "interruption"
    INTERNAL_WAIT = "internal_wait"
    CUSTOMER_WAIT = "customer_wait"

    @classmethod
    def parse(cls, raw: str | None) -> DelayReason | None:
        """Parse free text produced by the enrichment step.

        Accepts enum values, English phrases and the tracker's Japanese
        labels. Returns ``None`` for empty or unrecognised text.

        Examples
        --------
        >>> DelayReason.parse("顧客待ち")
        <DelayReason.CUSTOMER_WAIT: 'customer_wait'>
        >>> DelayReason.parse("weather") is None
        True

        """
        if raw is None:
            return None
        normalised = raw.strip().lower().replace("-", "_").replace(" ", "_")
        if not normalised:
            return None
        return _DELAY_REASON_ALIASES.get(normalised)


_DELAY_REASON_ALIASES: dict[str, DelayReason] = {
    "self": DelayReason.SELF,
    "self_caused": DelayReason.SELF,
    "自責": DelayReason.SELF,
    "spec_change": DelayReason.SPEC_CHANGE,
    "specification_change": DelayReason.SPEC_CHANGE,
    "仕様変更": DelayReason.SPEC_CHANGE,
    "interruption": DelayReason.INTERRUPTION,
    "割り込み": DelayReason.INTERRUPTION,
    "割り込み対応": DelayReason.INTERRUPTION,
    "internal_wait": DelayReason.INTERNAL_WAIT,
    "waiting_on_internal": DelayReason.INTERNAL_WAIT,
    "社内待ち": DelayReason.INTERNAL_WAIT,
    "customer_wait": DelayReason.CUSTOMER_WAIT,
    "waiting_on_customer": DelayReason.CUSTOMER_WAIT,
    "顧客待ち": DelayReason.CUSTOMER_WAIT,
}


class Assignee(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Person an issue is assigned to."""

    id: int | None = None
    name: str


class DelayInfo(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Delay detail attached to an overdue issue by an enrichment step.

    Attributes
    ----------
    delay_reason
        Raw delay cause text. See :meth:`DelayReason.parse`.
    ball
        Who currently holds the ball.
    next_action
        Next concrete step towards completion.
    expected_completion
        Expected completion date, as free text.

    """

    delay_reason: str | None = None
    ball: str | None = None
    next_action: str | None = None
    expected_completion: str | None = None

    @property
    def reason(self) -> DelayReason | None:
        """Return the parsed delay cause, if recognised."""
        return DelayReason.parse(self.delay_reason)


class Issue(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """A tracker work item.

    Attributes
    ----------
    key
        Tracker issue key (e.g. ``PROJ-12``).
    title
        One-line summary.
    body
        Free-text description; may be empty.
    status
        Workflow status name.
    assignee
        Assigned person, when any.
    start_date
        Scheduled start day.
    due_date
        Due day.
    priority
        Priority label.
    categories
        Category labels.
    url
        Link to the issue in the tracker.
    project_key
        Key of the owning project.
    delay_info
        Delay detail attached by enrichment; absence is meaningful.

    """

    key: str
    title: str
    status: str
    url: str
    project_key: str
    body: str = ""
    assignee: Assignee | None = None
    start_date: dt.date | None = None
    due_date: dt.date | None = None
    priority: str = "-"
    categories: tuple[str, ...] = ()
    delay_info: DelayInfo | None = None


def with_delay_info(issue: Issue, info: DelayInfo | None) -> Issue:
    """Return a copy of ``issue`` carrying ``info``."""
    return msgspec.structs.replace(issue, delay_info=info)


class IssueGroup(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Issues sharing one assignee, in input order."""

    assignee_name: str
    assignee_id: int | None = None
    issues: tuple[Issue, ...] = ()


class RosterMember(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """A member of the organisation's tracker roster."""

    id: int
    name: str


class MeetingIssue(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """A meeting-type issue with details extracted upstream.

    Attributes
    ----------
    key
        Tracker issue key.
    title
        Meeting issue summary.
    url
        Link to the issue.
    purpose
        Meeting purpose or agenda.
    held_at
        Meeting date and time, as free text.
    meeting_url
        Video-call or room link.
    internal_participants
        Names of internal participants.
    internal_participant_ids
        Roster ids of internal participants, used when names are absent.
    external_participants
        Names of external participants.

    """

    key: str
    title: str
    url: str
    purpose: str | None = None
    held_at: str | None = None
    meeting_url: str | None = None
    internal_participants: tuple[str, ...] = ()
    internal_participant_ids: tuple[int, ...] = ()
    external_participants: tuple[str, ...] = ()


class ProjectDocumentInput(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Classified material for one project's briefing document."""

    project_key: str
    project_name: str
    today: tuple[IssueGroup, ...] = ()
    incomplete: tuple[IssueGroup, ...] = ()
    due_today: tuple[IssueGroup, ...] = ()
    meetings: tuple[MeetingIssue, ...] = ()
    roster: tuple[RosterMember, ...] = ()

    def roster_names(self) -> dict[int, str]:
        """Return the roster as an id to name mapping."""
        return {member.id: member.name for member in self.roster}


def resolve_internal_participants(
    meeting: MeetingIssue,
    roster: dict[int, str],
) -> tuple[str, ...]:
    """Return internal participant names for ``meeting``.

    Explicit names win. Otherwise participant ids are resolved against the
    roster, and ids unknown to the roster are skipped.
    """
    if meeting.internal_participants:
        return meeting.internal_participants
    return tuple(
        roster[member_id]
        for member_id in meeting.internal_participant_ids
        if member_id in roster
    )


def decode_project_inputs(payload: bytes | str) -> list[ProjectDocumentInput]:
    """Decode a JSON array of project inputs.

    Raises
    ------
    msgspec.ValidationError
        If the payload does not match the expected shape.

    """
    return msgspec.json.decode(payload, type=list[ProjectDocumentInput])
