"""Issue records, classification and delay triage.

Public API
----------
Issue, IssueGroup, DelayInfo, DelayReason, MeetingIssue, RosterMember
    Immutable input records.
ProjectDocumentInput
    Classified per-project bundle consumed by the document renderers.
classify_issues, group_by_assignee, build_project_input
    Category split and assignee grouping.
classify_delay, triage_incomplete
    Delay-cause triage of incomplete issues.

"""

from __future__ import annotations

from matins.issues.classification import (
    DEFAULT_CLASSIFICATION_CONFIG,
    ClassificationConfig,
    ClassifiedIssues,
    build_project_input,
    classify_issues,
    group_by_assignee,
)
from matins.issues.models import (
    Assignee,
    DelayInfo,
    DelayReason,
    Issue,
    IssueGroup,
    MeetingIssue,
    ProjectDocumentInput,
    RosterMember,
    decode_project_inputs,
    resolve_internal_participants,
    with_delay_info,
)
from matins.issues.triage import (
    DelayCategory,
    DelayTriage,
    classify_delay,
    triage_incomplete,
)

__all__ = [
    "DEFAULT_CLASSIFICATION_CONFIG",
    "Assignee",
    "ClassificationConfig",
    "ClassifiedIssues",
    "DelayCategory",
    "DelayInfo",
    "DelayReason",
    "DelayTriage",
    "Issue",
    "IssueGroup",
    "MeetingIssue",
    "ProjectDocumentInput",
    "RosterMember",
    "build_project_input",
    "classify_delay",
    "classify_issues",
    "decode_project_inputs",
    "group_by_assignee",
    "resolve_internal_participants",
    "triage_incomplete",
    "with_delay_info",
]
