"""Sub-classify incomplete issues by delay cause.

Items whose delay is the assignee's own (or has no recorded cause yet) are
*action-required*. Items blocked on another team or on the customer are
*waiting-on-other*. The decision depends on ``DelayInfo.delay_reason`` only.
"""

from __future__ import annotations

import enum
import typing as typ

import msgspec

from .models import DelayReason, IssueGroup

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import DelayInfo


class DelayCategory(enum.StrEnum):
    """Triage outcome for an incomplete issue."""

    ACTION_REQUIRED = "action_required"
    WAITING_ON_OTHER = "waiting_on_other"


_WAITING_REASONS = frozenset({DelayReason.INTERNAL_WAIT, DelayReason.CUSTOMER_WAIT})


def classify_delay(info: DelayInfo | None) -> DelayCategory:
    """Return the triage category for an issue's delay detail.

    Examples
    --------
    >>> classify_delay(None)
    <DelayCategory.ACTION_REQUIRED: 'action_required'>

    """
    if info is None:
        return DelayCategory.ACTION_REQUIRED
    if info.reason in _WAITING_REASONS:
        return DelayCategory.WAITING_ON_OTHER
    return DelayCategory.ACTION_REQUIRED


class DelayTriage(msgspec.Struct, kw_only=True, frozen=True):
    """Incomplete issues split by triage category, grouped by assignee."""

    action_required: tuple[IssueGroup, ...] = ()
    waiting_on_other: tuple[IssueGroup, ...] = ()


def _split_group(
    group: IssueGroup,
    category: DelayCategory,
) -> IssueGroup | None:
    issues = tuple(
        issue for issue in group.issues if classify_delay(issue.delay_info) == category
    )
    if not issues:
        return None
    return IssueGroup(
        assignee_name=group.assignee_name,
        assignee_id=group.assignee_id,
        issues=issues,
    )


def _collect(
    groups: cabc.Iterable[IssueGroup],
    category: DelayCategory,
) -> tuple[IssueGroup, ...]:
    split = (_split_group(group, category) for group in groups)
    kept = [group for group in split if group is not None]
    return tuple(sorted(kept, key=lambda group: group.assignee_name))


def triage_incomplete(groups: cabc.Iterable[IssueGroup]) -> DelayTriage:
    """Split incomplete issue groups into action-required and waiting-on-other.

    Parameters
    ----------
    groups
        The project's incomplete issue groups.

    Returns
    -------
    DelayTriage
        Non-empty per-assignee groups for each category, sorted by name.

    """
    materialised = tuple(groups)
    return DelayTriage(
        action_required=_collect(materialised, DelayCategory.ACTION_REQUIRED),
        waiting_on_other=_collect(materialised, DelayCategory.WAITING_ON_OTHER),
    )
