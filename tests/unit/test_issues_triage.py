"""Unit tests for delay triage of incomplete issues."""

from __future__ import annotations

import pytest

from matins.issues.classification import group_by_assignee
from matins.issues.models import DelayInfo
from matins.issues.triage import DelayCategory, classify_delay, triage_incomplete
from tests.helpers.issue_builders import ALICE, BOB, make_issue


class TestClassifyDelay:
    """Tests for ``classify_delay``."""

    def test_missing_delay_info_requires_action(self) -> None:
        """Issues without delay detail are treated as the assignee's to act on."""
        assert classify_delay(None) is DelayCategory.ACTION_REQUIRED

    @pytest.mark.parametrize("reason", ["customer_wait", "社内待ち", "internal wait"])
    def test_waiting_reasons(self, reason: str) -> None:
        """Internal and customer waits are waiting-on-other."""
        info = DelayInfo(delay_reason=reason)
        assert classify_delay(info) is DelayCategory.WAITING_ON_OTHER

    @pytest.mark.parametrize("reason", ["自責", "spec_change", "割り込み", None, "weather"])
    def test_other_reasons_require_action(self, reason: str | None) -> None:
        """Self, spec change, interruption and unknown causes require action."""
        info = DelayInfo(delay_reason=reason, ball="Someone else")
        assert classify_delay(info) is DelayCategory.ACTION_REQUIRED, (
            "Only the delay reason decides the category"
        )


class TestTriageIncomplete:
    """Tests for ``triage_incomplete``."""

    def test_splits_groups_and_drops_empty_ones(self) -> None:
        """Each assignee appears only in categories where they have issues."""
        groups = group_by_assignee(
            [
                make_issue("A-1", assignee=ALICE),
                make_issue(
                    "A-2",
                    assignee=BOB,
                    delay_info=DelayInfo(delay_reason="customer_wait"),
                ),
                make_issue(
                    "A-3",
                    assignee=ALICE,
                    delay_info=DelayInfo(delay_reason="internal_wait"),
                ),
            ]
        )
        triage = triage_incomplete(groups)

        assert [g.assignee_name for g in triage.action_required] == ["Alice"]
        assert [i.key for i in triage.action_required[0].issues] == ["A-1"]
        assert [g.assignee_name for g in triage.waiting_on_other] == ["Alice", "Bob"]

    def test_empty_input(self) -> None:
        """No groups produce an empty triage."""
        triage = triage_incomplete(())
        assert triage.action_required == ()
        assert triage.waiting_on_other == ()
