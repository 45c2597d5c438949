"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import datetime as dt
import os
import typing as typ

import pytest

from matins.issues.classification import build_project_input
from matins.issues.models import MeetingIssue, ProjectDocumentInput, RosterMember
from tests.helpers.issue_builders import GENERATED_AT, TODAY, sample_issues

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@pytest.fixture
def generated_at() -> dt.datetime:
    """Provide the generation timestamp used by document tests."""
    return GENERATED_AT


@pytest.fixture
def roster() -> tuple[RosterMember, ...]:
    """Provide a small organisation roster."""
    return (
        RosterMember(id=1, name="Alice"),
        RosterMember(id=2, name="Bob"),
        RosterMember(id=3, name="Chiyo"),
    )


@pytest.fixture
def meeting() -> MeetingIssue:
    """Provide a meeting issue whose participants are given by roster id."""
    return MeetingIssue(
        key="PROJ-9",
        title="Weekly sync with customer",
        url="https://tracker.example.com/view/PROJ-9",
        purpose="Review the vendor API contract",
        held_at="2024/01/20 14:00",
        meeting_url="https://meet.example.com/abc",
        internal_participant_ids=(1, 3, 99),
        external_participants=("Dana (Customer)",),
    )


@pytest.fixture
def sample_project(
    meeting: MeetingIssue,
    roster: tuple[RosterMember, ...],
) -> ProjectDocumentInput:
    """Provide a classified project with issues in every category."""
    return build_project_input(
        project_key="PROJ",
        project_name="Project Phoenix",
        issues=sample_issues(),
        today=TODAY,
        meetings=(meeting,),
        roster=roster,
    )


@pytest.fixture
def empty_project() -> ProjectDocumentInput:
    """Provide a project with nothing to report."""
    return ProjectDocumentInput(project_key="IDLE", project_name="Quiet Project")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> cabc.Iterator[None]:
    """Remove every ``MATINS_*`` variable for the duration of a test."""
    for name in list(os.environ):
        if name.startswith("MATINS_"):
            monkeypatch.delenv(name)
    yield
