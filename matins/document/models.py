"""Document structures produced by the renderers."""

from __future__ import annotations

import typing as typ

import msgspec

if typ.TYPE_CHECKING:
    import datetime as dt

    from matins.issues.models import IssueGroup, ProjectDocumentInput


class Document(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """A rendered briefing for one project.

    Attributes
    ----------
    project_key
        Tracker project key.
    project_name
        Human-readable project name.
    file_name
        Name used when the document is attached or stored by a collaborator.
    content
        Canonical markdown.

    """

    project_key: str
    project_name: str
    file_name: str
    content: str


def _issue_total(groups: tuple[IssueGroup, ...]) -> int:
    return sum(len(group.issues) for group in groups)


class DocumentCounts(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Issue counts shown in the summary table."""

    today: int = 0
    incomplete: int = 0
    due_today: int = 0

    @classmethod
    def from_input(cls, project: ProjectDocumentInput) -> DocumentCounts:
        """Count issues per category.

        Counts are raw group-size sums, so an issue present in two categories
        contributes once to each.
        """
        return cls(
            today=_issue_total(project.today),
            incomplete=_issue_total(project.incomplete),
            due_today=_issue_total(project.due_today),
        )


def document_file_name(project_key: str, local_day: dt.date) -> str:
    """Return the document file name for ``project_key`` on ``local_day``.

    Examples
    --------
    >>> import datetime as dt
    >>> document_file_name("PROJ", dt.date(2024, 1, 20))
    'morning-meeting-PROJ-2024-01-20.md'

    """
    return f"morning-meeting-{project_key}-{local_day.isoformat()}.md"
