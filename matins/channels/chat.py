"""Chat-webhook view of a briefing document.

The chat channel forwards the full canonical markdown unchanged; rendering is
left to the receiving workflow.
"""

from __future__ import annotations

import datetime as dt  # noqa: TC003
import typing as typ

import msgspec

from matins.common.time import utcnow

if typ.TYPE_CHECKING:
    from matins.document.models import Document


class ChatPayload(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """JSON body posted to the chat webhook.

    Attributes
    ----------
    file_name
        Document file name.
    project_key
        Tracker project key.
    project_name
        Human-readable project name.
    content
        Full canonical markdown.
    timestamp
        Moment the payload was built, encoded as RFC 3339 UTC.

    """

    file_name: str
    project_key: str
    project_name: str
    content: str
    timestamp: dt.datetime


def format_chat_payload(
    document: Document,
    *,
    sent_at: dt.datetime | None = None,
) -> ChatPayload:
    """Wrap ``document`` in a chat payload stamped with ``sent_at`` (UTC)."""
    moment = sent_at if sent_at is not None else utcnow()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=dt.UTC)
    return ChatPayload(
        file_name=document.file_name,
        project_key=document.project_key,
        project_name=document.project_name,
        content=document.content,
        timestamp=moment.astimezone(dt.UTC),
    )


def encode_chat_payload(payload: ChatPayload) -> bytes:
    """Encode ``payload`` as the JSON request body.

    Examples
    --------
    >>> import datetime as dt
    >>> from matins.document.models import Document
    >>> document = Document(
    ...     project_key="P", project_name="Proj", file_name="f.md", content="# x\\n"
    ... )
    >>> payload = format_chat_payload(
    ...     document, sent_at=dt.datetime(2024, 1, 20, tzinfo=dt.UTC)
    ... )
    >>> encode_chat_payload(payload)[:30]
    b'{"fileName":"f.md","projectKey'

    """
    return msgspec.json.encode(payload)
