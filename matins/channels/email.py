"""Email view of a briefing document.

The message body omits the minutes section and is rendered twice (HTML and
plain text); the full canonical markdown travels as an attachment named by
the document's file name. Sending the message is left to the caller.
"""

from __future__ import annotations

import re
import typing as typ
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import msgspec

from matins.document.config import DEFAULT_DOCUMENT_CONFIG
from matins.rendering.html import markdown_to_html
from matins.rendering.plain_text import markdown_to_plain_text

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from matins.document.config import DocumentConfig
    from matins.document.models import Document

_MINUTES_HEADING = re.compile(r"^##\s+(?:\S+\s+)?minutes\s*$", re.IGNORECASE)
_LEVEL_ONE_OR_TWO_HEADING = re.compile(r"^#{1,2}\s+")


class EmailContent(msgspec.Struct, kw_only=True, frozen=True):
    """Channel view of one document for the email transport.

    Attributes
    ----------
    subject
        Subject line.
    text_body
        Plain-text rendering of the reduced body.
    html_body
        HTML rendering of the reduced body.
    attachment_name
        File name of the attachment.
    attachment_content
        Canonical markdown, verbatim.

    """

    subject: str
    text_body: str
    html_body: str
    attachment_name: str
    attachment_content: str


def strip_minutes_section(markdown: str) -> str:
    """Remove the minutes section, up to the next level 1 or 2 heading.

    Examples
    --------
    >>> strip_minutes_section("# T\\n## A\\nx\\n## 📝 Minutes\\n### Ann\\n")
    '# T\\n## A\\nx\\n'

    """
    kept: list[str] = []
    skipping = False
    for line in markdown.splitlines(keepends=True):
        bare = line.rstrip("\r\n")
        if _MINUTES_HEADING.match(bare):
            skipping = True
            continue
        if skipping and _LEVEL_ONE_OR_TWO_HEADING.match(bare):
            skipping = False
        if not skipping:
            kept.append(line)
    return "".join(kept)


def email_subject(
    document: Document,
    config: DocumentConfig = DEFAULT_DOCUMENT_CONFIG,
) -> str:
    """Return ``"<title marker><project name> - <file name>"``."""
    return f"{config.title_marker}{document.project_name} - {document.file_name}"


def format_email(
    document: Document,
    config: DocumentConfig = DEFAULT_DOCUMENT_CONFIG,
) -> EmailContent:
    """Derive the email view of ``document``.

    Parameters
    ----------
    document
        Rendered briefing document.
    config
        Presentation settings; supplies the subject's title marker.

    Returns
    -------
    EmailContent
        Subject, both body renderings and the attachment.

    """
    reduced = strip_minutes_section(document.content)
    return EmailContent(
        subject=email_subject(document, config),
        text_body=markdown_to_plain_text(reduced),
        html_body=markdown_to_html(reduced),
        attachment_name=document.file_name,
        attachment_content=document.content,
    )


def parse_recipients(value: str | None) -> list[str]:
    """Split a comma-separated address list, dropping blanks.

    Examples
    --------
    >>> parse_recipients(" a@example.com, ,b@example.com ")
    ['a@example.com', 'b@example.com']

    """
    return [part.strip() for part in (value or "").split(",") if part.strip()]


def build_email_message(
    content: EmailContent,
    *,
    sender: str,
    recipients: cabc.Sequence[str],
) -> MIMEMultipart:
    """Assemble a ``multipart/mixed`` message ready for a mail transport.

    The first part is a ``multipart/alternative`` carrying the plain-text and
    HTML bodies; the second is the ``text/markdown`` attachment.

    Raises
    ------
    ValueError
        If ``recipients`` is empty.

    """
    if not recipients:
        msg = "At least one recipient is required"
        raise ValueError(msg)

    message = MIMEMultipart("mixed")
    message["Subject"] = content.subject
    message["From"] = sender
    message["To"] = ", ".join(recipients)

    body = MIMEMultipart("alternative")
    body.attach(MIMEText(content.text_body, "plain", "utf-8"))
    body.attach(MIMEText(content.html_body, "html", "utf-8"))
    message.attach(body)

    attachment = MIMEText(content.attachment_content, "markdown", "utf-8")
    attachment.add_header(
        "Content-Disposition", "attachment", filename=content.attachment_name
    )
    message.attach(attachment)
    return message
