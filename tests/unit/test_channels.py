"""Unit tests for the chat and email channel views."""

from __future__ import annotations

import datetime as dt
import email

import msgspec
import pytest

from matins.channels.chat import encode_chat_payload, format_chat_payload
from matins.channels.email import (
    build_email_message,
    email_subject,
    format_email,
    parse_recipients,
    strip_minutes_section,
)
from matins.document import constants as c
from matins.document.config import DocumentConfig
from matins.document.markdown import render_document
from matins.document.models import Document
from matins.issues.models import ProjectDocumentInput


@pytest.fixture
def document(
    sample_project: ProjectDocumentInput, generated_at: dt.datetime
) -> Document:
    """Provide the rendered sample briefing."""
    return render_document(sample_project, generated_at)


class TestStripMinutesSection:
    """Tests for ``strip_minutes_section``."""

    def test_removes_minutes_to_end(self, document: Document) -> None:
        """Everything from the minutes heading onwards is dropped."""
        reduced = strip_minutes_section(document.content)
        assert c.MINUTES_HEADING not in reduced
        assert c.ACTION_REQUIRED_TITLE not in reduced
        assert c.MEETINGS_HEADING in reduced
        assert document.content.startswith(reduced)

    def test_stops_at_next_section(self) -> None:
        """A level 2 heading after the minutes ends the removed span."""
        markdown = "# T\n## 📝 Minutes\n### Ann\n- x\n## Appendix\nkeep\n"
        assert strip_minutes_section(markdown) == "# T\n## Appendix\nkeep\n"

    def test_plain_minutes_heading(self) -> None:
        """The heading is recognised without an emoji, in any case."""
        assert strip_minutes_section("a\n## MINUTES\nb\n") == "a\n"

    def test_level_three_minutes_heading_is_kept(self) -> None:
        """Only a level 2 minutes heading starts the removed section."""
        markdown = "### Minutes\nb\n"
        assert strip_minutes_section(markdown) == markdown


class TestEmail:
    """Tests for the email view and MIME assembly."""

    def test_subject(self, document: Document) -> None:
        """The subject is the title marker, project name and file name."""
        assert email_subject(document) == (
            "[Morning Meeting] Project Phoenix - morning-meeting-PROJ-2024-01-20.md"
        )
        custom = DocumentConfig(title_marker="[Daily] ")
        assert email_subject(document, custom).startswith("[Daily] Project Phoenix")

    def test_format_email(self, document: Document) -> None:
        """Bodies omit the minutes; the attachment carries the full document."""
        content = format_email(document)
        assert content.attachment_name == document.file_name
        assert content.attachment_content == document.content
        assert "Minutes" not in content.text_body
        assert "Minutes" not in content.html_body
        assert "<h2>📊 Summary</h2>" in content.html_body
        assert content.text_body.startswith("[Morning Meeting] 2024/01/20")

    def test_mime_layout(self, document: Document) -> None:
        """Mixed message with an alternative body and a markdown attachment."""
        message = build_email_message(
            format_email(document),
            sender="briefing@example.com",
            recipients=["a@example.com", "b@example.com"],
        )
        parsed = email.message_from_string(message.as_string())

        assert parsed.get_content_type() == "multipart/mixed"
        assert parsed["To"] == "a@example.com, b@example.com"
        body, attachment = parsed.get_payload()
        assert body.get_content_type() == "multipart/alternative"
        assert [part.get_content_type() for part in body.get_payload()] == [
            "text/plain",
            "text/html",
        ]
        assert attachment.get_content_type() == "text/markdown"
        assert attachment.get_filename() == document.file_name
        payload = attachment.get_payload(decode=True).decode("utf-8")
        assert payload == document.content

    def test_requires_recipients(self, document: Document) -> None:
        """An empty recipient list is rejected."""
        with pytest.raises(ValueError, match="recipient"):
            build_email_message(
                format_email(document), sender="briefing@example.com", recipients=[]
            )

    def test_parse_recipients(self) -> None:
        """Blank entries are dropped and whitespace trimmed."""
        assert parse_recipients("a@x.test, ,b@x.test ") == ["a@x.test", "b@x.test"]
        assert parse_recipients(None) == []


class TestChatPayload:
    """Tests for the chat-webhook payload."""

    def test_carries_full_markdown(self, document: Document) -> None:
        """The chat channel forwards the canonical markdown unchanged."""
        tokyo = dt.timezone(dt.timedelta(hours=9))
        sent_at = dt.datetime(2024, 1, 20, 8, 30, tzinfo=tokyo)
        payload = format_chat_payload(document, sent_at=sent_at)
        assert payload.content == document.content
        assert payload.timestamp == dt.datetime(2024, 1, 19, 23, 30, tzinfo=dt.UTC)

    def test_json_uses_camel_case(self, document: Document) -> None:
        """The encoded body uses camelCase keys and an RFC 3339 timestamp."""
        payload = format_chat_payload(
            document, sent_at=dt.datetime(2024, 1, 19, 23, 30, tzinfo=dt.UTC)
        )
        decoded = msgspec.json.decode(encode_chat_payload(payload))
        assert decoded == {
            "fileName": "morning-meeting-PROJ-2024-01-20.md",
            "projectKey": "PROJ",
            "projectName": "Project Phoenix",
            "content": document.content,
            "timestamp": "2024-01-19T23:30:00Z",
        }

    def test_naive_timestamp_is_utc(self, document: Document) -> None:
        """Naive send times are taken to be UTC."""
        payload = format_chat_payload(
            document, sent_at=dt.datetime(2024, 1, 19, 23, 30)
        )
        assert payload.timestamp.tzinfo is dt.UTC
