"""Per-channel views of a briefing document.

Public API
----------
format_chat_payload, encode_chat_payload, ChatPayload
    Chat-webhook payload carrying the full canonical markdown.
format_email, build_email_message, EmailContent
    Email view: reduced body in HTML and plain text plus the markdown
    attachment.
strip_minutes_section, parse_recipients
    Helpers shared with delivery collaborators.

"""

from __future__ import annotations

from matins.channels.chat import ChatPayload, encode_chat_payload, format_chat_payload
from matins.channels.email import (
    EmailContent,
    build_email_message,
    email_subject,
    format_email,
    parse_recipients,
    strip_minutes_section,
)

__all__ = [
    "ChatPayload",
    "EmailContent",
    "build_email_message",
    "email_subject",
    "encode_chat_payload",
    "format_chat_payload",
    "format_email",
    "parse_recipients",
    "strip_minutes_section",
]
