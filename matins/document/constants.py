"""Fixed headings, labels and placeholder markers of the briefing document.

Both renderers emit these exact strings. The AI-assisted prompt quotes them,
and the email channel locates the minutes section by its heading.
"""

from __future__ import annotations

from matins.issues.models import DelayReason

SUMMARY_HEADING = "## 📊 Summary"
INCOMPLETE_HEADING = "## ⚠️ Overdue and Incomplete Issues"
TODAY_HEADING = "## 📅 Scheduled for Today"
DUE_TODAY_HEADING = "## 🔔 Due Today"
MEETINGS_HEADING = "## 🗓️ Meetings"
MINUTES_HEADING = "## 📝 Minutes"

SUMMARY_COLUMNS = ("Category", "Count")
TODAY_LABEL = "Scheduled today"
INCOMPLETE_LABEL = "Incomplete"
DUE_TODAY_LABEL = "Due today"

ISSUE_TABLE_COLUMNS = (
    "Key",
    "Title",
    "Status",
    "Start",
    "Due",
    "Priority",
    "Categories",
    "Link",
)
ISSUE_LINK_LABEL = "Open"
MEETING_LINK_LABEL = "Join"
EMPTY_CELL = "-"

NOTE_PLACEHOLDER = "📝 Notes:"
UNSET_PLACEHOLDER = "(not set)"
WAITING_STATUS_PLACEHOLDER = "Waiting for a response"
DUE_TODAY_MARKER = "🔔 Due today"
NO_MINUTES_ITEMS = "No items to discuss."

ACTION_REQUIRED_TITLE = "🔴 Action required"
WAITING_ON_OTHER_TITLE = "🟡 Waiting on others"
TODAY_TITLE = "📅 Today"

DELAY_REASON_LABELS: dict[DelayReason, str] = {
    DelayReason.SELF: "Self-caused",
    DelayReason.SPEC_CHANGE: "Specification change",
    DelayReason.INTERRUPTION: "Interruption",
    DelayReason.INTERNAL_WAIT: "Waiting on internal team",
    DelayReason.CUSTOMER_WAIT: "Waiting on customer",
}
