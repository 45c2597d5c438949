"""Clock helpers for organisation-local calendar days."""

from __future__ import annotations

import datetime as dt
from zoneinfo import ZoneInfo


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def to_local(moment: dt.datetime, timezone: str) -> dt.datetime:
    """Convert ``moment`` into ``timezone``.

    Naive datetimes are taken to be UTC, matching how upstream collaborators
    serialise timestamps.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=dt.UTC)
    return moment.astimezone(ZoneInfo(timezone))


def local_today(moment: dt.datetime, timezone: str) -> dt.date:
    """Return the calendar day of ``moment`` in ``timezone``.

    Examples
    --------
    >>> local_today(dt.datetime(2024, 1, 19, 16, 0, tzinfo=dt.UTC), "Asia/Tokyo")
    datetime.date(2024, 1, 20)

    """
    return to_local(moment, timezone).date()
