# This file formats commit times for display on unit headers and search results.
# Recent commits read as relative hours or days; anything older shows its calendar date.

from __future__ import annotations

from datetime import UTC, datetime


def elapsed_time(date: datetime | None, now: datetime | None = None) -> str:
    """Describe how long ago `date` was, relative to `now` (the current UTC time by default).

    Under 6 hours: "1 hour ago" or "N hours ago". Under a day: "today".
    Under 6 days: "1 day ago" or "N days ago". Otherwise: "Jan 2, 2006".
    Naive datetimes are taken as UTC; None formats as "".
    """

    if date is None:
        return ""
    date = _as_utc(date)
    now = _as_utc(now) if now is not None else datetime.now(tz=UTC)

    # Whole hours, truncated; a commit time in the future counts as zero.
    elapsed_hours = max(int((now - date).total_seconds() // 3600), 0)
    if elapsed_hours == 1:
        return "1 hour ago"
    if elapsed_hours < 6:
        return f"{elapsed_hours} hours ago"

    elapsed_days = elapsed_hours // 24
    if elapsed_days < 1:
        return "today"
    if elapsed_days == 1:
        return "1 day ago"
    if elapsed_days < 6:
        return f"{elapsed_days} days ago"
    return f"{date:%b} {date.day}, {date.year}"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
