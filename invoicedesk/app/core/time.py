"""Time utilities for timezone-aware UTC datetimes."""

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime for defaults and onupdate hooks."""
    return datetime.now(UTC)


def utc_today() -> date:
    return utc_now().date()


def epoch_millis(moment: datetime | None = None) -> int:
    """Milliseconds since the Unix epoch for ``moment`` (now when omitted)."""
    moment = moment or utc_now()
    return int(moment.timestamp() * 1000)


def format_long_date(value: date | None) -> str:
    """Format a date as e.g. ``October 5, 2026``; ``None`` renders empty."""
    if value is None:
        return ""
    return f"{value.strftime('%B')} {value.day}, {value.year}"
