"""Shared date utilities.

All dates handled here are plain calendar dates in the viewer's local
calendar. Nothing is converted through UTC, so two calls on the same local
day always produce the same range regardless of how the API stores
timestamps.

Examples:
    >>> from datetime import date
    >>> date_window(3, today=date(2025, 1, 2))
    (datetime.date(2024, 12, 31), datetime.date(2025, 1, 2))

"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date, datetime, timedelta

DATE_FORMAT = "%Y-%m-%d"


def parse_date(s: str) -> date:
    """Parse a date string in YYYY-MM-DD format.

    Args:
        s: Date string in ISO format (YYYY-MM-DD).

    Returns:
        Parsed date object.

    Raises:
        ValueError: If the date string is not in YYYY-MM-DD format.

    Examples:
        >>> parse_date("2023-01-15")
        datetime.date(2023, 1, 15)

    """
    return datetime.strptime(s, DATE_FORMAT).date()


def format_date(d: date) -> str:
    """Format a date as YYYY-MM-DD (no time of day, no offset)."""
    return d.strftime(DATE_FORMAT)


def local_today() -> date:
    """Today's date in the local calendar of the machine running the dashboard."""
    return date.today()


def date_window(days: int, today: date | None = None) -> tuple[date, date]:
    """Return the inclusive range of the last ``days`` calendar days ending today.

    Args:
        days: Number of days in the window (>= 1).
        today: Override for the current local date.

    Returns:
        Tuple of (start, end), both inclusive.

    Raises:
        ValueError: If days is smaller than 1.

    """
    if days < 1:
        raise ValueError(f"days must be >= 1, got {days}")
    end = today if today is not None else local_today()
    start = end - timedelta(days=days - 1)
    return start, end


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end, both inclusive.

    Examples:
        >>> from datetime import date
        >>> [d.day for d in iter_days(date(2025, 1, 30), date(2025, 2, 1))]
        [30, 31, 1]

    """
    cur = start
    while cur <= end:
        yield cur
        cur += timedelta(days=1)


def format_duration(seconds: float) -> str:
    """Format a duration in seconds as a human-readable string.

    Examples:
        >>> format_duration(90.5)
        '1m 30.5s'
        >>> format_duration(0.25)
        '0.2s'

    """
    mins, secs = divmod(seconds, 60.0)
    if mins >= 1:
        return f"{int(mins)}m {secs:04.1f}s"
    else:
        return f"{secs:.1f}s"
