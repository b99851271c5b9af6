"""
Time source used to stamp events and to anchor "today" in statistics.

Services receive a `TimeSource` at construction time instead of calling
`datetime.now()` themselves, so tests can pin the clock with `FixedClock`.
"""

from datetime import date, datetime, timezone
from typing import Protocol


class TimeSource(Protocol):
    def now_iso(self) -> str:
        """Current instant as an ISO-8601 UTC string."""
        ...


def format_instant(dt: datetime) -> str:
    """Format as `YYYY-MM-DDTHH:MM:SS.mmmZ` (millisecond precision, UTC)."""
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_instant(text: str) -> datetime:
    """Parse an ISO-8601 instant into an aware UTC datetime.

    Date-only strings map to midnight UTC of that date and naive values
    are taken as UTC. Raises `ValueError` on anything unparseable.
    """
    text = text.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def calendar_date(timestamp: str) -> date:
    """Date portion of an ISO timestamp, ignoring the time of day."""
    return date.fromisoformat(timestamp[:10])


class SystemClock:
    def now_iso(self) -> str:
        return format_instant(datetime.now(timezone.utc))


class FixedClock:
    """Clock pinned to one instant until `set()` moves it."""

    def __init__(self, fixed: str = "2024-01-01T00:00:00.000Z"):
        self.fixed = fixed

    def now_iso(self) -> str:
        return self.fixed

    def set(self, fixed: str) -> None:
        self.fixed = fixed
