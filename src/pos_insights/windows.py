"""Business-timezone date windows.

Every "today", "yesterday" or "last 7 days" question is answered in the
store's own timezone, not UTC and not the host's local zone. UTC offsets are
taken from IANA zone data at each window boundary, so a window that spans a
daylight-saving change gets a different offset at each end.

Examples:
    >>> from datetime import datetime
    >>> from zoneinfo import ZoneInfo
    >>> now = datetime(2024, 7, 4, 15, 30, tzinfo=ZoneInfo("America/New_York"))
    >>> window = date_window(0, 1, "America/New_York", now=now)
    >>> window.range_filter()
    '><,2024-07-04T00:00:00-04:00,2024-07-04T23:59:59-04:00'

"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pos_insights.exceptions import ConfigurationError

END_OF_DAY = time(23, 59, 59)


@dataclass(frozen=True)
class DateWindow:
    """A contiguous range of whole days in the business timezone.

    Attributes:
        start: First instant of the first day (inclusive).
        end: Last second of the last day (inclusive, matching Lightspeed's
            inclusive completeTime range filter).
        label: ISO date of the first day, e.g. "2024-07-04".
    """

    start: datetime
    end: datetime
    label: str

    @property
    def days(self) -> int:
        """Number of calendar days covered."""
        return (self.end.date() - self.start.date()).days + 1

    def range_filter(self) -> str:
        """Render the window as a Lightspeed between-filter value."""
        start = self.start.isoformat(timespec="seconds")
        end = self.end.isoformat(timespec="seconds")
        return f"><,{start},{end}"


def business_zone(name: str) -> ZoneInfo:
    """Resolve an IANA timezone name.

    Raises:
        ConfigurationError: If the name is not a known IANA zone.

    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown business timezone {name!r}") from e


def business_now(tz: str | tzinfo, now: datetime | None = None) -> datetime:
    """Return the current (or given) instant expressed in the business timezone.

    A naive ``now`` is taken to already be business-local wall time.
    """
    zone = business_zone(tz) if isinstance(tz, str) else tz
    if now is None:
        return datetime.now(zone)
    if now.tzinfo is None:
        return now.replace(tzinfo=zone)
    return now.astimezone(zone)


def date_window(
    days_ago: int = 0,
    days_span: int = 1,
    tz: str | tzinfo = "America/New_York",
    now: datetime | None = None,
) -> DateWindow:
    """Build the window of ``days_span`` whole days ending ``days_ago`` days back.

    ``date_window(0, 1)`` is today, ``date_window(1, 1)`` yesterday,
    ``date_window(0, 7)`` the last seven days including today and
    ``date_window(7, 7)`` the seven days before that, so windows with
    ``days_ago == days_span`` are adjacent and of equal length.

    Args:
        days_ago: How many days before today the window ends (>= 0).
        days_span: Number of whole days in the window (>= 1).
        tz: Business timezone name or tzinfo.
        now: Reference instant; defaults to the current time.

    Returns:
        DateWindow with timezone-aware boundaries.

    Raises:
        ValueError: If days_ago is negative or days_span is less than 1.
        ConfigurationError: If tz is not a known IANA zone.

    """
    if days_ago < 0:
        raise ValueError(f"days_ago must be >= 0, got {days_ago}")
    if days_span < 1:
        raise ValueError(f"days_span must be >= 1, got {days_span}")

    zone = business_zone(tz) if isinstance(tz, str) else tz
    today = business_now(zone, now).date()

    last_day: date = today - timedelta(days=days_ago)
    first_day: date = last_day - timedelta(days=days_span - 1)

    return DateWindow(
        start=datetime.combine(first_day, time.min, tzinfo=zone),
        end=datetime.combine(last_day, END_OF_DAY, tzinfo=zone),
        label=first_day.isoformat(),
    )
