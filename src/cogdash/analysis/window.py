"""Date window utilities for domain performance aggregation.

Windows are inclusive date ranges ``[period_start, period_end]``; a session
belongs to a window when its ``played_at`` falls on any instant of those days
(UTC).
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

from cogdash.errors import ValidationFailed

DEFAULT_WINDOW_DAYS = 30


def utc_today(now: datetime | None = None) -> date:
    """Get today's date in UTC."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).date()


def parse_period(value: str, field: str) -> date:
    """Parse a strict ISO ``YYYY-MM-DD`` date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as e:
        raise ValidationFailed(f"Invalid {field}: expected YYYY-MM-DD", field=field, value=value) from e


def resolve_period(
    period_start: date | None = None,
    period_end: date | None = None,
    today: date | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> tuple[date, date]:
    """Apply the default window: end = today, start = end - window_days."""
    if period_end is None:
        period_end = today or utc_today()
    if period_start is None:
        period_start = period_end - timedelta(days=window_days)
    if period_start > period_end:
        raise ValidationFailed(
            "period_start must not be after period_end",
            period_start=period_start.isoformat(),
            period_end=period_end.isoformat(),
        )
    return period_start, period_end


def window_bounds(period_start: date, period_end: date) -> tuple[datetime, datetime]:
    """Get the half-open UTC range [start 00:00, day after end 00:00)."""
    lower = datetime.combine(period_start, time.min, tzinfo=timezone.utc)
    upper = datetime.combine(period_end + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return lower, upper


def in_window(played_at: datetime, period_start: date, period_end: date) -> bool:
    """Check whether a timestamp falls on a day of the inclusive window."""
    lower, upper = window_bounds(period_start, period_end)
    if played_at.tzinfo is None:
        played_at = played_at.replace(tzinfo=timezone.utc)
    return lower <= played_at < upper
