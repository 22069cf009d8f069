# =============================================================================
# core/dates.py  —  "today", "this week" and overdue arithmetic
# =============================================================================
#
# All boundaries come from the process's LOCAL clock at call time.  Every
# helper takes an explicit aware `now` so callers (and tests) decide what
# "now" is; local_now() is the default the tools use.
#
# Date-only values are "YYYY-MM-DD" strings and are compared lexically.
# =============================================================================

from datetime import date, datetime, time, timedelta
from typing import Optional


def local_now() -> datetime:
    """Current local time as an aware datetime."""
    return datetime.now().astimezone()


def resolve_now(now: Optional[datetime]) -> datetime:
    if now is None:
        return local_now()
    if now.tzinfo is None:
        return now.astimezone()
    return now


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def today_str(now: datetime) -> str:
    return now.date().isoformat()


def week_bounds(now: datetime) -> tuple[str, str]:
    """Monday and Sunday of the week containing `now`, as date strings."""
    monday = now.date() - timedelta(days=now.weekday())
    sunday = monday + timedelta(days=6)
    return monday.isoformat(), sunday.isoformat()


def days_overdue(due_on: str, now: datetime) -> int:
    """Whole days elapsed since the start of the due date (truncated)."""
    due_start = datetime.combine(date.fromisoformat(due_on), time.min, tzinfo=now.tzinfo)
    return (now - due_start) // timedelta(days=1)
