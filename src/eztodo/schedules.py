"""
Occurrence computation for plan schedules.

An occurrence is the timestamp at which one instance of a recurring plan is
due. The refresh engine asks for the occurrences inside a window and turns
each of them into a todo.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Callable, List, Optional

from .errors import ScheduleError
from .models import DailySchedule, IntervalSchedule, MonthlySchedule, Schedule, WeeklySchedule


# PUBLIC_INTERFACE
def validate_schedule(schedule: Schedule) -> None:
    """
    Raise ScheduleError when the rule can never produce an occurrence or
    carries out-of-range values.
    """
    if isinstance(schedule, DailySchedule):
        return
    if isinstance(schedule, WeeklySchedule):
        if not schedule.weekdays:
            raise ScheduleError("weekly schedule needs at least one weekday")
        bad = [d for d in schedule.weekdays if not 0 <= d <= 6]
        if bad:
            raise ScheduleError(f"weekdays must be between 0 (Monday) and 6 (Sunday), got {bad}")
        return
    if isinstance(schedule, MonthlySchedule):
        if not schedule.days:
            raise ScheduleError("monthly schedule needs at least one day of month")
        bad = [d for d in schedule.days if not 1 <= d <= 31]
        if bad:
            raise ScheduleError(f"days of month must be between 1 and 31, got {bad}")
        return
    if isinstance(schedule, IntervalSchedule):
        if schedule.every_seconds <= 0:
            raise ScheduleError(f"interval must be positive, got {schedule.every_seconds} seconds")
        return
    raise ScheduleError(f"unsupported schedule: {schedule!r}")


# PUBLIC_INTERFACE
def occurrences(
    schedule: Schedule,
    start_at: datetime,
    after: Optional[datetime],
    until: datetime,
    limit: Optional[int] = None,
) -> List[datetime]:
    """
    Return the occurrences of `schedule`, oldest first, that fall inside the window.

    The window is (after, until] when `after` is set and [start_at, until]
    otherwise; nothing before `start_at` is ever returned. At most `limit`
    occurrences are returned (the oldest ones).

    Raises:
        ScheduleError: the rule is malformed (see validate_schedule).
    """
    validate_schedule(schedule)
    if limit is not None and limit <= 0:
        return []

    if isinstance(schedule, IntervalSchedule):
        return _interval_occurrences(schedule, start_at, after, until, limit)

    return _calendar_occurrences(_day_matcher(schedule), schedule.at, start_at, after, until, limit)


def _day_matcher(schedule: Schedule) -> Callable[[date], bool]:
    if isinstance(schedule, WeeklySchedule):
        weekdays = set(schedule.weekdays)
        return lambda d: d.weekday() in weekdays
    if isinstance(schedule, MonthlySchedule):
        days = set(schedule.days)
        return lambda d: d.day in days
    return lambda d: True


def _in_window(t: datetime, start_at: datetime, after: Optional[datetime], until: datetime) -> bool:
    if t < start_at or t > until:
        return False
    return after is None or t > after


def _calendar_occurrences(
    matches: Callable[[date], bool],
    at: time,
    start_at: datetime,
    after: Optional[datetime],
    until: datetime,
    limit: Optional[int],
) -> List[datetime]:
    lower = after if after is not None and after > start_at else start_at
    found: List[datetime] = []
    day = lower.date()
    while day <= until.date():
        if matches(day):
            candidate = datetime.combine(day, at)
            if _in_window(candidate, start_at, after, until):
                found.append(candidate)
                if limit is not None and len(found) >= limit:
                    break
        day += timedelta(days=1)
    return found


def _interval_occurrences(
    schedule: IntervalSchedule,
    start_at: datetime,
    after: Optional[datetime],
    until: datetime,
    limit: Optional[int],
) -> List[datetime]:
    every = timedelta(seconds=schedule.every_seconds)
    if after is None or after < start_at:
        k = 0
    else:
        k = (after - start_at) // every + 1

    found: List[datetime] = []
    candidate = start_at + k * every
    while candidate <= until:
        if _in_window(candidate, start_at, after, until):
            found.append(candidate)
            if limit is not None and len(found) >= limit:
                break
        k += 1
        candidate = start_at + k * every
    return found
