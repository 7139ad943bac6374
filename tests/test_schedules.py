from datetime import datetime, time

import pytest

from eztodo.errors import ScheduleError
from eztodo.models import DailySchedule, IntervalSchedule, MonthlySchedule, WeeklySchedule
from eztodo.schedules import occurrences, validate_schedule


class TestDaily:
    def test_window_is_inclusive_of_start_when_never_refreshed(self):
        got = occurrences(DailySchedule(), datetime(2025, 3, 10), None, datetime(2025, 3, 12))
        assert got == [datetime(2025, 3, 10), datetime(2025, 3, 11), datetime(2025, 3, 12)]

    def test_window_is_exclusive_of_last_refresh(self):
        got = occurrences(DailySchedule(), datetime(2025, 3, 1), datetime(2025, 3, 10), datetime(2025, 3, 12))
        assert got == [datetime(2025, 3, 11), datetime(2025, 3, 12)]

    def test_nothing_before_start_at(self):
        got = occurrences(DailySchedule(at=time(8, 0)), datetime(2025, 3, 10, 9, 0), None, datetime(2025, 3, 11, 9, 0))
        assert got == [datetime(2025, 3, 11, 8, 0)]

    def test_until_before_time_of_day(self):
        got = occurrences(DailySchedule(at=time(18, 0)), datetime(2025, 3, 10), None, datetime(2025, 3, 10, 17, 59))
        assert got == []

    def test_limit_keeps_oldest(self):
        got = occurrences(DailySchedule(), datetime(2025, 1, 1), None, datetime(2025, 12, 31), limit=2)
        assert got == [datetime(2025, 1, 1), datetime(2025, 1, 2)]


class TestWeekly:
    def test_listed_weekdays_only(self):
        schedule = WeeklySchedule(weekdays=[0, 3], at=time(8, 0))  # Monday, Thursday
        got = occurrences(schedule, datetime(2025, 3, 10), None, datetime(2025, 3, 20, 23, 0))
        assert got == [
            datetime(2025, 3, 10, 8, 0),
            datetime(2025, 3, 13, 8, 0),
            datetime(2025, 3, 17, 8, 0),
            datetime(2025, 3, 20, 8, 0),
        ]


class TestMonthly:
    def test_missing_days_are_skipped(self):
        schedule = MonthlySchedule(days=[31])
        got = occurrences(schedule, datetime(2025, 1, 1), None, datetime(2025, 5, 1))
        assert got == [datetime(2025, 1, 31), datetime(2025, 3, 31)]


class TestInterval:
    def test_aligned_to_start_at(self):
        schedule = IntervalSchedule(every_seconds=3600)
        got = occurrences(
            schedule,
            datetime(2025, 3, 10, 9, 0),
            datetime(2025, 3, 10, 10, 30),
            datetime(2025, 3, 10, 13, 0),
        )
        assert got == [datetime(2025, 3, 10, 11, 0), datetime(2025, 3, 10, 12, 0), datetime(2025, 3, 10, 13, 0)]

    def test_first_occurrence_is_start_at(self):
        schedule = IntervalSchedule(every_seconds=86400)
        got = occurrences(schedule, datetime(2025, 3, 10, 9, 0), None, datetime(2025, 3, 10, 9, 0))
        assert got == [datetime(2025, 3, 10, 9, 0)]


class TestValidation:
    @pytest.mark.parametrize(
        "schedule",
        [
            WeeklySchedule(weekdays=[]),
            WeeklySchedule(weekdays=[7]),
            MonthlySchedule(days=[]),
            MonthlySchedule(days=[0, 15]),
            IntervalSchedule(every_seconds=0),
            IntervalSchedule(every_seconds=-60),
        ],
    )
    def test_rules_that_cannot_occur_are_rejected(self, schedule):
        with pytest.raises(ScheduleError):
            validate_schedule(schedule)
        with pytest.raises(ScheduleError):
            occurrences(schedule, datetime(2025, 1, 1), None, datetime(2025, 12, 31))

    def test_daily_is_always_valid(self):
        validate_schedule(DailySchedule(at=time(23, 59)))
