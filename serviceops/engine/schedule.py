from __future__ import annotations

from datetime import date

from pydantic import BaseModel

from serviceops.constants import days_in_month
from serviceops.errors import InvalidArgumentError
from serviceops.models.facility import FacilityStatus


class ScheduleCount(BaseModel):
    scheduled_days: int
    active_days: int

    @property
    def paused_days(self) -> int:
        return self.scheduled_days - self.active_days


def validate_pause_window(pause_start_day: int | None, pause_end_day: int | None) -> None:
    if pause_start_day is None and pause_end_day is None:
        return
    if pause_start_day is None or pause_end_day is None:
        raise InvalidArgumentError("Pause window requires both a start day and an end day")
    if not (1 <= pause_start_day <= 31 and 1 <= pause_end_day <= 31):
        raise InvalidArgumentError("Pause days must be between 1 and 31")
    if pause_start_day > pause_end_day:
        raise InvalidArgumentError("Pause start day must not be after the pause end day")


def day_of_week(d: date) -> int:
    """0=Sunday .. 6=Saturday."""
    return (d.weekday() + 1) % 7


def scheduled_dates(year: int, month: int, days_of_week: list[int]) -> list[date]:
    wanted = set(days_of_week)
    return [
        date(year, month, day)
        for day in range(1, days_in_month(year, month) + 1)
        if day_of_week(date(year, month, day)) in wanted
    ]


def count_schedule(
    year: int,
    month: int,
    days_of_week: list[int],
    status: FacilityStatus = FacilityStatus.ACTIVE,
    pause_start_day: int | None = None,
    pause_end_day: int | None = None,
) -> ScheduleCount:
    """Count scheduled and active service days for a month.

    The pause window is inclusive. Its end is clamped to the month's real
    length, so ``31`` in February means the last day of February; a window
    that starts after the last day pauses nothing. Any status other than
    ACTIVE leaves no active days.
    """
    validate_pause_window(pause_start_day, pause_end_day)
    dates = scheduled_dates(year, month, days_of_week)
    scheduled = len(dates)

    if status != FacilityStatus.ACTIVE:
        return ScheduleCount(scheduled_days=scheduled, active_days=0)

    if pause_start_day is None or pause_end_day is None:
        return ScheduleCount(scheduled_days=scheduled, active_days=scheduled)

    last_day = days_in_month(year, month)
    end = min(pause_end_day, last_day)
    paused = sum(1 for d in dates if pause_start_day <= d.day <= end)
    return ScheduleCount(scheduled_days=scheduled, active_days=scheduled - paused)
