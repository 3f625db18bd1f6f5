"""Resolve a doctor's weekly template and blocked dates into availability."""

from datetime import date

from backend.scheduling.errors import FormatError
from backend.scheduling.records import DoctorRecord, TimeSlot, WeeklySchedule
from backend.scheduling.time_utils import (
    calendar_date,
    get_timezone,
    intervals_overlap,
    local_date,
    parse_interval,
    weekday_of,
)


def empty_weekly_schedule() -> WeeklySchedule:
    return WeeklySchedule()


def is_date_blocked(doctor: DoctorRecord, day) -> bool:
    # Stored entries may be dates, ISO dates or ISO timestamps.
    blocked = {calendar_date(value) for value in doctor.blocked_dates}
    return local_date(day, doctor.timezone) in blocked


def available_windows(doctor: DoctorRecord, day) -> list[TimeSlot]:
    """Template slots marked available on ``day``; empty when the day is blocked."""
    if is_date_blocked(doctor, day):
        return []

    if doctor.weekly_schedule is None:
        return []

    weekday = weekday_of(day, doctor.timezone)
    return [slot for slot in doctor.weekly_schedule.slots_for(weekday) if slot.is_available]


def is_slot_available(doctor: DoctorRecord, day, start_time: str, end_time: str) -> bool:
    start, end = parse_interval(start_time, end_time)

    for window in available_windows(doctor, day):
        window_start, window_end = parse_interval(window.start_time, window.end_time)
        # The whole candidate must sit inside one window; partial overlap is not enough.
        if window_start <= start and end <= window_end:
            return True

    return False


def validate_weekly_schedule(schedule: WeeklySchedule) -> WeeklySchedule:
    for weekday, slots in schedule:
        intervals = []
        for slot in slots:
            try:
                intervals.append(parse_interval(slot.start_time, slot.end_time))
            except FormatError as exc:
                raise FormatError(f'{weekday}: {exc.message}') from exc

        intervals.sort()
        for (previous_start, previous_end), (start, end) in zip(intervals, intervals[1:]):
            if intervals_overlap(previous_start, previous_end, start, end):
                raise FormatError(f'{weekday}: time slots must not overlap.')

    return schedule


def validate_blocked_dates(values) -> set[date]:
    return {calendar_date(value) for value in values or []}


def validate_timezone(name: str) -> str:
    get_timezone(name)
    return name
