"""Enumerate concretely bookable slots for one doctor and date."""

from collections.abc import Iterator

from backend.core import config
from backend.scheduling.availability import available_windows
from backend.scheduling.conflicts import has_appointment_conflict
from backend.scheduling.errors import FormatError
from backend.scheduling.records import DoctorRecord, TimeSlot
from backend.scheduling.time_utils import local_date, minutes_to_time, parse_interval


def iter_available_slots(
    doctor: DoctorRecord,
    day,
    existing_appointments,
    slot_minutes: int | None = None,
) -> Iterator[TimeSlot]:
    slot_minutes = slot_minutes or config.SLOT_DURATION_MINUTES
    if slot_minutes <= 0:
        raise FormatError('Slot duration must be a positive number of minutes.')

    target_day = local_date(day, doctor.timezone)
    appointments = list(existing_appointments)
    windows = sorted(
        (parse_interval(window.start_time, window.end_time) for window in available_windows(doctor, target_day)),
    )

    for window_start, window_end in windows:
        slot_start = window_start
        # A trailing remainder shorter than one slot is never offered.
        while slot_start + slot_minutes <= window_end:
            start_time = minutes_to_time(slot_start)
            end_time = minutes_to_time(slot_start + slot_minutes)
            if not has_appointment_conflict(doctor.user_id, target_day, start_time, end_time, appointments):
                yield TimeSlot(start_time=start_time, end_time=end_time, is_available=True)
            slot_start += slot_minutes


def enumerate_available_slots(
    doctor: DoctorRecord,
    day,
    existing_appointments,
    slot_minutes: int | None = None,
) -> list[TimeSlot]:
    return list(iter_available_slots(doctor, day, existing_appointments, slot_minutes))
