"""Detect collisions between a candidate interval and a doctor's calendar."""

from backend.scheduling.enums import ACTIVE_STATUSES
from backend.scheduling.time_utils import calendar_date, intervals_overlap, parse_interval


def conflicting_appointments(doctor_id, day, start_time, end_time, existing_appointments) -> list:
    """Active appointments of ``doctor_id`` on ``day`` overlapping ``[start_time, end_time)``.

    Only the doctor's calendar is considered; a patient holding overlapping
    appointments with different doctors is not a conflict.
    """
    start, end = parse_interval(start_time, end_time)
    target_day = calendar_date(day)

    conflicts = []
    for appointment in existing_appointments:
        if appointment.doctor_id != doctor_id:
            continue
        if appointment.status not in ACTIVE_STATUSES:
            continue
        if calendar_date(appointment.appointment_date) != target_day:
            continue

        booked_start, booked_end = parse_interval(appointment.start_time, appointment.end_time)
        if intervals_overlap(start, end, booked_start, booked_end):
            conflicts.append(appointment)

    return conflicts


def has_appointment_conflict(doctor_id, day, start_time, end_time, existing_appointments) -> bool:
    return bool(conflicting_appointments(doctor_id, day, start_time, end_time, existing_appointments))
