"""Doctor-owned availability settings: weekly template, blocked dates, timezone."""

import logging
from dataclasses import dataclass
from datetime import date

from backend.core import config
from backend.scheduling.availability import (
    empty_weekly_schedule,
    validate_blocked_dates,
    validate_timezone,
    validate_weekly_schedule,
)
from backend.scheduling.enums import UserRole
from backend.scheduling.errors import AuthorizationError, NotFoundError
from backend.scheduling.locks import DoctorLocks, booking_locks
from backend.scheduling.records import WeeklySchedule
from backend.scheduling.store import SchedulingStore

logger = logging.getLogger(__name__)


@dataclass
class DoctorAvailability:
    doctor_id: str
    weekly_schedule: WeeklySchedule
    blocked_dates: list[date]
    timezone: str


def get_doctor_availability(store: SchedulingStore, doctor_id: str) -> DoctorAvailability:
    doctor = store.get_doctor(doctor_id)
    if doctor is None:
        raise NotFoundError('Doctor not found.')

    return DoctorAvailability(
        doctor_id=doctor.user_id,
        weekly_schedule=doctor.weekly_schedule or empty_weekly_schedule(),
        blocked_dates=sorted(doctor.blocked_dates),
        timezone=doctor.timezone,
    )


def set_doctor_availability(
    store: SchedulingStore,
    caller_id: str,
    caller_role: UserRole,
    weekly_schedule: WeeklySchedule,
    blocked_dates=None,
    timezone: str | None = None,
    locks: DoctorLocks | None = None,
) -> DoctorAvailability:
    """Replace the caller's weekly template.

    Blocked dates and timezone are kept as they are when not given. The write
    holds the doctor's booking lock, so no booking is checked against a
    half-applied update.
    """
    if caller_role != UserRole.DOCTOR:
        raise AuthorizationError('Only doctors can set availability.')

    schedule = validate_weekly_schedule(weekly_schedule)

    with (locks or booking_locks).for_doctor(caller_id):
        doctor = store.get_doctor(caller_id)
        if doctor is None:
            raise NotFoundError('Doctor profile not found.')

        blocked = validate_blocked_dates(blocked_dates) if blocked_dates is not None else doctor.blocked_dates
        zone = validate_timezone(timezone) if timezone else (doctor.timezone or config.DEFAULT_DOCTOR_TIMEZONE)
        store.save_doctor_availability(caller_id, schedule, blocked, zone)

    logger.info('Availability updated for doctor %s (%d blocked dates)', caller_id, len(blocked))

    return DoctorAvailability(
        doctor_id=caller_id,
        weekly_schedule=schedule,
        blocked_dates=sorted(blocked),
        timezone=zone,
    )
