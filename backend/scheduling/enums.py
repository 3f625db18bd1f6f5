"""Canonical enumerations shared by the scheduling engine and the API."""

from enum import Enum


class UserRole(str, Enum):
    PATIENT = 'PATIENT'
    DOCTOR = 'DOCTOR'
    ADMIN = 'ADMIN'


class AppointmentStatus(str, Enum):
    PENDING = 'PENDING'
    CONFIRMED = 'CONFIRMED'
    CANCELED = 'CANCELED'
    COMPLETED = 'COMPLETED'
    NO_SHOW = 'NO_SHOW'


class AppointmentType(str, Enum):
    IN_PERSON = 'In-person'
    VIDEO = 'Video'


class NotificationType(str, Enum):
    APPOINTMENT_BOOKED = 'APPOINTMENT_BOOKED'
    APPOINTMENT_CONFIRMED = 'APPOINTMENT_CONFIRMED'
    APPOINTMENT_CANCELED = 'APPOINTMENT_CANCELED'
    APPOINTMENT_COMPLETED = 'APPOINTMENT_COMPLETED'
    APPOINTMENT_NO_SHOW = 'APPOINTMENT_NO_SHOW'


class Weekday(str, Enum):
    MONDAY = 'monday'
    TUESDAY = 'tuesday'
    WEDNESDAY = 'wednesday'
    THURSDAY = 'thursday'
    FRIDAY = 'friday'
    SATURDAY = 'saturday'
    SUNDAY = 'sunday'


# Indexed by date.weekday(): Monday is 0.
WEEKDAYS = tuple(Weekday)

ACTIVE_STATUSES = frozenset({AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED})
TERMINAL_STATUSES = frozenset(
    {AppointmentStatus.CANCELED, AppointmentStatus.COMPLETED, AppointmentStatus.NO_SHOW}
)
