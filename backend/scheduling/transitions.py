"""Appointment state machine as data.

Adding a status or a transition means editing ``TRANSITIONS``; the lifecycle
manager never compares statuses itself.
"""

from enum import Enum

from backend.scheduling.enums import AppointmentStatus, UserRole
from backend.scheduling.errors import AuthorizationError, InvalidStateError


class Actor(str, Enum):
    """How a caller relates to one appointment."""

    BOOKING_PATIENT = 'booking_patient'
    ASSIGNED_DOCTOR = 'assigned_doctor'
    ADMIN = 'admin'


ANY_PARTY = frozenset({Actor.BOOKING_PATIENT, Actor.ASSIGNED_DOCTOR, Actor.ADMIN})

TRANSITIONS: dict[tuple[AppointmentStatus, AppointmentStatus], frozenset[Actor]] = {
    (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED): frozenset({Actor.ASSIGNED_DOCTOR, Actor.ADMIN}),
    (AppointmentStatus.PENDING, AppointmentStatus.CANCELED): ANY_PARTY,
    (AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELED): ANY_PARTY,
    (AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED): frozenset({Actor.ASSIGNED_DOCTOR}),
    (AppointmentStatus.CONFIRMED, AppointmentStatus.NO_SHOW): frozenset({Actor.ASSIGNED_DOCTOR}),
}

INITIAL_STATUS = AppointmentStatus.PENDING


def resolve_actors(caller_id: str, caller_role: UserRole, appointment) -> set[Actor]:
    actors = set()
    if caller_role == UserRole.ADMIN:
        actors.add(Actor.ADMIN)
    if caller_role == UserRole.PATIENT and appointment.patient_id == caller_id:
        actors.add(Actor.BOOKING_PATIENT)
    if caller_role == UserRole.DOCTOR and appointment.doctor_id == caller_id:
        actors.add(Actor.ASSIGNED_DOCTOR)
    return actors


def actors_allowed_into(target: AppointmentStatus) -> frozenset[Actor]:
    allowed = frozenset()
    for (_, to_status), actors in TRANSITIONS.items():
        if to_status == target:
            allowed |= actors
    return allowed


def check_transition(actors: set[Actor], current: AppointmentStatus, target: AppointmentStatus) -> None:
    """Raise unless one of ``actors`` may move an appointment from ``current`` to ``target``.

    Ownership is checked before state: a caller who may never perform this
    kind of transition gets ``AuthorizationError`` whatever the status is.
    """
    if not actors & actors_allowed_into(target):
        raise AuthorizationError(
            f'You are not authorized to mark this appointment as {target.value}.'
        )

    allowed = TRANSITIONS.get((current, target))
    if allowed is None:
        raise InvalidStateError(
            f'Appointment in status {current.value} cannot be moved to {target.value}.',
            current_status=current,
        )

    if not actors & allowed:
        raise AuthorizationError(
            f'You are not authorized to move this appointment from {current.value} to {target.value}.'
        )
