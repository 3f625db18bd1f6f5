"""Appointment lifecycle: booking and status transitions with their side effects."""

import logging
from typing import Callable
from uuid import uuid4

from backend.core import config
from backend.scheduling import notifications
from backend.scheduling.availability import is_slot_available
from backend.scheduling.conflicts import conflicting_appointments
from backend.scheduling.enums import ACTIVE_STATUSES, AppointmentStatus, AppointmentType, UserRole
from backend.scheduling.errors import (
    AuthorizationError,
    BookingConflictError,
    FormatError,
    InvalidStateError,
    NotFoundError,
    SlotUnavailableError,
)
from backend.scheduling.locks import DoctorLocks, booking_locks
from backend.scheduling.records import AppointmentRecord
from backend.scheduling.store import SchedulingStore
from backend.scheduling.time_utils import local_date, parse_interval, utcnow
from backend.scheduling.transitions import INITIAL_STATUS, Actor, check_transition, resolve_actors

logger = logging.getLogger(__name__)


def _normalize_text(value: str | None, max_length: int, label: str) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if not normalized:
        return None

    if len(normalized) > max_length:
        raise FormatError(f'{label} must be {max_length} characters or fewer.')

    return normalized


def _doctor_label(doctor) -> str:
    if doctor is None or not doctor.display_name:
        return 'your doctor'
    return f'Dr. {doctor.display_name}'


def _role(value) -> UserRole:
    try:
        return UserRole(value)
    except ValueError as exc:
        raise AuthorizationError(f'Unknown role {value!r}.') from exc


def _append_note(existing: str | None, note: str) -> str:
    return f'{existing}\n{note}' if existing else note


class AppointmentLifecycleManager:
    def __init__(
        self,
        store: SchedulingStore,
        locks: DoctorLocks | None = None,
        clock: Callable = utcnow,
    ):
        self.store = store
        self.locks = locks or booking_locks
        self.clock = clock

    def book_appointment(
        self,
        patient_id: str,
        doctor_id: str,
        appointment_date,
        start_time: str,
        end_time: str,
        appointment_type=AppointmentType.IN_PERSON,
        reason: str | None = None,
    ) -> str:
        patient = self.store.get_user(patient_id)
        if patient is None or patient.role != UserRole.PATIENT:
            logger.warning('Booking rejected: %s is not a patient', patient_id)
            raise AuthorizationError('Only patients can book appointments.')

        try:
            appointment_type = AppointmentType(appointment_type)
        except ValueError as exc:
            raise FormatError(f'Invalid appointment type {appointment_type!r}.') from exc
        reason = _normalize_text(reason, config.MAX_REASON_LENGTH, 'Reason')
        parse_interval(start_time, end_time)

        with self.locks.for_doctor(doctor_id):
            # Availability updates hold the same lock.
            doctor = self.store.get_doctor(doctor_id)
            if doctor is None:
                raise NotFoundError(f'Doctor with ID {doctor_id} not found.')

            day = local_date(appointment_date, doctor.timezone)
            if not is_slot_available(doctor, day, start_time, end_time):
                logger.warning('Booking rejected: %s-%s on %s is outside availability of doctor %s',
                               start_time, end_time, day, doctor_id)
                raise SlotUnavailableError(
                    'The doctor is not available at the requested time. Please choose another time.'
                )

            existing = self.store.list_appointments(
                doctor_id=doctor_id,
                appointment_date=day,
                statuses=ACTIVE_STATUSES,
            )
            conflicts = conflicting_appointments(doctor_id, day, start_time, end_time, existing)
            if conflicts:
                logger.warning('Booking rejected: %s-%s on %s collides with appointment %s',
                               start_time, end_time, day, conflicts[0].id)
                raise BookingConflictError('This time slot is already booked. Please choose another time.')

            now = self.clock()
            appointment = AppointmentRecord(
                id=uuid4().hex,
                patient_id=patient_id,
                doctor_id=doctor_id,
                appointment_date=day,
                start_time=start_time,
                end_time=end_time,
                status=INITIAL_STATUS,
                appointment_type=appointment_type,
                created_at=now,
                updated_at=now,
                reason=reason,
            )
            self.store.append_appointment(
                appointment,
                notifications.booking_notifications(
                    appointment,
                    patient_name=patient.display_name,
                    doctor_name=_doctor_label(doctor),
                    created_at=now,
                ),
            )

        logger.info('Appointment %s booked with doctor %s on %s %s-%s',
                    appointment.id, doctor_id, day, start_time, end_time)
        return appointment.id

    def cancel_appointment(
        self,
        caller_id: str,
        caller_role: UserRole,
        appointment_id: str,
        reason: str | None = None,
    ) -> None:
        caller_role = _role(caller_role)
        reason = _normalize_text(reason, config.MAX_REASON_LENGTH, 'Reason')
        appointment, actors = self._load_for_transition(
            caller_id, caller_role, appointment_id, AppointmentStatus.CANCELED
        )

        if Actor.ADMIN in actors:
            canceled_by = 'Admin'
            recipients = [appointment.patient_id, appointment.doctor_id]
        else:
            caller = self.store.get_user(caller_id)
            canceled_by = caller.display_name if caller else caller_role.value.title()
            if Actor.BOOKING_PATIENT in actors:
                recipients = [appointment.doctor_id]
            else:
                canceled_by = f'Dr. {canceled_by}'
                recipients = [appointment.patient_id]

        note = f'Canceled by {canceled_by}' + (f': {reason}' if reason else '')
        now = self.clock()
        self._commit_transition(
            appointment,
            AppointmentStatus.CANCELED,
            {'notes': _append_note(appointment.notes, note), 'updated_at': now},
            notifications.cancellation_notifications(appointment, recipients, canceled_by, reason, now),
        )

    def confirm_appointment(self, caller_id: str, caller_role: UserRole, appointment_id: str) -> None:
        appointment, _ = self._load_for_transition(
            caller_id, caller_role, appointment_id, AppointmentStatus.CONFIRMED
        )
        now = self.clock()
        self._commit_transition(
            appointment,
            AppointmentStatus.CONFIRMED,
            {'updated_at': now},
            [notifications.confirmation_notification(appointment, self._doctor_name(appointment), now)],
        )

    def complete_appointment(self, doctor_id: str, appointment_id: str, notes: str | None = None) -> None:
        self._close_appointment(
            doctor_id, appointment_id, notes, AppointmentStatus.COMPLETED, notifications.completion_notification
        )

    def mark_no_show(self, doctor_id: str, appointment_id: str, notes: str | None = None) -> None:
        self._close_appointment(
            doctor_id, appointment_id, notes, AppointmentStatus.NO_SHOW, notifications.no_show_notification
        )

    def list_my_appointments(self, caller_id: str, caller_role: UserRole) -> list[AppointmentRecord]:
        caller_role = _role(caller_role)
        if caller_role == UserRole.PATIENT:
            appointments = self.store.list_appointments(patient_id=caller_id)
        elif caller_role == UserRole.DOCTOR:
            appointments = self.store.list_appointments(doctor_id=caller_id)
        else:
            appointments = self.store.list_appointments()

        return sorted(
            appointments,
            key=lambda a: (a.appointment_date, a.start_time),
            reverse=True,
        )

    def get_appointment_details(self, caller_id: str, caller_role: UserRole, appointment_id: str) -> AppointmentRecord:
        appointment = self.store.get_appointment(appointment_id)
        # Appointments the caller may not see are reported as missing.
        if appointment is None or not resolve_actors(caller_id, _role(caller_role), appointment):
            raise NotFoundError('Appointment not found.')
        return appointment

    def _close_appointment(self, doctor_id, appointment_id, notes, target, build_notification) -> None:
        notes = _normalize_text(notes, config.MAX_APPOINTMENT_NOTES_LENGTH, 'Notes')
        appointment, _ = self._load_for_transition(doctor_id, UserRole.DOCTOR, appointment_id, target)

        changes = {'updated_at': self.clock()}
        if notes:
            changes['notes'] = _append_note(appointment.notes, notes)

        self._commit_transition(
            appointment,
            target,
            changes,
            [build_notification(appointment, self._doctor_name(appointment), changes['updated_at'])],
        )

    def _load_for_transition(self, caller_id, caller_role, appointment_id, target):
        appointment = self.store.get_appointment(appointment_id)
        if appointment is None:
            raise NotFoundError('Appointment not found.')

        actors = resolve_actors(caller_id, _role(caller_role), appointment)
        try:
            check_transition(actors, appointment.status, target)
        except (AuthorizationError, InvalidStateError) as exc:
            logger.warning('Transition of appointment %s to %s rejected for %s: %s',
                           appointment_id, target.value, caller_id, exc.message)
            raise

        return appointment, actors

    def _commit_transition(self, appointment, target, changes, outgoing) -> None:
        changes = {'status': target, **changes}
        if not self.store.conditional_update(appointment.id, appointment.version, changes, outgoing):
            current = self.store.get_appointment(appointment.id)
            current_status = current.status if current else appointment.status
            logger.warning('Appointment %s changed concurrently; now %s', appointment.id, current_status.value)
            raise InvalidStateError(
                f'Appointment is already {current_status.value} and cannot be moved to {target.value}.',
                current_status=current_status,
            )

        logger.info('Appointment %s moved from %s to %s', appointment.id, appointment.status.value, target.value)

    def _doctor_name(self, appointment: AppointmentRecord) -> str:
        return _doctor_label(self.store.get_doctor(appointment.doctor_id))
