import logging
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from backend.core import config
from backend.models.appointment import Appointment
from backend.models.doctor import Doctor
from backend.models.notification import Notification
from backend.models.user import User
from backend.scheduling.conflicts import conflicting_appointments
from backend.scheduling.enums import ACTIVE_STATUSES, AppointmentStatus, AppointmentType, NotificationType, UserRole
from backend.scheduling.errors import BookingConflictError, PersistenceError
from backend.scheduling.records import (
    AppointmentRecord,
    DoctorRecord,
    NotificationRecord,
    UserRecord,
    WeeklySchedule,
)
from backend.scheduling.store import SchedulingStore
from backend.scheduling.time_utils import calendar_date, utcnow

logger = logging.getLogger(__name__)


def _to_column_value(value):
    return value.value if hasattr(value, 'value') else value


class SqlSchedulingStore(SchedulingStore):
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _user_to_record(self, u: User) -> UserRecord:
        return UserRecord(
            id=u.id,
            email=u.email,
            role=UserRole(u.role),
            first_name=u.first_name or '',
            last_name=u.last_name or '',
        )

    def _appt_to_record(self, a: Appointment) -> AppointmentRecord:
        return AppointmentRecord(
            id=a.id,
            patient_id=a.patient_id,
            doctor_id=a.doctor_id,
            appointment_date=a.appointment_date,
            start_time=a.start_time,
            end_time=a.end_time,
            status=AppointmentStatus(a.status),
            appointment_type=AppointmentType(a.appointment_type or AppointmentType.IN_PERSON.value),
            created_at=a.created_at,
            updated_at=a.updated_at,
            reason=a.reason,
            notes=a.notes,
            version=a.version or 1,
        )

    def _notification_to_record(self, n: Notification) -> NotificationRecord:
        return NotificationRecord(
            id=n.id,
            user_id=n.user_id,
            type=NotificationType(n.type),
            title=n.title,
            message=n.message,
            related_id=n.related_id,
            created_at=n.created_at,
            is_read=bool(n.is_read),
        )

    def _notification_row(self, n: NotificationRecord) -> Notification:
        return Notification(
            id=n.id,
            user_id=n.user_id,
            type=n.type.value,
            title=n.title,
            message=n.message,
            related_id=n.related_id,
            is_read=n.is_read,
            created_at=n.created_at,
        )

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        db = self.session_factory()
        try:
            u = db.query(User).filter(User.id == user_id).first()
            return self._user_to_record(u) if u else None
        finally:
            db.close()

    def get_doctor(self, doctor_id: str) -> Optional[DoctorRecord]:
        db = self.session_factory()
        try:
            row = (
                db.query(Doctor, User)
                .outerjoin(User, User.id == Doctor.user_id)
                .filter(Doctor.user_id == doctor_id)
                .first()
            )
            if row is None:
                return None
            d, u = row
            return DoctorRecord(
                user_id=d.user_id,
                timezone=d.timezone or config.DEFAULT_DOCTOR_TIMEZONE,
                weekly_schedule=WeeklySchedule.model_validate(d.weekly_schedule) if d.weekly_schedule else None,
                blocked_dates={calendar_date(value) for value in d.blocked_dates or []},
                specialty=d.specialty or '',
                display_name=self._user_to_record(u).display_name if u else '',
            )
        finally:
            db.close()

    def save_doctor_availability(self, doctor_id, weekly_schedule, blocked_dates, timezone_name) -> None:
        db = self.session_factory()
        try:
            doctor = db.query(Doctor).filter(Doctor.user_id == doctor_id).first()
            if doctor is None:
                doctor = Doctor(user_id=doctor_id)
                db.add(doctor)
            doctor.weekly_schedule = weekly_schedule.model_dump()
            doctor.blocked_dates = sorted(day.isoformat() for day in blocked_dates)
            doctor.timezone = timezone_name
            doctor.updated_at = utcnow()
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception('Saving availability failed for doctor %s', doctor_id)
            raise PersistenceError('Could not save availability.') from exc
        finally:
            db.close()

    def list_appointments(
        self,
        doctor_id: Optional[str] = None,
        appointment_date: Optional[date] = None,
        patient_id: Optional[str] = None,
        statuses: Optional[Iterable[AppointmentStatus]] = None,
    ) -> List[AppointmentRecord]:
        db = self.session_factory()
        try:
            query = db.query(Appointment)
            if doctor_id is not None:
                query = query.filter(Appointment.doctor_id == doctor_id)
            if appointment_date is not None:
                query = query.filter(Appointment.appointment_date == appointment_date)
            if patient_id is not None:
                query = query.filter(Appointment.patient_id == patient_id)
            if statuses is not None:
                query = query.filter(Appointment.status.in_([_to_column_value(s) for s in statuses]))
            rows = query.order_by(Appointment.appointment_date.asc(), Appointment.start_time.asc()).all()
            return [self._appt_to_record(r) for r in rows]
        finally:
            db.close()

    def get_appointment(self, appointment_id: str) -> Optional[AppointmentRecord]:
        db = self.session_factory()
        try:
            a = db.query(Appointment).filter(Appointment.id == appointment_id).first()
            return self._appt_to_record(a) if a else None
        finally:
            db.close()

    def append_appointment(self, appointment: AppointmentRecord, notifications: List[NotificationRecord]) -> None:
        db = self.session_factory()
        try:
            # Doctor row lock (ignored by SQLite), then re-check overlaps in this transaction.
            db.query(Doctor).filter(Doctor.user_id == appointment.doctor_id).with_for_update().first()
            booked = (
                db.query(Appointment)
                .filter(
                    Appointment.doctor_id == appointment.doctor_id,
                    Appointment.appointment_date == appointment.appointment_date,
                    Appointment.status.in_([s.value for s in ACTIVE_STATUSES]),
                )
                .all()
            )
            conflicts = conflicting_appointments(
                appointment.doctor_id,
                appointment.appointment_date,
                appointment.start_time,
                appointment.end_time,
                [self._appt_to_record(r) for r in booked],
            )
            if conflicts:
                db.rollback()
                logger.warning('Appointment %s collides with stored appointment %s', appointment.id, conflicts[0].id)
                raise BookingConflictError('This time slot is already booked. Please choose another time.')

            db.add(
                Appointment(
                    id=appointment.id,
                    patient_id=appointment.patient_id,
                    doctor_id=appointment.doctor_id,
                    appointment_date=appointment.appointment_date,
                    start_time=appointment.start_time,
                    end_time=appointment.end_time,
                    status=appointment.status.value,
                    appointment_type=appointment.appointment_type.value,
                    reason=appointment.reason,
                    notes=appointment.notes,
                    version=appointment.version,
                    created_at=appointment.created_at,
                    updated_at=appointment.updated_at,
                )
            )
            db.add_all([self._notification_row(n) for n in notifications])
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception('Persisting appointment %s failed', appointment.id)
            raise PersistenceError('Could not save the appointment.') from exc
        finally:
            db.close()

    def conditional_update(self, appointment_id, expected_version, changes, notifications) -> bool:
        db = self.session_factory()
        try:
            values = {getattr(Appointment, key): _to_column_value(value) for key, value in changes.items()}
            values[Appointment.version] = Appointment.version + 1
            updated = (
                db.query(Appointment)
                .filter(Appointment.id == appointment_id, Appointment.version == expected_version)
                .update(values, synchronize_session=False)
            )
            if updated != 1:
                db.rollback()
                return False

            db.add_all([self._notification_row(n) for n in notifications])
            db.commit()
            return True
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception('Updating appointment %s failed', appointment_id)
            raise PersistenceError('Could not update the appointment.') from exc
        finally:
            db.close()

    def list_notifications(self, user_id: str) -> List[NotificationRecord]:
        db = self.session_factory()
        try:
            rows = (
                db.query(Notification)
                .filter(Notification.user_id == user_id)
                .order_by(Notification.created_at.desc())
                .all()
            )
            return [self._notification_to_record(r) for r in rows]
        finally:
            db.close()

    def get_notification(self, notification_id: str) -> Optional[NotificationRecord]:
        db = self.session_factory()
        try:
            n = db.query(Notification).filter(Notification.id == notification_id).first()
            return self._notification_to_record(n) if n else None
        finally:
            db.close()

    def mark_notification_read(self, notification_id: str, is_read: bool) -> None:
        db = self.session_factory()
        try:
            db.query(Notification).filter(Notification.id == notification_id).update(
                {Notification.is_read: is_read}, synchronize_session=False
            )
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception('Updating notification %s failed', notification_id)
            raise PersistenceError('Could not update the notification.') from exc
        finally:
            db.close()

