from datetime import date, datetime

import pytest

from backend.models.doctor import Doctor
from backend.scheduling.enums import AppointmentStatus, AppointmentType
from backend.scheduling.errors import BookingConflictError, SlotUnavailableError
from backend.scheduling.lifecycle import AppointmentLifecycleManager
from backend.scheduling.locks import DoctorLocks
from backend.scheduling.records import AppointmentRecord
from backend.scheduling.sql_store import SqlSchedulingStore

from tests.backend.conftest import BLOCKED_MONDAY, DOCTOR_ID, MONDAY, OTHER_PATIENT_ID, PATIENT_ID


def _record(appointment_id: str, start: str, end: str, patient_id=PATIENT_ID) -> AppointmentRecord:
    return AppointmentRecord(
        id=appointment_id,
        patient_id=patient_id,
        doctor_id=DOCTOR_ID,
        appointment_date=MONDAY,
        start_time=start,
        end_time=end,
        status=AppointmentStatus.PENDING,
        appointment_type=AppointmentType.IN_PERSON,
        created_at=datetime(2025, 6, 1),
        updated_at=datetime(2025, 6, 1),
    )


def test_get_doctor_reads_timestamp_blocked_dates(store, session_factory) -> None:
    db = session_factory()
    try:
        doctor = db.query(Doctor).filter(Doctor.user_id == DOCTOR_ID).first()
        doctor.blocked_dates = ['2025-06-09T00:00:00Z', '2025-12-25']
        db.commit()
    finally:
        db.close()

    doctor = store.get_doctor(DOCTOR_ID)

    assert doctor.blocked_dates == {BLOCKED_MONDAY, date(2025, 12, 25)}


def test_blocked_timestamp_entry_rejects_booking(manager, session_factory) -> None:
    db = session_factory()
    try:
        doctor = db.query(Doctor).filter(Doctor.user_id == DOCTOR_ID).first()
        doctor.blocked_dates = ['2025-06-16T00:00:00Z']
        db.commit()
    finally:
        db.close()

    with pytest.raises(SlotUnavailableError):
        manager.book_appointment(PATIENT_ID, DOCTOR_ID, MONDAY, '09:00', '09:30')


def test_append_appointment_rejects_overlap_inside_transaction(store) -> None:
    store.append_appointment(_record('first', '10:00', '10:30'), [])

    with pytest.raises(BookingConflictError):
        store.append_appointment(_record('second', '10:15', '10:45', OTHER_PATIENT_ID), [])

    store.append_appointment(_record('adjacent', '10:30', '11:00', OTHER_PATIENT_ID), [])
    assert [a.id for a in store.list_appointments(doctor_id=DOCTOR_ID)] == ['first', 'adjacent']


class StaleReadStore(SqlSchedulingStore):
    """Reports an empty calendar, like a worker that has not seen a fresh booking."""

    def list_appointments(self, *args, **kwargs):
        return []


def test_booking_from_another_worker_is_still_rejected(manager, session_factory, store) -> None:
    manager.book_appointment(PATIENT_ID, DOCTOR_ID, MONDAY, '10:00', '10:30')
    other_worker = AppointmentLifecycleManager(StaleReadStore(session_factory), locks=DoctorLocks())

    with pytest.raises(BookingConflictError):
        other_worker.book_appointment(OTHER_PATIENT_ID, DOCTOR_ID, MONDAY, '10:15', '10:45')

    assert len(store.list_appointments(doctor_id=DOCTOR_ID)) == 1
    assert store.list_notifications(OTHER_PATIENT_ID) == []
