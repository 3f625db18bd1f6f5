from datetime import date, datetime

import pytest

from backend.scheduling.enums import AppointmentStatus, AppointmentType
from backend.scheduling.errors import FormatError
from backend.scheduling.records import AppointmentRecord, DoctorRecord, TimeSlot, WeeklySchedule
from backend.scheduling.slots import enumerate_available_slots, iter_available_slots

MONDAY = date(2025, 6, 16)
BLOCKED_MONDAY = date(2025, 6, 9)


@pytest.fixture
def doctor() -> DoctorRecord:
    return DoctorRecord(
        user_id='doc-1',
        timezone='UTC',
        weekly_schedule=WeeklySchedule(
            monday=[
                TimeSlot(start_time='14:00', end_time='15:00'),
                TimeSlot(start_time='09:00', end_time='10:45'),
                TimeSlot(start_time='12:00', end_time='13:00', is_available=False),
            ],
        ),
        blocked_dates={BLOCKED_MONDAY},
    )


def _booked(start: str, end: str, status=AppointmentStatus.CONFIRMED) -> AppointmentRecord:
    return AppointmentRecord(
        id=f'appt-{start}',
        patient_id='pat-1',
        doctor_id='doc-1',
        appointment_date=MONDAY,
        start_time=start,
        end_time=end,
        status=status,
        appointment_type=AppointmentType.VIDEO,
        created_at=datetime(2025, 6, 1),
        updated_at=datetime(2025, 6, 1),
    )


def _starts(slots) -> list[str]:
    return [slot.start_time for slot in slots]


def test_slots_are_cut_from_available_windows_in_order(doctor: DoctorRecord) -> None:
    slots = enumerate_available_slots(doctor, MONDAY, [], slot_minutes=30)

    # 10:30-10:45 is shorter than one slot and is not offered.
    assert _starts(slots) == ['09:00', '09:30', '10:00', '14:00', '14:30']
    assert slots[0] == TimeSlot(start_time='09:00', end_time='09:30', is_available=True)


def test_blocked_date_yields_no_slots(doctor: DoctorRecord) -> None:
    assert enumerate_available_slots(doctor, BLOCKED_MONDAY, [], slot_minutes=30) == []


def test_booked_intervals_are_removed(doctor: DoctorRecord) -> None:
    existing = [_booked('09:15', '09:45'), _booked('14:00', '14:30', status=AppointmentStatus.CANCELED)]

    slots = enumerate_available_slots(doctor, MONDAY, existing, slot_minutes=30)

    assert _starts(slots) == ['10:00', '14:00', '14:30']


def test_no_returned_slot_overlaps_an_active_appointment(doctor: DoctorRecord) -> None:
    existing = [_booked('09:10', '09:20'), _booked('14:45', '15:00', status=AppointmentStatus.PENDING)]

    for slot in enumerate_available_slots(doctor, MONDAY, existing, slot_minutes=15):
        assert not (slot.start_time < '09:20' and '09:10' < slot.end_time)
        assert not (slot.start_time < '15:00' and '14:45' < slot.end_time)


def test_enumeration_is_restartable(doctor: DoctorRecord) -> None:
    existing = (appointment for appointment in [_booked('09:00', '09:30')])

    first = list(iter_available_slots(doctor, MONDAY, existing, slot_minutes=30))
    second = enumerate_available_slots(doctor, MONDAY, [_booked('09:00', '09:30')], slot_minutes=30)

    assert first == second


def test_default_slot_width_comes_from_config(doctor: DoctorRecord, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('backend.core.config.SLOT_DURATION_MINUTES', 60)

    assert _starts(enumerate_available_slots(doctor, MONDAY, [])) == ['09:00', '14:00']


def test_non_positive_slot_width_is_rejected(doctor: DoctorRecord) -> None:
    with pytest.raises(FormatError):
        enumerate_available_slots(doctor, MONDAY, [], slot_minutes=-15)


def test_booking_the_first_slot_removes_it_from_enumeration(manager, store) -> None:
    seeded = store.get_doctor('doc-1')
    before = enumerate_available_slots(seeded, MONDAY, store.list_appointments(doctor_id='doc-1'))

    manager.book_appointment('pat-1', 'doc-1', MONDAY, before[0].start_time, before[0].end_time)
    after = enumerate_available_slots(seeded, MONDAY, store.list_appointments(doctor_id='doc-1'))

    assert before[0] not in after
    assert after == before[1:]
