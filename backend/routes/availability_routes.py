from datetime import date

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, field_validator

from backend.auth.dependencies import get_current_user, get_store
from backend.scheduling.availability import is_slot_available
from backend.scheduling.conflicts import has_appointment_conflict
from backend.scheduling.doctor_availability import get_doctor_availability, set_doctor_availability
from backend.scheduling.enums import ACTIVE_STATUSES
from backend.scheduling.errors import NotFoundError
from backend.scheduling.records import TimeSlot, UserRecord, WeeklySchedule
from backend.scheduling.slots import enumerate_available_slots
from backend.scheduling.store import SchedulingStore
from backend.scheduling.time_utils import local_date

router = APIRouter(tags=['availability'])


class SetAvailabilityRequest(BaseModel):
    weekly_schedule: WeeklySchedule
    blocked_dates: list[str] | None = None
    timezone: str | None = None

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None


class DoctorAvailabilityResponse(BaseModel):
    doctor_id: str
    weekly_schedule: WeeklySchedule
    blocked_dates: list[date]
    timezone: str

    class Config:
        from_attributes = True


class SlotCheckResponse(BaseModel):
    doctor_id: str
    date: date
    start_time: str
    end_time: str
    is_available: bool
    has_conflict: bool
    is_bookable: bool


def _load_doctor(store: SchedulingStore, doctor_id: str):
    doctor = store.get_doctor(doctor_id)
    if doctor is None:
        raise NotFoundError('Doctor not found.')
    return doctor


@router.get('/doctors/{doctor_id}', response_model=DoctorAvailabilityResponse)
def read_doctor_availability(
    doctor_id: str,
    current_user: UserRecord = Depends(get_current_user),
    store: SchedulingStore = Depends(get_store),
):
    return get_doctor_availability(store, doctor_id)


@router.put('/me', response_model=DoctorAvailabilityResponse)
def update_my_availability(
    data: SetAvailabilityRequest,
    current_user: UserRecord = Depends(get_current_user),
    store: SchedulingStore = Depends(get_store),
):
    return set_doctor_availability(
        store,
        caller_id=current_user.id,
        caller_role=current_user.role,
        weekly_schedule=data.weekly_schedule,
        blocked_dates=data.blocked_dates,
        timezone=data.timezone,
    )


@router.get('/doctors/{doctor_id}/slots', response_model=list[TimeSlot])
def list_available_slots(
    doctor_id: str,
    day: str = Query(..., alias='date'),
    current_user: UserRecord = Depends(get_current_user),
    store: SchedulingStore = Depends(get_store),
):
    doctor = _load_doctor(store, doctor_id)
    target_day = local_date(day, doctor.timezone)
    appointments = store.list_appointments(
        doctor_id=doctor_id,
        appointment_date=target_day,
        statuses=ACTIVE_STATUSES,
    )
    return enumerate_available_slots(doctor, target_day, appointments)


@router.get('/doctors/{doctor_id}/check', response_model=SlotCheckResponse)
def check_slot(
    doctor_id: str,
    day: str = Query(..., alias='date'),
    start_time: str = Query(...),
    end_time: str = Query(...),
    current_user: UserRecord = Depends(get_current_user),
    store: SchedulingStore = Depends(get_store),
):
    doctor = _load_doctor(store, doctor_id)
    target_day = local_date(day, doctor.timezone)

    available = is_slot_available(doctor, target_day, start_time, end_time)
    conflict = has_appointment_conflict(
        doctor_id,
        target_day,
        start_time,
        end_time,
        store.list_appointments(doctor_id=doctor_id, appointment_date=target_day, statuses=ACTIVE_STATUSES),
    )

    return SlotCheckResponse(
        doctor_id=doctor_id,
        date=target_day,
        start_time=start_time,
        end_time=end_time,
        is_available=available,
        has_conflict=conflict,
        is_bookable=available and not conflict,
    )
