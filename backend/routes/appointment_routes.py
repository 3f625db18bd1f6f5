from datetime import date, datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator

from backend.auth.dependencies import get_current_user, get_lifecycle_manager
from backend.core import config
from backend.scheduling.enums import AppointmentStatus, AppointmentType
from backend.scheduling.lifecycle import AppointmentLifecycleManager
from backend.scheduling.records import UserRecord

router = APIRouter(tags=['appointments'])


def _strip_optional(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


class CreateAppointmentRequest(BaseModel):
    doctor_id: str
    appointment_date: date
    start_time: str
    end_time: str
    appointment_type: AppointmentType = AppointmentType.IN_PERSON
    reason: str | None = None

    @field_validator('doctor_id')
    @classmethod
    def validate_doctor_id(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Doctor ID is required.')
        return normalized

    @field_validator('start_time', 'end_time')
    @classmethod
    def strip_time(cls, value: str) -> str:
        return value.strip()

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        normalized = _strip_optional(value)
        if normalized and len(normalized) > config.MAX_REASON_LENGTH:
            raise ValueError(f'Reason must be {config.MAX_REASON_LENGTH} characters or fewer.')
        return normalized


class CancelAppointmentRequest(BaseModel):
    reason: str | None = None

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        return _strip_optional(value)


class CloseAppointmentRequest(BaseModel):
    notes: str | None = None

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        normalized = _strip_optional(value)
        if normalized and len(normalized) > config.MAX_APPOINTMENT_NOTES_LENGTH:
            raise ValueError(f'Notes must be {config.MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')
        return normalized


class AppointmentResponse(BaseModel):
    id: str
    patient_id: str
    doctor_id: str
    appointment_date: date
    start_time: str
    end_time: str
    status: AppointmentStatus
    appointment_type: AppointmentType
    reason: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AppointmentTypeOptionResponse(BaseModel):
    appointment_type: AppointmentType
    label: str


@router.get('/types', response_model=list[AppointmentTypeOptionResponse])
def list_appointment_types():
    return [
        AppointmentTypeOptionResponse(appointment_type=appointment_type, label=appointment_type.value)
        for appointment_type in AppointmentType
    ]


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    current_user: UserRecord = Depends(get_current_user),
    manager: AppointmentLifecycleManager = Depends(get_lifecycle_manager),
):
    appointment_id = manager.book_appointment(
        patient_id=current_user.id,
        doctor_id=data.doctor_id,
        appointment_date=data.appointment_date,
        start_time=data.start_time,
        end_time=data.end_time,
        appointment_type=data.appointment_type,
        reason=data.reason,
    )
    return AppointmentResponse.model_validate(
        manager.get_appointment_details(current_user.id, current_user.role, appointment_id)
    )


@router.get('', response_model=list[AppointmentResponse])
def list_my_appointments(
    current_user: UserRecord = Depends(get_current_user),
    manager: AppointmentLifecycleManager = Depends(get_lifecycle_manager),
):
    return [
        AppointmentResponse.model_validate(appointment)
        for appointment in manager.list_my_appointments(current_user.id, current_user.role)
    ]


@router.get('/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(
    appointment_id: str,
    current_user: UserRecord = Depends(get_current_user),
    manager: AppointmentLifecycleManager = Depends(get_lifecycle_manager),
):
    return AppointmentResponse.model_validate(
        manager.get_appointment_details(current_user.id, current_user.role, appointment_id)
    )


@router.post('/{appointment_id}/cancel', response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: str,
    data: CancelAppointmentRequest,
    current_user: UserRecord = Depends(get_current_user),
    manager: AppointmentLifecycleManager = Depends(get_lifecycle_manager),
):
    manager.cancel_appointment(current_user.id, current_user.role, appointment_id, data.reason)
    return AppointmentResponse.model_validate(
        manager.get_appointment_details(current_user.id, current_user.role, appointment_id)
    )


@router.post('/{appointment_id}/confirm', response_model=AppointmentResponse)
def confirm_appointment(
    appointment_id: str,
    current_user: UserRecord = Depends(get_current_user),
    manager: AppointmentLifecycleManager = Depends(get_lifecycle_manager),
):
    manager.confirm_appointment(current_user.id, current_user.role, appointment_id)
    return AppointmentResponse.model_validate(
        manager.get_appointment_details(current_user.id, current_user.role, appointment_id)
    )


@router.post('/{appointment_id}/complete', response_model=AppointmentResponse)
def complete_appointment(
    appointment_id: str,
    data: CloseAppointmentRequest,
    current_user: UserRecord = Depends(get_current_user),
    manager: AppointmentLifecycleManager = Depends(get_lifecycle_manager),
):
    manager.complete_appointment(current_user.id, appointment_id, data.notes)
    return AppointmentResponse.model_validate(
        manager.get_appointment_details(current_user.id, current_user.role, appointment_id)
    )


@router.post('/{appointment_id}/no-show', response_model=AppointmentResponse)
def mark_no_show(
    appointment_id: str,
    data: CloseAppointmentRequest,
    current_user: UserRecord = Depends(get_current_user),
    manager: AppointmentLifecycleManager = Depends(get_lifecycle_manager),
):
    manager.mark_no_show(current_user.id, appointment_id, data.notes)
    return AppointmentResponse.model_validate(
        manager.get_appointment_details(current_user.id, current_user.role, appointment_id)
    )
