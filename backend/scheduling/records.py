"""Plain records passed between the engine and its store."""

from dataclasses import dataclass, field
from datetime import date, datetime

from pydantic import BaseModel, Field

from backend.scheduling.enums import (
    AppointmentStatus,
    AppointmentType,
    NotificationType,
    UserRole,
    Weekday,
)


class TimeSlot(BaseModel):
    start_time: str
    end_time: str
    is_available: bool = True


class WeeklySchedule(BaseModel):
    monday: list[TimeSlot] = Field(default_factory=list)
    tuesday: list[TimeSlot] = Field(default_factory=list)
    wednesday: list[TimeSlot] = Field(default_factory=list)
    thursday: list[TimeSlot] = Field(default_factory=list)
    friday: list[TimeSlot] = Field(default_factory=list)
    saturday: list[TimeSlot] = Field(default_factory=list)
    sunday: list[TimeSlot] = Field(default_factory=list)

    def slots_for(self, weekday: Weekday) -> list[TimeSlot]:
        return getattr(self, weekday.value)


@dataclass
class UserRecord:
    id: str
    email: str
    role: UserRole
    first_name: str = ''
    last_name: str = ''

    @property
    def display_name(self) -> str:
        name = f'{self.first_name} {self.last_name}'.strip()
        return name or self.email


@dataclass
class DoctorRecord:
    user_id: str
    timezone: str
    weekly_schedule: WeeklySchedule | None = None
    blocked_dates: set[date] = field(default_factory=set)
    specialty: str = ''
    display_name: str = ''


@dataclass
class AppointmentRecord:
    id: str
    patient_id: str
    doctor_id: str
    appointment_date: date
    start_time: str
    end_time: str
    status: AppointmentStatus
    appointment_type: AppointmentType
    created_at: datetime
    updated_at: datetime
    reason: str | None = None
    notes: str | None = None
    version: int = 1


@dataclass
class NotificationRecord:
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    related_id: str | None
    created_at: datetime
    is_read: bool = False
