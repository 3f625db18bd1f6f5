from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, List, Optional

from backend.scheduling.enums import AppointmentStatus
from backend.scheduling.records import (
    AppointmentRecord,
    DoctorRecord,
    NotificationRecord,
    UserRecord,
    WeeklySchedule,
)


class SchedulingStore(ABC):
    """Persistence collaborator of the scheduling engine.

    Writes that belong to one operation (an appointment and its notifications)
    are handed over together and must be stored atomically.
    """

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    def get_doctor(self, doctor_id: str) -> Optional[DoctorRecord]:
        ...

    @abstractmethod
    def save_doctor_availability(
        self,
        doctor_id: str,
        weekly_schedule: WeeklySchedule,
        blocked_dates: set[date],
        timezone_name: str,
    ) -> None:
        ...

    @abstractmethod
    def list_appointments(
        self,
        doctor_id: Optional[str] = None,
        appointment_date: Optional[date] = None,
        patient_id: Optional[str] = None,
        statuses: Optional[Iterable[AppointmentStatus]] = None,
    ) -> List[AppointmentRecord]:
        ...

    @abstractmethod
    def get_appointment(self, appointment_id: str) -> Optional[AppointmentRecord]:
        ...

    @abstractmethod
    def append_appointment(self, appointment: AppointmentRecord, notifications: List[NotificationRecord]) -> None:
        """Store ``appointment`` with its notifications in one transaction.

        Raises ``BookingConflictError``, storing nothing, when an active
        appointment of the same doctor already overlaps it.
        """

    @abstractmethod
    def conditional_update(
        self,
        appointment_id: str,
        expected_version: int,
        changes: dict,
        notifications: List[NotificationRecord],
    ) -> bool:
        """Apply ``changes`` only if the stored version still equals ``expected_version``.

        Returns False, writing nothing, when another write got there first.
        """

    @abstractmethod
    def list_notifications(self, user_id: str) -> List[NotificationRecord]:
        ...

    @abstractmethod
    def get_notification(self, notification_id: str) -> Optional[NotificationRecord]:
        ...

    @abstractmethod
    def mark_notification_read(self, notification_id: str, is_read: bool) -> None:
        ...
