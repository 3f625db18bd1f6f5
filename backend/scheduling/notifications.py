"""Build the inbox entries emitted by appointment transitions."""

from uuid import uuid4

from backend.scheduling.enums import NotificationType
from backend.scheduling.records import AppointmentRecord, NotificationRecord


def build_notification(
    user_id: str,
    notification_type: NotificationType,
    title: str,
    message: str,
    appointment: AppointmentRecord,
    created_at,
) -> NotificationRecord:
    return NotificationRecord(
        id=uuid4().hex,
        user_id=user_id,
        type=notification_type,
        title=title,
        message=message,
        related_id=appointment.id,
        created_at=created_at,
    )


def _when(appointment: AppointmentRecord) -> str:
    return f'{appointment.appointment_date.isoformat()} at {appointment.start_time}'


def _with_reason(reason: str | None) -> str:
    return f' Reason: {reason}' if reason else ''


def booking_notifications(appointment, patient_name, doctor_name, created_at) -> list[NotificationRecord]:
    return [
        build_notification(
            appointment.doctor_id,
            NotificationType.APPOINTMENT_BOOKED,
            'New Appointment',
            f'{patient_name} has booked an appointment on {_when(appointment)}.',
            appointment,
            created_at,
        ),
        build_notification(
            appointment.patient_id,
            NotificationType.APPOINTMENT_BOOKED,
            'Appointment Requested',
            f'Your appointment with {doctor_name} on {_when(appointment)} is pending confirmation.',
            appointment,
            created_at,
        ),
    ]


def confirmation_notification(appointment, doctor_name, created_at) -> NotificationRecord:
    return build_notification(
        appointment.patient_id,
        NotificationType.APPOINTMENT_CONFIRMED,
        'Appointment Confirmed',
        f'Your appointment with {doctor_name} on {_when(appointment)} has been confirmed.',
        appointment,
        created_at,
    )


def cancellation_notifications(appointment, recipients, canceled_by, reason, created_at) -> list[NotificationRecord]:
    return [
        build_notification(
            user_id,
            NotificationType.APPOINTMENT_CANCELED,
            'Appointment Canceled',
            f'{canceled_by} has canceled the appointment scheduled for {_when(appointment)}.{_with_reason(reason)}',
            appointment,
            created_at,
        )
        for user_id in recipients
    ]


def completion_notification(appointment, doctor_name, created_at) -> NotificationRecord:
    return build_notification(
        appointment.patient_id,
        NotificationType.APPOINTMENT_COMPLETED,
        'Appointment Completed',
        f'Your appointment with {doctor_name} on {_when(appointment)} has been marked as completed.',
        appointment,
        created_at,
    )


def no_show_notification(appointment, doctor_name, created_at) -> NotificationRecord:
    return build_notification(
        appointment.patient_id,
        NotificationType.APPOINTMENT_NO_SHOW,
        'Missed Appointment',
        f'You were marked as absent from your appointment with {doctor_name} on {_when(appointment)}.',
        appointment,
        created_at,
    )
