"""Appointment model definitions."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String
from backend.database import Base


class Appointment(Base):
    """Represents a scheduled consultation between a patient and a doctor."""
    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointments_doctor_date", "doctor_id", "appointment_date"),
    )

    id = Column(String, primary_key=True)
    patient_id = Column(String, ForeignKey("users.id"), index=True)
    doctor_id = Column(String, ForeignKey("users.id"))
    appointment_date = Column(Date)
    start_time = Column(String(5))
    end_time = Column(String(5))
    status = Column(String)
    appointment_type = Column(String)
    reason = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)
