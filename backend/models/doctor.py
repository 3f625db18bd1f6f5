"""Doctor model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, JSON, String
from backend.database import Base


class Doctor(Base):
    """Doctor profile carrying the weekly template and blocked dates."""
    __tablename__ = "doctors"

    user_id = Column(String, ForeignKey("users.id"), primary_key=True)
    specialty = Column(String, default="")
    timezone = Column(String)
    weekly_schedule = Column(JSON, nullable=True)
    blocked_dates = Column(JSON, default=list)
    updated_at = Column(DateTime)
