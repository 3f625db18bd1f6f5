"""Notification model definitions."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from backend.database import Base


class Notification(Base):
    """A one-way inbox entry addressed to a single user."""
    __tablename__ = "notifications"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), index=True)
    type = Column(String)
    title = Column(String)
    message = Column(String)
    related_id = Column(String, nullable=True)
    is_read = Column(Boolean, default=False)
    created_at = Column(DateTime)
