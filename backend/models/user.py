"""User model definitions."""

from sqlalchemy import Column, String
from backend.database import Base


class User(Base):
    """Represents an application user from the identity store."""
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True)
    role = Column(String)  # PATIENT/DOCTOR/ADMIN
    first_name = Column(String, default="")
    last_name = Column(String, default="")
