"""Student invitation database model.

This module defines the StudentInvitation database model using SQLAlchemy.
"""

from sqlalchemy import Boolean, Column, String
from .base import Base


class StudentInvitationModel(Base):
    """Student invitation database model."""

    __tablename__ = "student_invitations"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, index=True, nullable=False)  # lower-cased
    # Unique index is the authoritative collision check for generated codes
    invite_code = Column(String, unique=True, index=True, nullable=False)
    student_id = Column(String, index=True, nullable=False)
    full_name = Column(String, nullable=False)
    is_registered = Column(Boolean, nullable=False, default=False)
    is_password_reset = Column(Boolean, nullable=False, default=False)
    expires_at = Column(String, nullable=True)  # ISO format string
    created_at = Column(String, nullable=False)  # ISO format string
    updated_at = Column(String, nullable=True)  # ISO format string
