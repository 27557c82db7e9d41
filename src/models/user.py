"""User database model.

This module defines the User database model using SQLAlchemy.
"""

from sqlalchemy import Column, String
from .base import Base


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    auth_id = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)  # lower-cased
    full_name = Column(String, nullable=False)
    role = Column(String, nullable=False)  # 'admin' or 'student'
    student_id = Column(String, nullable=True)
    created_at = Column(String, nullable=False)  # ISO format string
