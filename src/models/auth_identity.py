"""Identity database model used by the local identity provider."""

from sqlalchemy import JSON, Boolean, Column, String
from .base import Base


class AuthIdentityModel(Base):
    """Login identity: email plus bcrypt password hash."""

    __tablename__ = "auth_identities"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    email_confirmed = Column(Boolean, nullable=False, default=False)
    user_metadata = Column(JSON, nullable=False, default=dict)
    created_at = Column(String, nullable=False)
