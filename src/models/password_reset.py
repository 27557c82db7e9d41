from sqlalchemy import Column, String, ForeignKey
from .base import Base


class PasswordResetModel(Base):
    __tablename__ = "password_resets"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(
        String,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=True,
    )
    email = Column(String, index=True, nullable=False)
    reset_token = Column(String, unique=True, index=True, nullable=False)
    expires_at = Column(String, index=True, nullable=False)
    used_at = Column(String, nullable=True)
    created_at = Column(String, nullable=False)
