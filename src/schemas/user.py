"""User and authentication schema definitions."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """A registered user (or the configured administrator)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str
    role: str  # 'admin' or 'student'
    student_id: Optional[str] = None
    created_at: Optional[str] = None


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginResponse(BaseModel):
    success: bool = True
    user: User
    token: str


class CurrentUserResponse(BaseModel):
    user: User


class PasswordResetInfo(BaseModel):
    """A pending or used password recovery request."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    email: str
    reset_token: str
    expires_at: str
    used_at: Optional[str] = None
    created_at: str


class CompletePasswordResetRequest(BaseModel):
    token: str = Field(min_length=1)
    password: str
    confirm_password: str
