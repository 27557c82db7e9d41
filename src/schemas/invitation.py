"""Student invitation schema definitions."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class CreateInvitationRequest(BaseModel):
    email: EmailStr
    full_name: str = Field(min_length=1, max_length=200)
    student_id: str = Field(min_length=1, max_length=100)


class Invitation(BaseModel):
    """Invitation allowing one email to self-register as a student."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    invite_code: str
    student_id: str
    full_name: str
    is_registered: bool = False
    is_password_reset: bool = False
    expires_at: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None


class InvitationResponse(BaseModel):
    success: bool = True
    invite_code: str
    invitation: Invitation


class InvitationListResponse(BaseModel):
    success: bool = True
    data: List[Invitation]
