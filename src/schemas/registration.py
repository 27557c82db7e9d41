"""Registration flow schema definitions.

The registration state is an explicit value held by the client and passed
back on every call; the server never keeps it in a session.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class RegistrationStage(str, Enum):
    UNVERIFIED = "unverified"
    VERIFIED = "verified"
    COMPLETED = "completed"


class InvitationSnapshot(BaseModel):
    """The parts of a verified invitation the register step needs."""

    id: str
    email: str
    invite_code: str
    full_name: str
    student_id: str


class RegistrationState(BaseModel):
    stage: RegistrationStage = Field(default=RegistrationStage.UNVERIFIED)
    invitation: Optional[InvitationSnapshot] = None
    user_id: Optional[str] = Field(
        default=None,
        description="Set once the account has been created.",
    )


class VerifyInvitationRequest(BaseModel):
    email: str = Field(min_length=1)
    invite_code: str = Field(min_length=1)


class CompleteRegistrationRequest(BaseModel):
    state: RegistrationState
    password: str
    confirm_password: str


class RegistrationResponse(BaseModel):
    success: bool = True
    message: str
    state: RegistrationState
