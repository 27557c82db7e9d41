"""Student registration routes.

The client keeps the registration state returned by ``/verify`` and sends it
back to ``/complete``.
"""

from fastapi import APIRouter

from core.dependencies import RegistrationFlowDep
from schemas.registration import (
    CompleteRegistrationRequest,
    RegistrationResponse,
    VerifyInvitationRequest,
)

router = APIRouter(prefix="/api/registration", tags=["Registration"])


@router.post("/verify", response_model=RegistrationResponse, summary="验证邀请码")
def verify_invitation(
    req: VerifyInvitationRequest,
    flow: RegistrationFlowDep,
) -> RegistrationResponse:
    state = flow.verify(req.email, req.invite_code)
    return RegistrationResponse(
        message=f"Invitation verified. Welcome {state.invitation.full_name}!",
        state=state,
    )


@router.post("/complete", response_model=RegistrationResponse, summary="完成注册")
def complete_registration(
    req: CompleteRegistrationRequest,
    flow: RegistrationFlowDep,
) -> RegistrationResponse:
    """Create the account for a verified invitation.

    Args:
        req: Verified state plus password and confirmation.
        flow: Injected RegistrationFlow.

    Returns:
        RegistrationResponse in the completed stage.
    """
    state = flow.register(req.state, req.password, req.confirm_password)
    return RegistrationResponse(
        message="Your account has been created. You can now log in.",
        state=state,
    )
