"""Admin routes for student invitations."""

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_admin
from core.dependencies import InvitationManagerDep
from schemas.invitation import (
    CreateInvitationRequest,
    Invitation,
    InvitationListResponse,
    InvitationResponse,
)

router = APIRouter(
    prefix="/api/admin/invitations",
    tags=["Invitation"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("", response_model=InvitationListResponse, summary="列出学生邀请")
def list_invitations(invitation_manager: InvitationManagerDep) -> InvitationListResponse:
    models = invitation_manager.list_invitations()
    return InvitationListResponse(data=[Invitation.model_validate(m) for m in models])


@router.post("", response_model=InvitationResponse, summary="创建学生邀请")
def create_invitation(
    req: CreateInvitationRequest,
    invitation_manager: InvitationManagerDep,
) -> InvitationResponse:
    """Invite a student; the response carries the six-digit invite code.

    Args:
        req: Email, full name and student id.
        invitation_manager: Injected InvitationManager instance.

    Returns:
        InvitationResponse with the code and the stored invitation.
    """
    model = invitation_manager.create_invitation(
        email=req.email,
        full_name=req.full_name,
        student_id=req.student_id,
    )
    return InvitationResponse(
        invite_code=model.invite_code,
        invitation=Invitation.model_validate(model),
    )


@router.post("/cleanup", summary="清理已使用或过期的邀请")
def cleanup_invitations(invitation_manager: InvitationManagerDep) -> dict:
    deleted = invitation_manager.cleanup_invitations()
    return {"success": True, "deleted": deleted}


@router.post(
    "/{invitation_id}/regenerate",
    response_model=InvitationResponse,
    summary="重新生成邀请码",
)
def regenerate_invite_code(
    invitation_id: str,
    invitation_manager: InvitationManagerDep,
) -> InvitationResponse:
    model = invitation_manager.regenerate_invite_code(invitation_id)
    return InvitationResponse(
        invite_code=model.invite_code,
        invitation=Invitation.model_validate(model),
    )


@router.delete("/{invitation_id}", summary="删除学生邀请")
def delete_invitation(
    invitation_id: str,
    invitation_manager: InvitationManagerDep,
) -> dict:
    invitation_manager.delete_invitation(invitation_id)
    return {"success": True, "message": "Invitation deleted successfully"}
