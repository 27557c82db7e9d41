"""Admin routes for registered students and password recovery requests."""

from typing import List

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_admin
from core.dependencies import UserManagerDep
from schemas.user import PasswordResetInfo, User
from utils.identity_provider import build_recovery_link

router = APIRouter(
    prefix="/api/admin",
    tags=["Student"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("/students", summary="列出已注册学生")
def list_students(user_manager: UserManagerDep) -> dict:
    students: List[User] = [
        User.model_validate(m) for m in user_manager.list_students()
    ]
    return {"success": True, "data": students}


@router.delete("/students/{user_id}", summary="删除学生")
def delete_student(user_id: str, user_manager: UserManagerDep) -> dict:
    """Delete a student together with their invitations and login identity."""
    user_manager.delete_student(user_id)
    return {"success": True, "message": "Student deleted successfully"}


@router.post("/students/{user_id}/password-reset", summary="创建密码重置请求")
def create_password_reset(user_id: str, user_manager: UserManagerDep) -> dict:
    """Create a recovery link for a student.

    Args:
        user_id: Student id.
        user_manager: Injected UserManager instance.

    Returns:
        Dictionary with the reset request and its recovery link.
    """
    student = user_manager.get_user_by_id(user_id)
    # An unknown id is reported the same way as an unknown email
    email = student.email if student else ""
    reset = user_manager.request_password_reset(email)
    return {
        "success": True,
        "reset_request": PasswordResetInfo.model_validate(reset),
        "recovery_link": build_recovery_link(reset.reset_token),
    }


@router.get("/password-resets", summary="列出密码重置请求")
def list_password_resets(user_manager: UserManagerDep) -> dict:
    resets = [
        PasswordResetInfo.model_validate(m)
        for m in user_manager.list_password_resets()
    ]
    return {"success": True, "data": resets}


@router.delete("/password-resets/{reset_id}", summary="删除密码重置请求")
def delete_password_reset(reset_id: str, user_manager: UserManagerDep) -> dict:
    user_manager.delete_password_reset(reset_id)
    return {"success": True, "message": "Password reset request deleted"}
