"""Quiz routes: admin authoring and student reads."""

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_admin, get_current_user
from core.dependencies import AdminQuizManagerDep, QuizManagerDep
from schemas.quiz import CreateQuizRequest, Quiz

admin_router = APIRouter(
    prefix="/api/admin/quizzes",
    tags=["Quiz"],
    dependencies=[Depends(get_current_admin)],
)
router = APIRouter(
    prefix="/api/quizzes",
    tags=["Quiz"],
    dependencies=[Depends(get_current_user)],
)


@admin_router.get("", summary="列出测验(管理员)")
def list_quizzes_admin(quiz_manager: AdminQuizManagerDep) -> dict:
    return {"quizzes": [Quiz.model_validate(m) for m in quiz_manager.list_quizzes()]}


@admin_router.post("", summary="创建测验")
def create_quiz(req: CreateQuizRequest, quiz_manager: AdminQuizManagerDep) -> dict:
    model = quiz_manager.create_quiz(req.title, req.questions, req.article_ids)
    return {"quiz": Quiz.model_validate(model)}


@router.get("", summary="列出测验")
def list_quizzes(quiz_manager: QuizManagerDep) -> dict:
    return {"quizzes": [Quiz.model_validate(m) for m in quiz_manager.list_quizzes()]}


@router.get("/{quiz_id}", response_model=Quiz, summary="获取测验")
def get_quiz(quiz_id: str, quiz_manager: QuizManagerDep) -> Quiz:
    return Quiz.model_validate(quiz_manager.get_quiz(quiz_id))
