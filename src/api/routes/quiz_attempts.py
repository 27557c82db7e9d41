"""Quiz attempt routes.

Students submit finished attempts; admins read the formatted attempt list
and the per-quiz scoreboard.
"""

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_admin, get_current_user
from core.dependencies import QuizAttemptManagerDep, QuizManagerDep
from schemas.quiz_attempt import (
    AttemptListResponse,
    RecordAttemptRequest,
    RecordAttemptResponse,
    ScoreboardResponse,
)
from schemas.user import User
from utils.quiz_attempt_manager import format_attempt
from utils.scoreboard import summarize

router = APIRouter(prefix="/api/quiz-attempts", tags=["QuizAttempt"])


@router.post("", response_model=RecordAttemptResponse, summary="提交测验结果")
def record_attempt(
    req: RecordAttemptRequest,
    attempt_manager: QuizAttemptManagerDep,
    current_user: User = Depends(get_current_user),
) -> RecordAttemptResponse:
    """Record a finished attempt.

    ``total_questions`` is the raw question count; it is scaled to points
    only when attempts are read back.
    """
    attempt = attempt_manager.record_attempt(
        quiz_id=req.quiz_id,
        user_id=req.user_id or current_user.id,
        student_name=req.student_name,
        student_email=req.student_email,
        score=req.score,
        total_questions=req.total_questions,
        answers=req.answers,
        time_taken=req.time_taken,
    )
    return RecordAttemptResponse(data=attempt)


@router.get("", response_model=AttemptListResponse, summary="列出测验结果")
def list_attempts(
    attempt_manager: QuizAttemptManagerDep,
    quiz_manager: QuizManagerDep,
    current_admin: User = Depends(get_current_admin),
) -> AttemptListResponse:
    titles = quiz_manager.quiz_titles()
    views = [format_attempt(a, titles) for a in attempt_manager.list_attempts()]
    return AttemptListResponse(data=views)


@router.get("/scoreboard", response_model=ScoreboardResponse, summary="测验成绩汇总")
def scoreboard(
    attempt_manager: QuizAttemptManagerDep,
    quiz_manager: QuizManagerDep,
    current_admin: User = Depends(get_current_admin),
) -> ScoreboardResponse:
    titles = quiz_manager.quiz_titles()
    views = [format_attempt(a, titles) for a in attempt_manager.list_attempts()]
    return ScoreboardResponse(data=summarize(views))
