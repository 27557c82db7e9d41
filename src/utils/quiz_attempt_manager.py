"""Quiz attempt recording and reporting.

Attempts are append-only: there is a create path and read paths, no update.
"""

import logging
import math
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Sequence

import pytz
from sqlalchemy.orm import Session

from config import (
    DEFAULT_STUDENT_EMAIL,
    DEFAULT_STUDENT_NAME,
    POINTS_PER_QUESTION,
    PRACTICE_QUIZ_ID,
    PRACTICE_QUIZ_TITLE,
)
from core.exceptions import ValidationError
from models.quiz_attempt import QuizAttemptModel
from schemas.quiz_attempt import AnswerRecord, AttemptView, QuizAttempt
from utils.scoreboard import attempt_percentage, round_half_up

logger = logging.getLogger(__name__)


class QuizAttemptManager:
    """Persists finished quiz attempts and formats them for review."""

    def __init__(self, db: Session):
        """Initialize QuizAttemptManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def record_attempt(
        self,
        quiz_id: Optional[str],
        user_id: Optional[str],
        student_name: Optional[str],
        student_email: Optional[str],
        score: float,
        total_questions: int,
        answers: Sequence[AnswerRecord],
        time_taken: int = 0,
    ) -> QuizAttempt:
        """Store one finished attempt.

        The score is rounded to an integer; it is not checked against the
        number of questions.

        Args:
            quiz_id: Quiz id, or None for a practice attempt.
            user_id: Id of the student.
            student_name: Student display name.
            student_email: Student email.
            score: Points scored, possibly fractional.
            total_questions: Number of questions in the attempt.
            answers: Per-question answers in order.
            time_taken: Seconds spent.

        Returns:
            The stored QuizAttempt.

        Raises:
            ValidationError: If the score is not a finite number.
        """
        if not math.isfinite(score):
            raise ValidationError("Score must be a finite number", field="score")
        model = QuizAttemptModel(
            id=str(uuid.uuid4()),
            quiz_id=quiz_id,
            user_id=user_id,
            student_name=student_name or DEFAULT_STUDENT_NAME,
            student_email=student_email or DEFAULT_STUDENT_EMAIL,
            score=round_half_up(score),
            total_questions=total_questions,
            time_taken=time_taken or 0,
            answers=[a.model_dump() for a in answers],
            completed_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info(
            "Recorded attempt %s for quiz %s: %d/%d",
            model.id, quiz_id, model.score, total_questions,
        )
        return QuizAttempt.model_validate(model)

    def list_attempts(self) -> List[QuizAttempt]:
        """All attempts, most recent first."""
        models = (
            self.db.query(QuizAttemptModel)
            .order_by(QuizAttemptModel.completed_at.desc())
            .all()
        )
        return [QuizAttempt.model_validate(m) for m in models]


def format_attempt(
    attempt: QuizAttempt, quiz_titles: Optional[Dict[str, str]] = None
) -> AttemptView:
    """Build the admin view of an attempt.

    ``total_questions`` is reported as total possible points
    (questions × POINTS_PER_QUESTION) and the percentage uses that total.
    """
    total_points = attempt.total_questions * POINTS_PER_QUESTION
    quiz_id = attempt.quiz_id or PRACTICE_QUIZ_ID
    title = (quiz_titles or {}).get(quiz_id, PRACTICE_QUIZ_TITLE)
    return AttemptView(
        id=attempt.id,
        quiz_id=quiz_id,
        quiz_title=title,
        student_name=attempt.student_name,
        student_email=attempt.student_email,
        score=attempt.score,
        total_questions=total_points,
        percentage=attempt_percentage(attempt.score, total_points),
        answers=[
            a if a.question else a.model_copy(update={"question": f"Question {i + 1}"})
            for i, a in enumerate(attempt.answers)
        ],
        time_taken=attempt.time_taken,
        attempted_at=attempt.completed_at,
    )
