"""Quiz management utilities."""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytz
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError, ValidationError
from models.quiz import QuizModel

logger = logging.getLogger(__name__)


class QuizManager:
    """Manages quiz definitions."""

    def __init__(self, db: Session):
        self.db = db

    def create_quiz(
        self,
        title: str,
        questions: List[Dict[str, Any]],
        article_ids: Optional[List[str]] = None,
    ) -> QuizModel:
        if not title or not title.strip():
            raise ValidationError("Quiz title is required", field="title")
        if not isinstance(questions, list) or not questions:
            raise ValidationError("At least one question is required", field="questions")

        model = QuizModel(
            id=str(uuid.uuid4()),
            title=title.strip(),
            questions=questions,
            article_ids=list(article_ids or []),
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Created quiz %s with %d questions", model.id, len(questions))
        return model

    def get_quiz(self, quiz_id: str) -> QuizModel:
        model = self.db.query(QuizModel).filter(QuizModel.id == quiz_id).first()
        if not model:
            raise NotFoundError("Quiz not found")
        return model

    def list_quizzes(self) -> List[QuizModel]:
        return self.db.query(QuizModel).order_by(QuizModel.created_at.desc()).all()

    def quiz_titles(self) -> Dict[str, str]:
        """Map quiz id to title."""
        return dict(self.db.query(QuizModel.id, QuizModel.title).all())
