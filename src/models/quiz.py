"""Quiz database model."""

from sqlalchemy import JSON, Column, String
from .base import Base


class QuizModel(Base):
    """Quiz database model."""

    __tablename__ = "quizzes"

    id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False)
    questions = Column(JSON, nullable=False, default=list)
    article_ids = Column(JSON, nullable=False, default=list)
    created_at = Column(String, nullable=False)  # ISO format string
