"""Quiz attempt database model.

Rows are written once when a student submits a quiz and never updated.
"""

from sqlalchemy import JSON, Column, Integer, String
from .base import Base


class QuizAttemptModel(Base):
    """Quiz attempt database model."""

    __tablename__ = "quiz_attempts"

    id = Column(String, primary_key=True, index=True)
    quiz_id = Column(String, index=True, nullable=True)  # None for practice
    user_id = Column(String, index=True, nullable=True)
    student_name = Column(String, nullable=False)
    student_email = Column(String, nullable=False)
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)  # raw question count
    time_taken = Column(Integer, nullable=False, default=0)  # seconds
    answers = Column(JSON, nullable=False, default=list)
    completed_at = Column(String, nullable=False)  # ISO format string
