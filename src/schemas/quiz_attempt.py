"""Quiz attempt and scoreboard schema definitions."""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


def _option_index(letter: Any) -> int:
    """Convert an option letter ("A", "B", ...) to a zero-based index."""
    if isinstance(letter, int):
        return letter
    if not letter:
        return 0
    return ord(str(letter).strip()[:1].upper()) - ord("A")


class AnswerRecord(BaseModel):
    """One answered question inside an attempt."""

    question: str = ""
    selected_option_index: int = 0
    correct_option_index: int = 0
    is_correct: bool = False

    @model_validator(mode="before")
    @classmethod
    def accept_letter_answers(cls, data: Any) -> Any:
        """
        quiz clients submit {question, userAnswer: "B", correctAnswer: "C", isCorrect};
        map that shape onto option indices.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "selected_option_index" not in data and "userAnswer" in data:
            data["selected_option_index"] = _option_index(data.pop("userAnswer"))
        if "correct_option_index" not in data and "correctAnswer" in data:
            data["correct_option_index"] = _option_index(data.pop("correctAnswer"))
        if "is_correct" not in data and "isCorrect" in data:
            data["is_correct"] = bool(data.pop("isCorrect"))
        return data


class RecordAttemptRequest(BaseModel):
    quiz_id: Optional[str] = None
    user_id: Optional[str] = None
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    score: float = Field(allow_inf_nan=False)
    total_questions: int = Field(ge=0)
    answers: List[AnswerRecord] = Field(default_factory=list)
    time_taken: int = Field(default=0, ge=0)


class QuizAttempt(BaseModel):
    """A stored attempt exactly as persisted."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    quiz_id: Optional[str] = None
    user_id: Optional[str] = None
    student_name: str
    student_email: str
    score: int
    total_questions: int
    time_taken: int = 0
    answers: List[AnswerRecord] = Field(default_factory=list)
    completed_at: str


class AttemptView(BaseModel):
    """An attempt as reported to admins.

    ``total_questions`` holds total possible points (raw question count times
    points per question) and ``percentage`` is computed against it.
    """

    id: str = ""
    quiz_id: str
    quiz_title: str = ""
    student_name: str = ""
    student_email: str = ""
    score: int
    total_questions: int
    percentage: int = 0
    answers: List[AnswerRecord] = Field(default_factory=list)
    time_taken: int = 0
    attempted_at: Optional[str] = None


class QuizSummary(BaseModel):
    quiz_id: str
    quiz_title: str
    total_attempts: int
    average_score: float
    highest_score: int
    lowest_score: int
    attempts: List[AttemptView] = Field(default_factory=list)


class AttemptListResponse(BaseModel):
    success: bool = True
    data: List[AttemptView]


class ScoreboardResponse(BaseModel):
    success: bool = True
    data: List[QuizSummary]


class RecordAttemptResponse(BaseModel):
    success: bool = True
    message: str = "Quiz attempt recorded successfully"
    data: QuizAttempt
