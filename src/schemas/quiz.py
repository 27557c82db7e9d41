"""Quiz schema definitions."""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class CreateQuizRequest(BaseModel):
    title: str = Field(min_length=1)
    questions: List[Dict[str, Any]]
    article_ids: List[str] = Field(default_factory=list)


class Quiz(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    questions: List[Dict[str, Any]] = Field(default_factory=list)
    article_ids: List[str] = Field(default_factory=list)
    created_at: str
