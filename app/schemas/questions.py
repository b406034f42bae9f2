"""Question catalogue schemas"""

from datetime import datetime
from typing import Any, Dict, List

from pydantic import Field

from app.models.quiz_result import Difficulty
from app.schemas.common import CamelModel, DifficultyField


class SubjectResponse(CamelModel):
    name: str
    categories: List[str]


class SubjectListResponse(CamelModel):
    subjects: List[SubjectResponse]
    total_subjects: int
    total_categories: int


class SubjectCategoriesResponse(CamelModel):
    subject: str
    categories: List[str]


class SubjectValidationRequest(CamelModel):
    subject: str = Field(..., min_length=1)
    sub_category: str = Field(..., min_length=1)


class SubjectValidationResponse(CamelModel):
    is_valid: bool
    subject: str
    sub_category: str


class SampleQuestionsRequest(CamelModel):
    """Ad-hoc question set, generated fresh on every call"""
    subject: str = Field(..., min_length=1)
    sub_category: str = Field(..., min_length=1)
    difficulty: DifficultyField
    count: int = Field(default=5, ge=1, le=20)


class SampleQuestionsMeta(CamelModel):
    subject: str
    sub_category: str
    difficulty: Difficulty
    count: int
    generated_at: datetime


class SampleQuestionsResponse(CamelModel):
    questions: List[Dict[str, Any]]
    meta: SampleQuestionsMeta
