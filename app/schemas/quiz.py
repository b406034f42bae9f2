"""
Quiz schemas for QuizBoard
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator, model_validator

from app.models.quiz_result import Difficulty
from app.schemas.common import CamelModel, DifficultyField, PaginationInfo
from app.services.ranking import round_half_up
from app.stores.base import QuizResult, QuizResultInput


class QuizSubmission(CamelModel):
    """Completed quiz as sent by the client"""
    username: str = Field(..., min_length=1, max_length=50)
    subject: str = Field(..., min_length=1, max_length=100)
    sub_category: str = Field(..., min_length=1, max_length=100)
    difficulty: DifficultyField
    total_questions: int = Field(..., ge=1)
    correct_answers: int = Field(..., ge=0)
    score: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0, le=100)
    time_taken: Optional[int] = Field(default=None, ge=0)
    questions_data: Optional[List[Dict[str, Any]]] = None

    @field_validator("username", "subject", "sub_category", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("percentage")
    @classmethod
    def two_decimals(cls, value: float) -> float:
        return float(round_half_up(value, 2))

    @model_validator(mode="after")
    def check_answer_counts(self) -> "QuizSubmission":
        if self.correct_answers > self.total_questions:
            raise ValueError("correctAnswers cannot exceed totalQuestions")
        return self

    def to_input(self) -> QuizResultInput:
        return QuizResultInput(
            username=self.username,
            subject=self.subject,
            sub_category=self.sub_category,
            difficulty=self.difficulty,
            total_questions=self.total_questions,
            correct_answers=self.correct_answers,
            score=self.score,
            percentage=self.percentage,
            time_taken=self.time_taken,
            questions_data=self.questions_data,
        )


class QuizResultResponse(CamelModel):
    """Stored quiz result"""
    id: str
    username: str
    subject: str
    sub_category: str
    difficulty: Difficulty
    total_questions: int
    correct_answers: int
    score: int
    percentage: float
    time_taken: Optional[int] = None
    questions_data: Optional[List[Dict[str, Any]]] = None
    completed_at: datetime

    @classmethod
    def from_result(cls, result: QuizResult) -> "QuizResultResponse":
        return cls(
            id=result.id,
            username=result.username,
            subject=result.subject,
            sub_category=result.sub_category,
            difficulty=result.difficulty,
            total_questions=result.total_questions,
            correct_answers=result.correct_answers,
            score=result.score,
            percentage=result.percentage,
            time_taken=result.time_taken,
            questions_data=result.questions_data,
            completed_at=result.completed_at,
        )


class UserStatsResponse(CamelModel):
    total_quizzes: int
    average_percentage: str
    best_percentage: float
    average_time: int


class SubmissionResponse(CamelModel):
    result_id: str
    completed_at: datetime
    rank: int
    user_stats: UserStatsResponse


class QuizHistoryResponse(CamelModel):
    quizzes: List[QuizResultResponse]
    pagination: PaginationInfo


class QuestionSetRequest(CamelModel):
    """Request for a batch of questions"""
    subject: str = Field(..., min_length=1)
    sub_category: str = Field(..., min_length=1)
    difficulty: DifficultyField
    count: int = Field(default=10, ge=5, le=20)


class QuestionSetMeta(CamelModel):
    subject: str
    sub_category: str
    difficulty: Difficulty
    total_questions: int
    generated_at: datetime
    cached: bool


class QuestionSetResponse(CamelModel):
    questions: List[Dict[str, Any]]
    meta: QuestionSetMeta
