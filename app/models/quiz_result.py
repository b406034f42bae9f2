"""
Quiz result models for QuizBoard
"""

import enum

from sqlalchemy import JSON, Column, DateTime, Index, Integer, Numeric, String

from app.core.database import Base


class Difficulty(str, enum.Enum):
    """Quiz difficulty levels, in display order"""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def parse(cls, value: str) -> "Difficulty":
        """Case-insensitive lookup by value"""
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise ValueError(f"difficulty must be one of {', '.join(m.value for m in cls)}")


class QuizResultModel(Base):
    """One completed quiz attempt; rows are only ever inserted"""
    __tablename__ = "quiz_results"

    id = Column(String(36), primary_key=True)
    username = Column(String(50), nullable=False, index=True)
    subject = Column(String(100), nullable=False, index=True)
    sub_category = Column(String(100), nullable=False)
    difficulty = Column(String(20), nullable=False)

    total_questions = Column(Integer, nullable=False, default=10)
    correct_answers = Column(Integer, nullable=False)
    score = Column(Integer, nullable=False)
    percentage = Column(Numeric(5, 2, asdecimal=False), nullable=False)
    time_taken = Column(Integer, nullable=True)  # in seconds

    questions_data = Column(JSON, nullable=True)  # answer trace, stored as-is

    completed_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_quiz_results_percentage", percentage.desc()),
        Index("idx_quiz_results_completed_at", completed_at.desc()),
    )
