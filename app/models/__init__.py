"""
QuizBoard Models Package
"""

from app.models.quiz_result import Difficulty, QuizResultModel

__all__ = ["Difficulty", "QuizResultModel"]
