"""
Shared FastAPI dependencies
"""

from functools import lru_cache

from fastapi import Depends

from app.services.leaderboard import LeaderboardService
from app.services.questions import QuestionService, question_service
from app.stores import ResultStore, build_result_store


@lru_cache
def get_result_store() -> ResultStore:
    """Process-wide result store, created on first use"""
    return build_result_store()


def get_leaderboard_service(store: ResultStore = Depends(get_result_store)) -> LeaderboardService:
    return LeaderboardService(store)


def get_question_service() -> QuestionService:
    return question_service
