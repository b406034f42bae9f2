"""
API main router
Combines all endpoint routers
"""

from fastapi import APIRouter

from app.api.v1.endpoints import leaderboard, questions, quiz

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(quiz.router, prefix="/quiz", tags=["Quiz"])
api_router.include_router(leaderboard.router, prefix="/leaderboard", tags=["Leaderboard"])
api_router.include_router(questions.router, prefix="/questions", tags=["Questions"])
