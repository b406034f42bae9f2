"""
Quiz endpoints
Handles question sets, result submission and per-user history
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_leaderboard_service, get_question_service
from app.core.config import settings
from app.schemas.common import ApiResponse, PaginationInfo
from app.schemas.quiz import (
    QuestionSetMeta,
    QuestionSetRequest,
    QuestionSetResponse,
    QuizHistoryResponse,
    QuizResultResponse,
    QuizSubmission,
    SubmissionResponse,
    UserStatsResponse,
)
from app.services.leaderboard import LeaderboardService
from app.services.questions import QuestionService

router = APIRouter()


@router.post("/questions", response_model=ApiResponse[QuestionSetResponse])
async def get_quiz_questions(
    request: QuestionSetRequest,
    service: QuestionService = Depends(get_question_service),
):
    """Get a numbered set of questions for a subject, category and difficulty"""
    questions, cached = await service.get_questions(
        request.subject, request.sub_category, request.difficulty, request.count
    )
    return ApiResponse(
        data=QuestionSetResponse(
            questions=questions,
            meta=QuestionSetMeta(
                subject=request.subject,
                sub_category=request.sub_category,
                difficulty=request.difficulty,
                total_questions=len(questions),
                generated_at=datetime.now(timezone.utc),
                cached=cached,
            ),
        )
    )


@router.post("/submit", response_model=ApiResponse[SubmissionResponse])
def submit_quiz(
    submission: QuizSubmission,
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """Submit quiz results; the response carries the user's global rank and stats"""
    receipt = service.submit_result(submission)
    stats = receipt.user_stats
    return ApiResponse(
        message="Quiz results submitted successfully",
        data=SubmissionResponse(
            result_id=receipt.result_id,
            completed_at=receipt.completed_at,
            rank=receipt.rank,
            user_stats=UserStatsResponse(
                total_quizzes=stats.total_quizzes,
                average_percentage=stats.average_percentage,
                best_percentage=stats.best_percentage,
                average_time=stats.average_time,
            ),
        ),
    )


@router.get("/history/{username}", response_model=ApiResponse[QuizHistoryResponse])
def get_quiz_history(
    username: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE),
    subject: Optional[str] = None,
    difficulty: Optional[str] = None,
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """Get a user's quiz history, newest first"""
    history = service.get_user_history(username, page, limit, subject=subject, difficulty=difficulty)
    return ApiResponse(
        data=QuizHistoryResponse(
            quizzes=[QuizResultResponse.from_result(result) for result in history.items],
            pagination=PaginationInfo.from_page(history),
        )
    )
