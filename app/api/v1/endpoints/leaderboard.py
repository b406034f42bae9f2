"""
Leaderboard endpoints
Handles the global leaderboard, user ranks and aggregate statistics
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_leaderboard_service
from app.core.config import settings
from app.schemas.common import ApiResponse, PaginationInfo
from app.schemas.leaderboard import (
    LeaderboardEntry,
    LeaderboardFilters,
    LeaderboardResponse,
    RankResponse,
    StatsResponse,
)
from app.services.leaderboard import LeaderboardService, timeframe_since
from app.stores import ResultFilter

router = APIRouter()

TIMEFRAME_PATTERN = "^(all|week|month)$"


@router.get("", response_model=ApiResponse[List[LeaderboardEntry]])
def get_leaderboard(
    limit: int = Query(100, ge=1, le=settings.MAX_PAGE_SIZE),
    subject: Optional[str] = None,
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """Top ranked results as a plain list"""
    leaderboard = service.get_leaderboard(ResultFilter.build(subject=subject), 1, limit)
    return ApiResponse(data=[LeaderboardEntry.from_entry(entry) for entry in leaderboard.items])


@router.get("/global", response_model=ApiResponse[LeaderboardResponse])
def get_global_leaderboard(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=settings.MAX_PAGE_SIZE),
    subject: Optional[str] = None,
    difficulty: Optional[str] = None,
    timeframe: str = Query("all", pattern=TIMEFRAME_PATTERN),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """Get the global leaderboard, best percentage first"""
    result_filter = ResultFilter.build(
        subject=subject, difficulty=difficulty, since=timeframe_since(timeframe)
    )
    leaderboard = service.get_leaderboard(result_filter, page, limit)
    return ApiResponse(
        data=LeaderboardResponse(
            leaderboard=[LeaderboardEntry.from_entry(entry) for entry in leaderboard.items],
            pagination=PaginationInfo.from_page(leaderboard),
            filters=LeaderboardFilters(
                subject=subject or "all", difficulty=difficulty or "all", timeframe=timeframe
            ),
        )
    )


@router.get("/rank/{username}", response_model=ApiResponse[RankResponse])
def get_user_rank(
    username: str,
    subject: Optional[str] = None,
    difficulty: Optional[str] = None,
    timeframe: str = Query("all", pattern=TIMEFRAME_PATTERN),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """Get a user's rank and percentile among all users"""
    result_filter = ResultFilter.build(
        subject=subject, difficulty=difficulty, since=timeframe_since(timeframe)
    )
    info = service.get_user_rank(username, result_filter)
    return ApiResponse(
        data=RankResponse(
            username=info.username,
            rank=info.rank,
            total_users=info.total_users,
            best_score=info.best_score,
            completed_at=info.completed_at,
            percentile=info.percentile,
        )
    )


@router.get("/stats", response_model=ApiResponse[StatsResponse])
def get_leaderboard_stats(
    subject: Optional[str] = None,
    difficulty: Optional[str] = None,
    timeframe: str = Query("all", pattern=TIMEFRAME_PATTERN),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """Get overall, per-subject, per-difficulty and recent activity statistics"""
    result_filter = ResultFilter.build(
        subject=subject, difficulty=difficulty, since=timeframe_since(timeframe)
    )
    stats = service.get_stats(result_filter)
    return ApiResponse(
        data=StatsResponse.from_stats(
            stats,
            LeaderboardFilters(
                subject=subject or "all", difficulty=difficulty or "all", timeframe=timeframe
            ),
        )
    )
