"""Leaderboard schemas"""

from dataclasses import asdict
from datetime import date as calendar_date
from datetime import datetime
from typing import List, Optional

from app.schemas.common import CamelModel, PaginationInfo
from app.schemas.quiz import QuizResultResponse
from app.services.ranking import RankedEntry, Stats


class LeaderboardEntry(QuizResultResponse):
    rank: int

    @classmethod
    def from_entry(cls, entry: RankedEntry) -> "LeaderboardEntry":
        return cls(rank=entry.rank, **QuizResultResponse.from_result(entry.result).model_dump())


class LeaderboardFilters(CamelModel):
    subject: str = "all"
    difficulty: str = "all"
    timeframe: str = "all"


class LeaderboardResponse(CamelModel):
    leaderboard: List[LeaderboardEntry]
    pagination: PaginationInfo
    filters: LeaderboardFilters


class RankResponse(CamelModel):
    username: str
    rank: int
    total_users: int
    best_score: float
    completed_at: datetime
    percentile: int


class OverallStatsResponse(CamelModel):
    total_quizzes: int
    total_users: int
    average_percentage: str
    highest_score: float
    lowest_score: float
    average_time: int


class SubjectStatsResponse(CamelModel):
    subject: str
    quiz_count: int
    average_percentage: str
    unique_users: int


class DifficultyStatsResponse(CamelModel):
    difficulty: str
    quiz_count: int
    average_percentage: str


class DailyActivityResponse(CamelModel):
    date: calendar_date
    quiz_count: int


class StatsResponse(CamelModel):
    overall: OverallStatsResponse
    by_subject: List[SubjectStatsResponse]
    by_difficulty: List[DifficultyStatsResponse]
    recent_activity: List[DailyActivityResponse]
    filters: Optional[LeaderboardFilters] = None

    @classmethod
    def from_stats(cls, stats: Stats, filters: Optional[LeaderboardFilters] = None) -> "StatsResponse":
        return cls.model_validate({**asdict(stats), "filters": filters})
