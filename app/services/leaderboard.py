"""
Leaderboard service
Use cases behind the quiz and leaderboard endpoints: submissions, rankings,
statistics and per-user history
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Generic, List, Optional, Sequence, TypeVar, Union

from prometheus_client import Counter
from pydantic import ValidationError

from app.core.config import settings
from app.core.exceptions import ValidationException, describe_validation_error
from app.core.logging import log_execution_time
from app.schemas.quiz import QuizSubmission
from app.services.ranking import (
    RankedEntry,
    RankingEngine,
    Stats,
    format_percentage,
    mean_percentage,
    mean_time_taken,
    percentile,
)
from app.stores.base import QuizResult, ResultFilter, ResultStore, as_utc, utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")

TIMEFRAME_DAYS = {"week": 7, "month": 30}

RESULTS_SUBMITTED = Counter(
    "quizboard_results_submitted_total",
    "Quiz results stored",
    ["difficulty"],
)


def timeframe_since(timeframe: Optional[str], now: Optional[datetime] = None) -> Optional[datetime]:
    """Lower bound on completion time for ``week``/``month``; None for ``all``"""
    if timeframe is None or timeframe == "all":
        return None
    days = TIMEFRAME_DAYS.get(timeframe)
    if days is None:
        raise ValidationException(f"timeframe must be one of all, {', '.join(TIMEFRAME_DAYS)}")
    return as_utc(now or utcnow()) - timedelta(days=days)


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool


@dataclass(frozen=True)
class UserStats:
    total_quizzes: int
    average_percentage: str
    best_percentage: float
    average_time: int


@dataclass(frozen=True)
class SubmissionReceipt:
    result_id: str
    completed_at: datetime
    rank: int
    user_stats: UserStats


@dataclass(frozen=True)
class RankInfo:
    username: str
    rank: int
    total_users: int
    best_score: float
    completed_at: datetime
    percentile: int


class LeaderboardService:
    """Orchestrates the result store and ranking engine for the API layer"""

    def __init__(
        self,
        store: ResultStore,
        engine: Optional[RankingEngine] = None,
        max_page_size: Optional[int] = None,
    ):
        self.store = store
        self.engine = engine or RankingEngine(store)
        self.max_page_size = max_page_size or settings.MAX_PAGE_SIZE

    @log_execution_time()
    def submit_result(self, submission: Union[QuizSubmission, Dict[str, Any]]) -> SubmissionReceipt:
        """
        Store a completed quiz and report the submitter's standing

        The receipt's rank and stats already include the new result.

        Args:
            submission: Validated submission, or raw camelCase payload

        Returns:
            Receipt with the new result id, global rank and the user's stats

        Raises:
            ValidationException: payload is malformed; nothing is stored
            StorageException: the store failed to save the result
        """
        if not isinstance(submission, QuizSubmission):
            try:
                submission = QuizSubmission.model_validate(submission)
            except ValidationError as e:
                raise ValidationException(
                    describe_validation_error(e.errors()[0]),
                    details={"errors": [error["msg"] for error in e.errors()]},
                ) from e

        result = self.store.append(submission.to_input())
        RESULTS_SUBMITTED.labels(difficulty=result.difficulty.value).inc()
        logger.info(
            f"Quiz result submitted by {result.username}",
            extra={"result_id": result.id, "percentage": result.percentage},
        )

        user_rank = self.engine.rank_of(result.username, ResultFilter())
        return SubmissionReceipt(
            result_id=result.id,
            completed_at=result.completed_at,
            rank=user_rank.rank,
            user_stats=self.get_user_stats(result.username),
        )

    def get_user_stats(self, username: str) -> UserStats:
        results = self.store.query(ResultFilter.build(username=username))
        return UserStats(
            total_quizzes=len(results),
            average_percentage=format_percentage(mean_percentage(results)),
            best_percentage=max((r.percentage for r in results), default=0),
            average_time=mean_time_taken(results),
        )

    @log_execution_time()
    def get_leaderboard(
        self, result_filter: Optional[ResultFilter], page: int, page_size: int
    ) -> Page[RankedEntry]:
        """One page of the ranked leaderboard for the filter"""
        self._check_page(page, page_size)
        return self.paginate(self.engine.rank(result_filter), page, page_size)

    def get_user_rank(self, username: str, result_filter: Optional[ResultFilter] = None) -> RankInfo:
        """
        Rank and percentile of a user among all users matching the filter

        Raises:
            ValidationException: username is blank
            NotFoundException: the user has no matching results
        """
        if not username or not username.strip():
            raise ValidationException("username is required")

        base = result_filter or ResultFilter()
        base = ResultFilter(subject=base.subject, difficulty=base.difficulty, since=base.since)
        user_rank = self.engine.rank_of(username, base)
        return RankInfo(
            username=username,
            rank=user_rank.rank,
            total_users=user_rank.total_users,
            best_score=user_rank.best_entry.percentage,
            completed_at=user_rank.best_entry.completed_at,
            percentile=percentile(user_rank.rank, user_rank.total_users),
        )

    @log_execution_time()
    def get_stats(
        self, result_filter: Optional[ResultFilter] = None, now: Optional[datetime] = None
    ) -> Stats:
        return self.engine.aggregate_stats(result_filter, now=now)

    def get_user_history(
        self,
        username: str,
        page: int,
        page_size: int,
        subject: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> Page[QuizResult]:
        """A user's results, newest first"""
        if not username or not username.strip():
            raise ValidationException("username is required")
        self._check_page(page, page_size)

        results = self.store.query(
            ResultFilter.build(username=username, subject=subject, difficulty=difficulty)
        )
        results.sort(key=lambda r: (r.completed_at, r.id), reverse=True)
        return self.paginate(results, page, page_size)

    def _check_page(self, page: int, page_size: int) -> None:
        if page < 1:
            raise ValidationException("page must be greater than or equal to 1")
        if page_size < 1 or page_size > self.max_page_size:
            raise ValidationException(f"limit must be between 1 and {self.max_page_size}")

    @staticmethod
    def paginate(items: Sequence[T], page: int, page_size: int) -> Page[T]:
        total = len(items)
        start = (page - 1) * page_size
        return Page(
            items=list(items[start:start + page_size]),
            current_page=page,
            total_pages=math.ceil(total / page_size),
            total_count=total,
            has_next=page * page_size < total,
            has_prev=page > 1,
        )
