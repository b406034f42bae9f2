"""
Ranking engine
Deterministic rankings, percentiles and aggregate statistics over a result store
"""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from app.core.exceptions import NotFoundException
from app.models.quiz_result import Difficulty
from app.stores.base import QuizResult, ResultFilter, ResultStore, as_utc, utcnow

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_DAYS = 7


def ranking_key(result: QuizResult) -> Tuple[float, datetime, str]:
    """
    Canonical leaderboard order: highest percentage first, then earliest
    completion, then id so equal timestamps still order the same way.
    """
    return (-result.percentage, result.completed_at, result.id)


def round_half_up(value: float, places: int = 0) -> Decimal:
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def format_percentage(value: float) -> str:
    """One decimal place, halves rounded up: 80.25 -> "80.3" """
    return str(round_half_up(value, 1))


def percentile(rank: int, total_users: int) -> int:
    """
    Share of users at or below ``rank``, as a whole percentage.

    Computes round(((total_users - rank + 1) / total_users) * 100) with
    halves rounded up, in integer arithmetic so no float error can flip
    a .5 boundary. Returns 0 when there are no users.
    """
    if total_users <= 0:
        return 0
    return (200 * (total_users - rank + 1) + total_users) // (2 * total_users)


def mean_percentage(results: List[QuizResult]) -> float:
    if not results:
        return 0.0
    return sum(r.percentage for r in results) / len(results)


def mean_time_taken(results: Iterable[QuizResult]) -> int:
    """Average of the results that recorded a time; 0 when none did"""
    times = [r.time_taken for r in results if r.time_taken is not None]
    if not times:
        return 0
    return int(round_half_up(sum(times) / len(times)))


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    result: QuizResult


@dataclass(frozen=True)
class UserRank:
    rank: int
    total_users: int
    best_entry: QuizResult


@dataclass(frozen=True)
class OverallStats:
    total_quizzes: int
    total_users: int
    average_percentage: str
    highest_score: float
    lowest_score: float
    average_time: int


@dataclass(frozen=True)
class SubjectStats:
    subject: str
    quiz_count: int
    average_percentage: str
    unique_users: int


@dataclass(frozen=True)
class DifficultyStats:
    difficulty: str
    quiz_count: int
    average_percentage: str


@dataclass(frozen=True)
class DailyActivity:
    date: date
    quiz_count: int


@dataclass(frozen=True)
class Stats:
    overall: OverallStats
    by_subject: List[SubjectStats]
    by_difficulty: List[DifficultyStats]
    recent_activity: List[DailyActivity]


class RankingEngine:
    """
    Stateless computations over a :class:`ResultStore`.

    Every call re-reads the store, and nothing here writes to it.
    """

    def __init__(self, store: ResultStore):
        self.store = store

    def rank(self, result_filter: Optional[ResultFilter] = None) -> List[RankedEntry]:
        """Every matching result in leaderboard order with 1-based ranks"""
        results = sorted(self.store.query(result_filter or ResultFilter()), key=ranking_key)
        return [RankedEntry(rank=position, result=result) for position, result in enumerate(results, 1)]

    def rank_of(self, username: str, result_filter: Optional[ResultFilter] = None) -> UserRank:
        """
        Rank of a user among distinct users, each represented by their best
        matching result.

        Raises:
            NotFoundException: the user has no results matching the filter
        """
        best = self.best_results(self.store.query(result_filter or ResultFilter()))
        user_key = username.strip().lower()

        best_entry = best.get(user_key)
        if best_entry is None:
            raise NotFoundException(
                "No quiz results found for this user", details={"username": username}
            )

        target = ranking_key(best_entry)
        ahead = sum(1 for entry in best.values() if ranking_key(entry) < target)
        return UserRank(rank=ahead + 1, total_users=len(best), best_entry=best_entry)

    @staticmethod
    def best_results(results: Iterable[QuizResult]) -> Dict[str, QuizResult]:
        """Each user's highest-ranked result, keyed by lower-cased username"""
        best: Dict[str, QuizResult] = {}
        for result in results:
            current = best.get(result.user_key)
            if current is None or ranking_key(result) < ranking_key(current):
                best[result.user_key] = result
        return best

    def aggregate_stats(
        self, result_filter: Optional[ResultFilter] = None, now: Optional[datetime] = None
    ) -> Stats:
        results = self.store.query(result_filter or ResultFilter())
        today = as_utc(now or utcnow()).date()

        return Stats(
            overall=self._overall(results),
            by_subject=self._by_subject(results),
            by_difficulty=self._by_difficulty(results),
            recent_activity=self._recent_activity(results, today),
        )

    @staticmethod
    def _overall(results: List[QuizResult]) -> OverallStats:
        percentages = [r.percentage for r in results]
        return OverallStats(
            total_quizzes=len(results),
            total_users=len({r.user_key for r in results}),
            average_percentage=format_percentage(mean_percentage(results)),
            highest_score=max(percentages, default=0),
            lowest_score=min(percentages, default=0),
            average_time=mean_time_taken(results),
        )

    @staticmethod
    def _by_subject(results: List[QuizResult]) -> List[SubjectStats]:
        # Subjects match case-insensitively; the label is the earliest spelling seen
        groups: Dict[str, List[QuizResult]] = {}
        for result in sorted(results, key=lambda r: (r.completed_at, r.id)):
            groups.setdefault(result.subject.lower(), []).append(result)

        stats = [
            SubjectStats(
                subject=group[0].subject,
                quiz_count=len(group),
                average_percentage=format_percentage(mean_percentage(group)),
                unique_users=len({r.user_key for r in group}),
            )
            for group in groups.values()
        ]
        return sorted(stats, key=lambda s: (-s.quiz_count, s.subject.lower()))

    @staticmethod
    def _by_difficulty(results: List[QuizResult]) -> List[DifficultyStats]:
        stats = []
        for difficulty in Difficulty:
            group = [r for r in results if r.difficulty == difficulty]
            stats.append(
                DifficultyStats(
                    difficulty=difficulty.value,
                    quiz_count=len(group),
                    average_percentage=format_percentage(mean_percentage(group)),
                )
            )
        return stats

    @staticmethod
    def _recent_activity(results: List[QuizResult], today: date) -> List[DailyActivity]:
        per_day = Counter(r.completed_at.date() for r in results)
        days = [today - timedelta(days=offset) for offset in range(RECENT_ACTIVITY_DAYS)]
        return [DailyActivity(date=day, quiz_count=per_day.get(day, 0)) for day in days]
