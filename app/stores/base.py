"""
Result store interface and the value types that flow through it
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.core.exceptions import ValidationException
from app.models.quiz_result import Difficulty


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC, convert aware ones to UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def new_result_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class QuizResultInput:
    """A validated submission, not yet stored"""
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


@dataclass(frozen=True)
class QuizResult:
    """A stored quiz attempt; never updated once created"""
    id: str
    completed_at: datetime
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

    @classmethod
    def create(cls, data: QuizResultInput, result_id: str, completed_at: datetime) -> "QuizResult":
        values = {f.name: getattr(data, f.name) for f in fields(QuizResultInput)}
        return cls(id=result_id, completed_at=as_utc(completed_at), **values)

    @property
    def user_key(self) -> str:
        """Username as used for grouping users"""
        return self.username.lower()


def _normalize(value: Optional[str], allow_all: bool = False) -> Optional[str]:
    if value is None:
        return None
    value = value.strip().lower()
    if not value or (allow_all and value == "all"):
        return None
    return value


@dataclass(frozen=True)
class ResultFilter:
    """
    Narrows which results a query considers.

    String fields hold lower-cased values; every field that is set must match
    (AND semantics). ``since`` is an inclusive lower bound on ``completed_at``.
    Build instances with :meth:`build` so values are normalised exactly once.
    """
    username: Optional[str] = None
    subject: Optional[str] = None
    difficulty: Optional[str] = None
    since: Optional[datetime] = None

    @classmethod
    def build(
        cls,
        username: Optional[str] = None,
        subject: Optional[str] = None,
        difficulty: Optional[str] = None,
        since: Optional[datetime] = None,
    ) -> "ResultFilter":
        difficulty = _normalize(difficulty, allow_all=True)
        if difficulty is not None:
            try:
                difficulty = Difficulty.parse(difficulty).value.lower()
            except ValueError as e:
                raise ValidationException(str(e)) from e

        return cls(
            username=_normalize(username),
            subject=_normalize(subject, allow_all=True),
            difficulty=difficulty,
            since=as_utc(since) if since is not None else None,
        )

    def matches(self, result: QuizResult) -> bool:
        if self.username is not None and result.username.lower() != self.username:
            return False
        if self.subject is not None and result.subject.lower() != self.subject:
            return False
        if self.difficulty is not None and result.difficulty.value.lower() != self.difficulty:
            return False
        if self.since is not None and result.completed_at < self.since:
            return False
        return True


class ResultStore(ABC):
    """
    Append-only collection of quiz results.

    Implementations must make ``append`` atomic and allow ``query`` to run
    concurrently with appends and with other queries.
    """

    @abstractmethod
    def append(self, data: QuizResultInput) -> QuizResult:
        """Assign id and completion time, persist and return the stored result"""

    @abstractmethod
    def query(self, result_filter: Optional[ResultFilter] = None) -> List[QuizResult]:
        """All results matching every constraint of the filter, in no particular order"""

    @abstractmethod
    def count(self) -> int:
        """Total number of stored results"""
