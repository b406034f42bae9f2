"""
SQLAlchemy-backed result store
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.core.database import SessionLocal, get_db_session, with_db_retry
from app.core.exceptions import StorageException
from app.models.quiz_result import Difficulty, QuizResultModel
from app.stores.base import (
    QuizResult,
    QuizResultInput,
    ResultFilter,
    ResultStore,
    as_utc,
    new_result_id,
    utcnow,
)

logger = logging.getLogger(__name__)


class SQLResultStore(ResultStore):
    """Stores each result as one row of ``quiz_results``"""

    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._session_factory = session_factory
        self._clock = clock

    def append(self, data: QuizResultInput) -> QuizResult:
        result = QuizResult.create(data, result_id=new_result_id(), completed_at=self._clock())
        row = QuizResultModel(
            id=result.id,
            username=result.username,
            subject=result.subject,
            sub_category=result.sub_category,
            difficulty=result.difficulty.value,
            total_questions=result.total_questions,
            correct_answers=result.correct_answers,
            score=result.score,
            percentage=result.percentage,
            time_taken=result.time_taken,
            questions_data=result.questions_data,
            completed_at=result.completed_at,
        )

        # Single INSERT in its own transaction: either the row exists or nothing does
        try:
            with get_db_session(self._session_factory) as session:
                session.add(row)
        except SQLAlchemyError as e:
            logger.error(f"Failed to store quiz result for {data.username}: {e}")
            raise StorageException("Failed to save quiz result") from e

        return result

    def query(self, result_filter: Optional[ResultFilter] = None) -> List[QuizResult]:
        try:
            return self._select(result_filter or ResultFilter())
        except SQLAlchemyError as e:
            logger.error(f"Failed to query quiz results: {e}")
            raise StorageException("Failed to load quiz results") from e

    def count(self) -> int:
        try:
            with get_db_session(self._session_factory) as session:
                return session.scalar(select(func.count()).select_from(QuizResultModel)) or 0
        except SQLAlchemyError as e:
            logger.error(f"Failed to count quiz results: {e}")
            raise StorageException("Failed to count quiz results") from e

    @with_db_retry()
    def _select(self, result_filter: ResultFilter) -> List[QuizResult]:
        stmt = select(QuizResultModel)
        if result_filter.username is not None:
            stmt = stmt.where(func.lower(QuizResultModel.username) == result_filter.username)
        if result_filter.subject is not None:
            stmt = stmt.where(func.lower(QuizResultModel.subject) == result_filter.subject)
        if result_filter.difficulty is not None:
            stmt = stmt.where(func.lower(QuizResultModel.difficulty) == result_filter.difficulty)
        if result_filter.since is not None:
            stmt = stmt.where(QuizResultModel.completed_at >= result_filter.since)

        with get_db_session(self._session_factory) as session:
            return [self._to_domain(row) for row in session.scalars(stmt)]

    @staticmethod
    def _to_domain(row: QuizResultModel) -> QuizResult:
        return QuizResult(
            id=row.id,
            completed_at=as_utc(row.completed_at),
            username=row.username,
            subject=row.subject,
            sub_category=row.sub_category,
            difficulty=Difficulty(row.difficulty),
            total_questions=row.total_questions,
            correct_answers=row.correct_answers,
            score=row.score,
            percentage=float(row.percentage),
            time_taken=row.time_taken,
            questions_data=row.questions_data,
        )
