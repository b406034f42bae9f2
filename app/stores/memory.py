"""
In-process result store
Used by tests and for running the service without a database
"""

import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from app.models.quiz_result import Difficulty
from app.stores.base import (
    QuizResult,
    QuizResultInput,
    ResultFilter,
    ResultStore,
    new_result_id,
    utcnow,
)

logger = logging.getLogger(__name__)

SAMPLE_RESULTS = [
    QuizResultInput("john_doe", "Technology", "Programming", Difficulty.MEDIUM, 10, 8, 80, 80.0, 300),
    QuizResultInput("jane_smith", "Technology", "AI & Machine Learning", Difficulty.HARD, 10, 9, 90, 90.0, 450),
    QuizResultInput("bob_wilson", "Sports", "Football", Difficulty.EASY, 10, 7, 70, 70.0, 200),
    QuizResultInput("alice_johnson", "Science", "Physics", Difficulty.MEDIUM, 10, 9, 90, 90.0, 380),
    QuizResultInput("charlie_brown", "Technology", "Web Development", Difficulty.EASY, 10, 6, 60, 60.0, 250),
]


class InMemoryResultStore(ResultStore):
    """
    Results held in an immutable tuple that is swapped on every append.

    Writers serialise on a lock; readers grab the current tuple without
    locking, so a query sees every append that finished before it started.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._results: Tuple[QuizResult, ...] = ()
        self._write_lock = threading.Lock()
        self._clock = clock

    def append(self, data: QuizResultInput) -> QuizResult:
        with self._write_lock:
            result = QuizResult.create(data, result_id=new_result_id(), completed_at=self._clock())
            self._results = self._results + (result,)
        logger.debug(f"Stored quiz result {result.id} for {result.username}")
        return result

    def query(self, result_filter: Optional[ResultFilter] = None) -> List[QuizResult]:
        snapshot = self._results
        if result_filter is None:
            return list(snapshot)
        return [result for result in snapshot if result_filter.matches(result)]

    def count(self) -> int:
        return len(self._results)

    def clear(self) -> None:
        with self._write_lock:
            self._results = ()

    def seed_sample_data(self) -> None:
        for data in SAMPLE_RESULTS:
            self.append(data)
        logger.info(f"Seeded result store with {len(SAMPLE_RESULTS)} sample results")
