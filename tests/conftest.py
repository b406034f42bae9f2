"""
QuizBoard - Test Configuration
Pytest fixtures and configuration for testing
"""
import os

# Settings are read at import time, so the environment must be ready first
os.environ["ENVIRONMENT"] = "test"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["REDIS_ENABLED"] = "false"
os.environ.pop("SENTRY_DSN", None)

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_question_service, get_result_store
from app.main import app
from app.models.quiz_result import Difficulty
from app.services.leaderboard import LeaderboardService
from app.services.questions import QuestionService
from app.stores import InMemoryResultStore, QuizResultInput


class FakeClock:
    """Clock whose time only moves when told to"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeCache:
    """Dict-backed stand-in for the Redis question cache"""

    def __init__(self):
        self.data: dict[str, Any] = {}

    async def load(self, key: str) -> Any:
        return self.data.get(key)

    async def save(self, key: str, questions: Any) -> bool:
        self.data[key] = questions
        return True


def make_input(
    username: str = "alice",
    percentage: float = 80.0,
    subject: str = "Technology",
    difficulty: Difficulty = Difficulty.MEDIUM,
    time_taken: int | None = 300,
    **overrides: Any,
) -> QuizResultInput:
    values = {
        "username": username,
        "subject": subject,
        "sub_category": "Programming",
        "difficulty": difficulty,
        "total_questions": 10,
        "correct_answers": int(percentage // 10),
        "score": int(percentage),
        "percentage": percentage,
        "time_taken": time_taken,
    }
    values.update(overrides)
    return QuizResultInput(**values)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock: FakeClock) -> InMemoryResultStore:
    return InMemoryResultStore(clock=clock)


@pytest.fixture
def service(store: InMemoryResultStore) -> LeaderboardService:
    return LeaderboardService(store)


@pytest.fixture
def fake_cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def question_service(fake_cache: FakeCache) -> QuestionService:
    return QuestionService(cache=fake_cache)


@pytest_asyncio.fixture(scope="function")
async def client(
    store: InMemoryResultStore, question_service: QuestionService
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client backed by a fresh in-memory store."""
    app.dependency_overrides[get_result_store] = lambda: store
    app.dependency_overrides[get_question_service] = lambda: question_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def sample_submission() -> dict[str, Any]:
    """Sample quiz submission payload."""
    return {
        "username": "john_doe",
        "subject": "Technology",
        "subCategory": "Programming",
        "difficulty": "Medium",
        "totalQuestions": 10,
        "correctAnswers": 8,
        "score": 80,
        "percentage": 80,
        "timeTaken": 300,
    }


@pytest.fixture
def result_input():
    """Factory for result inputs with sensible defaults."""
    return make_input
