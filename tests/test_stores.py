"""
Result store tests
"""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, create_db_engine
from app.core.exceptions import StorageException, ValidationException
from app.models.quiz_result import Difficulty
from app.stores import InMemoryResultStore, ResultFilter, SQLResultStore
from app.stores.memory import SAMPLE_RESULTS


@pytest.fixture
def sql_store(clock):
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    yield SQLResultStore(session_factory=session_factory, clock=clock)
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def any_store(request, store):
    """Both store implementations share one behavioural contract"""
    if request.param == "memory":
        return store
    return request.getfixturevalue("sql_store")


class TestResultStoreContract:
    """Behaviour every result store must provide"""

    def test_append_assigns_id_and_time(self, any_store, clock, result_input):
        result = any_store.append(result_input("alice", 75.5))

        assert result.id
        assert result.completed_at == clock.now
        assert any_store.count() == 1

        stored = any_store.query()[0]
        assert stored.id == result.id
        assert stored.completed_at == clock.now
        assert stored.percentage == 75.5
        assert stored.difficulty is Difficulty.MEDIUM

    def test_ids_are_unique(self, any_store, result_input):
        ids = {any_store.append(result_input("alice", 50)).id for _ in range(10)}
        assert len(ids) == 10

    def test_query_filters_combine(self, any_store, clock, result_input):
        any_store.append(result_input("Alice", 80, subject="Science", difficulty=Difficulty.EASY))
        any_store.append(result_input("alice", 70, subject="Sports", difficulty=Difficulty.EASY))
        clock.advance(days=2)
        any_store.append(result_input("bob", 60, subject="science", difficulty=Difficulty.EASY))

        assert len(any_store.query(ResultFilter.build(username="ALICE"))) == 2
        assert len(any_store.query(ResultFilter.build(subject="SCIENCE"))) == 2
        assert len(any_store.query(ResultFilter.build(username="alice", subject="science"))) == 1
        assert len(any_store.query(ResultFilter.build(difficulty="hard"))) == 0

        since = clock.now - timedelta(days=1)
        recent = any_store.query(ResultFilter.build(since=since))
        assert [result.username for result in recent] == ["bob"]

    def test_since_bound_is_inclusive(self, any_store, result_input):
        result = any_store.append(result_input("alice", 90))

        matched = any_store.query(ResultFilter.build(since=result.completed_at))
        assert [stored.id for stored in matched] == [result.id]

    def test_optional_fields_round_trip(self, any_store, result_input):
        questions = [{"question": "2 + 2?", "answer": "4", "correct": True}]
        any_store.append(result_input("alice", 100, time_taken=None, questions_data=questions))

        stored = any_store.query()[0]
        assert stored.time_taken is None
        assert stored.questions_data == questions


class TestResultFilter:
    """Tests for filter normalisation"""

    def test_all_and_blank_mean_no_constraint(self):
        assert ResultFilter.build(subject="all", difficulty="ALL") == ResultFilter()
        assert ResultFilter.build(subject="  ", difficulty="") == ResultFilter()

    def test_values_are_lowercased(self):
        result_filter = ResultFilter.build(username=" Alice ", subject="Science", difficulty="HARD")
        assert result_filter.username == "alice"
        assert result_filter.subject == "science"
        assert result_filter.difficulty == "hard"

    def test_naive_since_is_utc(self):
        result_filter = ResultFilter.build(since=datetime(2024, 1, 1))
        assert result_filter.since == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_unknown_difficulty(self):
        with pytest.raises(ValidationException):
            ResultFilter.build(difficulty="extreme")


class TestInMemoryResultStore:
    """Tests specific to the in-process store"""

    def test_snapshot_is_unaffected_by_later_appends(self, store, result_input):
        store.append(result_input("alice", 50))
        snapshot = store.query()
        store.append(result_input("bob", 60))

        assert len(snapshot) == 1
        assert store.count() == 2

    def test_seed_sample_data(self):
        store = InMemoryResultStore()
        store.seed_sample_data()

        assert store.count() == len(SAMPLE_RESULTS)
        assert {result.username for result in store.query()} == {
            data.username for data in SAMPLE_RESULTS
        }

    def test_clear(self, store, result_input):
        store.append(result_input("alice", 50))
        store.clear()
        assert store.count() == 0


class TestSQLResultStore:
    """Tests specific to the database store"""

    def test_database_errors_become_storage_errors(self, clock, result_input):
        engine = create_db_engine("sqlite://", poolclass=StaticPool)
        # No tables created, so every statement fails
        session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        broken = SQLResultStore(session_factory=session_factory, clock=clock)

        with pytest.raises(StorageException):
            broken.append(result_input("alice", 50))
        with pytest.raises(StorageException) as exc_info:
            broken.query()
        assert isinstance(exc_info.value.__cause__, OperationalError)
        engine.dispose()
