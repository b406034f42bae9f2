"""
Leaderboard service tests
"""
import threading
from datetime import timedelta

import pytest

from app.core.exceptions import NotFoundException, ValidationException
from app.services.leaderboard import LeaderboardService, timeframe_since
from app.stores import ResultFilter


class TestSubmitResult:
    """Tests for result submission"""

    def test_receipt_includes_new_result(self, service, store, sample_submission):
        receipt = service.submit_result(sample_submission)

        assert store.count() == 1
        assert receipt.rank == 1
        assert receipt.user_stats.total_quizzes == 1
        assert receipt.user_stats.average_percentage == "80.0"
        assert receipt.user_stats.best_percentage == 80
        assert receipt.user_stats.average_time == 300
        assert store.query()[0].id == receipt.result_id

    def test_rank_reflects_other_players(self, service, store, result_input, sample_submission):
        store.append(result_input("top_player", 95))

        receipt = service.submit_result(sample_submission)
        assert receipt.rank == 2

    def test_accepts_lowercase_difficulty(self, service, store, sample_submission):
        sample_submission["difficulty"] = "hard"

        service.submit_result(sample_submission)
        assert store.query()[0].difficulty.value == "Hard"

    def test_percentage_rounded_to_two_places(self, service, store, sample_submission):
        sample_submission["percentage"] = 66.666

        service.submit_result(sample_submission)
        assert store.query()[0].percentage == 66.67

    @pytest.mark.parametrize(
        "field, value",
        [
            ("percentage", 101),
            ("percentage", -1),
            ("username", ""),
            ("username", "   "),
            ("difficulty", "Impossible"),
            ("totalQuestions", 0),
            ("correctAnswers", 11),
            ("timeTaken", -5),
        ],
    )
    def test_invalid_submission_stores_nothing(self, service, store, sample_submission, field, value):
        sample_submission[field] = value

        with pytest.raises(ValidationException):
            service.submit_result(sample_submission)
        assert store.count() == 0

    def test_missing_field_stores_nothing(self, service, store, sample_submission):
        del sample_submission["subject"]

        with pytest.raises(ValidationException) as exc_info:
            service.submit_result(sample_submission)
        assert "subject" in exc_info.value.message
        assert store.count() == 0


class TestGetLeaderboard:
    """Tests for paginated leaderboards"""

    def test_first_page_of_subject(self, service, store, result_input):
        for index in range(5):
            store.append(result_input(f"user{index}", 50 + index, subject="Science"))
        store.append(result_input("other", 99, subject="Sports"))

        page = service.get_leaderboard(ResultFilter.build(subject="Science"), page=1, page_size=2)

        assert len(page.items) == 2
        assert page.total_pages == 3
        assert page.total_count == 5
        assert page.has_next is True
        assert page.has_prev is False
        assert [entry.rank for entry in page.items] == [1, 2]

    def test_pages_concatenate_to_full_ranking(self, service, store, clock, result_input):
        for index in range(23):
            clock.advance(seconds=index % 4)
            store.append(result_input(f"user{index % 9}", float(index * 7 % 100)))

        full = service.engine.rank(ResultFilter())
        first = service.get_leaderboard(ResultFilter(), page=1, page_size=5)
        collected = list(first.items)
        for number in range(2, first.total_pages + 1):
            collected.extend(service.get_leaderboard(ResultFilter(), page=number, page_size=5).items)

        assert collected == full
        assert len({entry.result.id for entry in collected}) == 23

    def test_page_past_the_end_is_empty(self, service, store, result_input):
        store.append(result_input("alice", 80))

        page = service.get_leaderboard(ResultFilter(), page=3, page_size=10)
        assert page.items == []
        assert page.total_pages == 1
        assert page.has_next is False
        assert page.has_prev is True

    def test_empty_board(self, service):
        page = service.get_leaderboard(ResultFilter(), page=1, page_size=10)
        assert page.items == []
        assert page.total_pages == 0
        assert page.total_count == 0

    @pytest.mark.parametrize("page, page_size", [(0, 10), (-1, 10), (1, 0), (1, 101)])
    def test_rejects_bad_pagination(self, service, page, page_size):
        with pytest.raises(ValidationException):
            service.get_leaderboard(ResultFilter(), page=page, page_size=page_size)


class TestGetUserRank:
    """Tests for user rank lookups"""

    def test_rank_and_percentile(self, service, store, result_input):
        store.append(result_input("alice", 80))
        store.append(result_input("bob", 90))
        store.append(result_input("carol", 70))

        info = service.get_user_rank("alice")
        assert info.rank == 2
        assert info.total_users == 3
        assert info.best_score == 80
        assert info.percentile == 67

    def test_ignores_username_in_filter(self, service, store, result_input):
        store.append(result_input("alice", 80))
        store.append(result_input("bob", 90))

        info = service.get_user_rank("alice", ResultFilter.build(username="bob"))
        assert info.total_users == 2

    def test_unknown_user(self, service):
        with pytest.raises(NotFoundException):
            service.get_user_rank("unknown_user", ResultFilter())

    def test_blank_username(self, service):
        with pytest.raises(ValidationException):
            service.get_user_rank("  ")


class TestUserHistory:
    """Tests for per-user history"""

    def test_newest_first(self, service, store, clock, result_input):
        first = store.append(result_input("alice", 50))
        clock.advance(hours=1)
        second = store.append(result_input("alice", 60))
        clock.advance(hours=1)
        store.append(result_input("bob", 70))

        history = service.get_user_history("ALICE", page=1, page_size=10)
        assert [result.id for result in history.items] == [second.id, first.id]
        assert history.total_count == 2

    def test_filters_by_subject(self, service, store, result_input):
        store.append(result_input("alice", 50, subject="Science"))
        store.append(result_input("alice", 60, subject="Sports"))

        history = service.get_user_history("alice", page=1, page_size=10, subject="sports")
        assert [result.subject for result in history.items] == ["Sports"]


class TestTimeframe:
    """Tests for timeframe filters"""

    def test_all_has_no_bound(self):
        assert timeframe_since("all") is None
        assert timeframe_since(None) is None

    def test_week_and_month(self, clock):
        assert timeframe_since("week", now=clock.now) == clock.now - timedelta(days=7)
        assert timeframe_since("month", now=clock.now) == clock.now - timedelta(days=30)

    def test_unknown_timeframe(self):
        with pytest.raises(ValidationException):
            timeframe_since("year")

    def test_week_filter_excludes_old_results(self, service, store, clock, result_input):
        store.append(result_input("old", 99))
        clock.advance(days=10)
        store.append(result_input("recent", 50))

        ranked = service.engine.rank(ResultFilter.build(since=timeframe_since("week", now=clock.now)))
        assert [entry.result.username for entry in ranked] == ["recent"]


def test_concurrent_submissions_are_all_ranked(store, sample_submission):
    service = LeaderboardService(store)
    errors = []

    def submit(index):
        try:
            service.submit_result({**sample_submission, "username": f"user{index}", "percentage": index})
        except Exception as e:  # pragma: no cover
            errors.append(e)

    threads = [threading.Thread(target=submit, args=(index,)) for index in range(50)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert store.count() == 50
    ranked = service.engine.rank(ResultFilter())
    assert [entry.result.percentage for entry in ranked] == [float(p) for p in range(49, -1, -1)]
    assert [entry.rank for entry in ranked] == list(range(1, 51))
