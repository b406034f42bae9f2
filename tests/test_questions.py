"""
Question service and catalogue endpoint tests
"""
import pytest
from httpx import AsyncClient

from app.core.exceptions import UpstreamServiceException, ValidationException
from app.models.quiz_result import Difficulty
from app.services.questions import QUESTION_BANK, QuestionService, fallback_questions


async def failing_generator(subject, sub_category, difficulty, count):
    raise RuntimeError("model unavailable")


async def empty_generator(subject, sub_category, difficulty, count):
    return []


class TestFallbackQuestions:
    """Tests for the built-in question bank"""

    def test_repeats_bank_with_numbered_suffix(self):
        bank = QUESTION_BANK[("Science", "Physics")]

        questions = fallback_questions("Science", "Physics", Difficulty.EASY, 5)

        assert len(questions) == 5
        assert questions[0]["question"] == bank[0][0]
        assert questions[len(bank)]["question"].endswith(f"(Question {len(bank) + 1})")

    def test_generic_questions_for_unbanked_category(self):
        questions = fallback_questions("Business", "Finance", Difficulty.HARD, 6)

        assert len(questions) == 6
        assert all(q["correctAnswer"] in q["options"] for q in questions)
        assert all(q["difficulty"] == "Hard" for q in questions)


class TestQuestionService:
    """Tests for question set retrieval"""

    @pytest.mark.asyncio
    async def test_questions_are_numbered_and_cached(self, question_service, fake_cache):
        questions, cached = await question_service.get_questions(
            "Technology", "Programming", Difficulty.MEDIUM, 5
        )

        assert cached is False
        assert [q["questionNumber"] for q in questions] == [1, 2, 3, 4, 5]
        assert [q["id"] for q in questions] == [1, 2, 3, 4, 5]
        assert len(fake_cache.data) == 1

        again, cached = await question_service.get_questions(
            "Technology", "Programming", Difficulty.MEDIUM, 5
        )
        assert cached is True
        assert again == questions

    @pytest.mark.asyncio
    async def test_small_cached_set_is_regenerated(self, question_service):
        await question_service.get_questions("Sports", "Football", Difficulty.EASY, 5)

        questions, cached = await question_service.get_questions("Sports", "Football", Difficulty.EASY, 10)

        assert cached is False
        assert len(questions) == 10

    @pytest.mark.asyncio
    async def test_invalid_subject(self, question_service):
        with pytest.raises(ValidationException):
            await question_service.get_questions("Cooking", "Baking", Difficulty.EASY, 5)

    @pytest.mark.asyncio
    async def test_generator_failure_is_upstream_error(self, fake_cache):
        service = QuestionService(generator=failing_generator, cache=fake_cache)

        with pytest.raises(UpstreamServiceException) as exc_info:
            await service.get_questions("Technology", "Programming", Difficulty.EASY, 5)
        assert exc_info.value.status_code == 503
        assert fake_cache.data == {}

    @pytest.mark.asyncio
    async def test_empty_generation_is_upstream_error(self, fake_cache):
        service = QuestionService(generator=empty_generator, cache=fake_cache)

        with pytest.raises(UpstreamServiceException):
            await service.get_questions("Technology", "Programming", Difficulty.EASY, 5)

    @pytest.mark.asyncio
    async def test_sample_questions_skip_the_cache(self, question_service, fake_cache):
        questions = await question_service.sample_questions("Science", "Physics", Difficulty.HARD, 3)

        assert [q["questionNumber"] for q in questions] == [1, 2, 3]
        assert fake_cache.data == {}

    @pytest.mark.asyncio
    async def test_sample_questions_invalid_pair(self, question_service):
        with pytest.raises(ValidationException) as exc_info:
            await question_service.sample_questions("Science", "Football", Difficulty.EASY, 5)
        assert exc_info.value.details == {"subject": "Science", "subCategory": "Football"}


class TestQuestionEndpoints:
    """Tests for the question API"""

    @pytest.mark.asyncio
    async def test_quiz_questions(self, client: AsyncClient):
        response = await client.post(
            "/api/quiz/questions",
            json={"subject": "Science", "subCategory": "Chemistry", "difficulty": "easy", "count": 5},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["questions"]) == 5
        assert data["meta"]["difficulty"] == "Easy"
        assert data["meta"]["totalQuestions"] == 5
        assert data["meta"]["cached"] is False

    @pytest.mark.asyncio
    async def test_quiz_questions_count_out_of_range(self, client: AsyncClient):
        response = await client.post(
            "/api/quiz/questions",
            json={"subject": "Science", "subCategory": "Chemistry", "difficulty": "Easy", "count": 50},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_generator_outage_returns_503(self, client: AsyncClient, fake_cache):
        from app.api.deps import get_question_service
        from app.main import app

        app.dependency_overrides[get_question_service] = lambda: QuestionService(
            generator=failing_generator, cache=fake_cache
        )

        response = await client.post(
            "/api/quiz/questions",
            json={"subject": "Science", "subCategory": "Chemistry", "difficulty": "Easy"},
        )

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "UPSTREAM_SERVICE_ERROR"

    @pytest.mark.asyncio
    async def test_subjects(self, client: AsyncClient):
        response = await client.get("/api/questions/subjects")

        data = response.json()["data"]
        assert data["totalSubjects"] == 8
        assert data["subjects"][0]["name"] == "Technology"

    @pytest.mark.asyncio
    async def test_subject_categories(self, client: AsyncClient):
        response = await client.get("/api/questions/subjects/Sports/categories")

        assert response.status_code == 200
        assert "Football" in response.json()["data"]["categories"]

    @pytest.mark.asyncio
    async def test_unknown_subject_categories(self, client: AsyncClient):
        response = await client.get("/api/questions/subjects/Cooking/categories")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_validate_subject(self, client: AsyncClient):
        response = await client.post(
            "/api/questions/validate", json={"subject": "Science", "subCategory": "Physics"}
        )

        assert response.json()["data"]["isValid"] is True

    @pytest.mark.asyncio
    async def test_sample_questions(self, client: AsyncClient, fake_cache):
        response = await client.post(
            "/api/questions/sample",
            json={"subject": "Technology", "subCategory": "Programming", "difficulty": "medium"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert [q["questionNumber"] for q in data["questions"]] == [1, 2, 3, 4, 5]
        assert data["meta"]["subject"] == "Technology"
        assert data["meta"]["subCategory"] == "Programming"
        assert data["meta"]["difficulty"] == "Medium"
        assert data["meta"]["count"] == 5
        assert "generatedAt" in data["meta"]
        assert fake_cache.data == {}

    @pytest.mark.asyncio
    async def test_sample_questions_invalid_pair(self, client: AsyncClient):
        response = await client.post(
            "/api/questions/sample",
            json={"subject": "Sports", "subCategory": "Chemistry", "difficulty": "Easy", "count": 3},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid subject or subcategory"

    @pytest.mark.asyncio
    async def test_sample_questions_generator_outage(self, client: AsyncClient, fake_cache):
        from app.api.deps import get_question_service
        from app.main import app

        app.dependency_overrides[get_question_service] = lambda: QuestionService(
            generator=failing_generator, cache=fake_cache
        )

        response = await client.post(
            "/api/questions/sample",
            json={"subject": "Science", "subCategory": "Physics", "difficulty": "Hard"},
        )

        assert response.status_code == 503
