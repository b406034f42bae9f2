"""
Question service
Subject catalogue plus question sets served from cache or a pluggable generator
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from app.core.cache import QuestionCache, question_cache, question_set_key
from app.core.exceptions import UpstreamServiceException, ValidationException
from app.models.quiz_result import Difficulty

logger = logging.getLogger(__name__)

Question = Dict[str, Any]
QuestionGenerator = Callable[[str, str, Difficulty, int], Awaitable[List[Question]]]

SUBJECT_CATEGORIES: Dict[str, List[str]] = {
    "Technology": [
        "Programming", "Web Development", "Mobile Development", "AI & Machine Learning",
        "Data Science", "Cybersecurity", "Cloud Computing", "DevOps", "Blockchain",
        "Internet of Things", "Software Engineering", "Database Management",
    ],
    "Science": [
        "Physics", "Chemistry", "Biology", "Mathematics", "Astronomy",
        "Environmental Science", "Geology", "Medicine", "Genetics", "Botany",
    ],
    "Sports": [
        "Football", "Basketball", "Cricket", "Tennis", "Olympics",
        "Formula 1", "Swimming", "Athletics", "Golf", "Baseball",
    ],
    "History": [
        "World Wars", "Ancient Civilizations", "Medieval History", "Modern History",
        "American History", "European History", "Asian History", "African History",
    ],
    "Geography": [
        "World Capitals", "Countries & Continents", "Natural Landmarks", "Climate",
        "Population & Demographics", "Physical Geography", "Political Geography",
    ],
    "Entertainment": [
        "Movies", "Music", "TV Shows", "Books & Literature", "Gaming",
        "Celebrity Trivia", "Awards & Festivals", "Comic Books",
    ],
    "Politics": [
        "World Politics", "Government Systems", "Political Leaders", "Elections",
        "International Relations", "Political Parties", "Constitutional Law",
    ],
    "Business": [
        "Economics", "Finance", "Marketing", "Management", "Entrepreneurship",
        "Stock Market", "Cryptocurrency", "Business Strategy",
    ],
}

# (question, options, correct answer, explanation)
QUESTION_BANK: Dict[Tuple[str, str], List[Tuple[str, List[str], str, str]]] = {
    ("Technology", "Programming"): [
        ("Which programming language is known as the 'language of the web'?",
         ["Python", "JavaScript", "Java", "C++"], "JavaScript",
         "JavaScript runs in web browsers and is the main language for interactive websites."),
        ("What does HTML stand for?",
         ["Hypertext Markup Language", "High Tech Modern Language",
          "Home Tool Markup Language", "Hyperlink and Text Markup Language"],
         "Hypertext Markup Language",
         "HTML is the standard markup language for creating web pages."),
        ("Which of the following is a Python web framework?",
         ["Django", "React", "Angular", "Vue"], "Django",
         "Django is a high-level Python web framework."),
        ("What does CSS stand for?",
         ["Computer Style Sheets", "Cascading Style Sheets", "Creative Style Sheets", "Colorful Style Sheets"],
         "Cascading Style Sheets",
         "CSS describes the presentation of documents written in HTML or XML."),
    ],
    ("Technology", "Web Development"): [
        ("Which HTTP method is used to submit data to be processed?",
         ["GET", "POST", "PUT", "DELETE"], "POST",
         "POST submits data to a resource, often changing server state."),
        ("What is the default port for HTTPS?",
         ["80", "443", "8080", "3000"], "443",
         "HTTPS uses port 443 by default, while HTTP uses port 80."),
    ],
    ("Science", "Physics"): [
        ("What is the speed of light in vacuum?",
         ["300,000 km/s", "299,792,458 m/s", "186,000 miles/h", "150,000 km/s"], "299,792,458 m/s",
         "The speed of light in vacuum is exactly 299,792,458 metres per second."),
        ("What is the formula for kinetic energy?",
         ["KE = mv", "KE = ½mv²", "KE = m²v", "KE = mv²"], "KE = ½mv²",
         "Kinetic energy is one-half the mass times the velocity squared."),
    ],
    ("Science", "Chemistry"): [
        ("What is the chemical symbol for gold?", ["Go", "Gd", "Au", "Ag"], "Au",
         "Gold's symbol Au comes from the Latin 'aurum'."),
        ("How many protons does a carbon atom have?", ["4", "6", "8", "12"], "6",
         "Carbon is element number 6, so it has 6 protons."),
    ],
    ("Sports", "Football"): [
        ("How many players are on a football field for one team at a time?",
         ["10", "11", "12", "9"], "11",
         "Each football team has 11 players on the field during play."),
        ("Which country won the 2018 FIFA World Cup?",
         ["Brazil", "Germany", "France", "Argentina"], "France",
         "France beat Croatia 4-2 in the 2018 final in Russia."),
    ],
    ("Sports", "Basketball"): [
        ("How many points is a three-pointer worth in basketball?", ["2", "3", "4", "1"], "3",
         "A shot from beyond the three-point line is worth 3 points."),
    ],
    ("History", "World Wars"): [
        ("In which year did World War II end?", ["1944", "1945", "1946", "1947"], "1945",
         "World War II ended in 1945 with the surrender of Japan in September."),
    ],
    ("Geography", "World Capitals"): [
        ("What is the capital of Australia?", ["Sydney", "Melbourne", "Canberra", "Perth"], "Canberra",
         "Canberra is in the Australian Capital Territory."),
    ],
}


def is_valid_subject_category(subject: str, sub_category: str) -> bool:
    return sub_category in SUBJECT_CATEGORIES.get(subject, [])


def _generic_questions(subject: str, sub_category: str, difficulty: Difficulty, count: int) -> List[Question]:
    questions = []
    for i in range(count):
        options = [f"Option {letter} for {sub_category}" for letter in "ABCD"]
        questions.append(
            {
                "question": f"Sample {difficulty.value} question {i + 1} about {sub_category} in {subject}?",
                "options": options,
                "correctAnswer": options[i % 4],
                "explanation": (
                    f"Sample explanation for a {difficulty.value} level question "
                    f"about {sub_category} in {subject}."
                ),
                "category": sub_category,
                "difficulty": difficulty.value,
            }
        )
    return questions


def fallback_questions(subject: str, sub_category: str, difficulty: Difficulty, count: int) -> List[Question]:
    """
    Questions from the built-in bank, repeated with a numbered suffix when the
    bank is shorter than ``count``; generic placeholders for unknown categories
    """
    bank = QUESTION_BANK.get((subject, sub_category))
    if not bank:
        return _generic_questions(subject, sub_category, difficulty, count)

    questions = []
    for i in range(count):
        text, options, answer, explanation = bank[i % len(bank)]
        if i >= len(bank):
            text = f"{text} (Question {i + 1})"
        questions.append(
            {
                "question": text,
                "options": list(options),
                "correctAnswer": answer,
                "explanation": explanation,
                "category": sub_category,
                "difficulty": difficulty.value,
            }
        )
    return questions


def number_questions(questions: List[Question]) -> List[Question]:
    """Attach 1-based ``id`` and ``questionNumber`` to each question"""
    return [{**question, "id": number, "questionNumber": number} for number, question in enumerate(questions, 1)]


async def fallback_generator(
    subject: str, sub_category: str, difficulty: Difficulty, count: int
) -> List[Question]:
    return fallback_questions(subject, sub_category, difficulty, count)


class QuestionService:
    """Serves question sets, caching each generated set per subject/category/difficulty"""

    def __init__(
        self,
        generator: Optional[QuestionGenerator] = None,
        cache: Optional[QuestionCache] = None,
    ):
        self.generator = generator or fallback_generator
        self.cache = cache or question_cache

    @staticmethod
    def get_subject_categories() -> Dict[str, List[str]]:
        return SUBJECT_CATEGORIES

    @staticmethod
    def get_categories(subject: str) -> Optional[List[str]]:
        return SUBJECT_CATEGORIES.get(subject)

    async def get_questions(
        self, subject: str, sub_category: str, difficulty: Difficulty, count: int
    ) -> Tuple[List[Question], bool]:
        """
        Questions numbered from 1, and whether they came from the cache

        Raises:
            ValidationException: unknown subject/sub-category pair
            UpstreamServiceException: the generator failed or produced nothing
        """
        self._check_subject_category(subject, sub_category)

        key = question_set_key(subject, sub_category, difficulty.value)
        questions = await self.cache.load(key)
        from_cache = bool(questions) and len(questions) >= count

        if from_cache:
            logger.debug(f"Using cached questions for {key}")
        else:
            questions = await self._generate(subject, sub_category, difficulty, count)
            await self.cache.save(key, questions)

        return number_questions(questions[:count]), from_cache

    async def sample_questions(
        self, subject: str, sub_category: str, difficulty: Difficulty, count: int
    ) -> List[Question]:
        """A freshly generated, numbered set that bypasses the cache"""
        self._check_subject_category(subject, sub_category)
        return number_questions(await self._generate(subject, sub_category, difficulty, count))

    @staticmethod
    def _check_subject_category(subject: str, sub_category: str) -> None:
        if not is_valid_subject_category(subject, sub_category):
            raise ValidationException(
                "Invalid subject or subcategory",
                details={"subject": subject, "subCategory": sub_category},
            )

    async def _generate(
        self, subject: str, sub_category: str, difficulty: Difficulty, count: int
    ) -> List[Question]:
        logger.info(f"Generating {count} questions for {subject}/{sub_category} ({difficulty.value})")
        try:
            questions = await self.generator(subject, sub_category, difficulty, count)
        except UpstreamServiceException:
            raise
        except Exception as e:
            logger.error(f"Question generation failed: {e}", exc_info=True)
            raise UpstreamServiceException("Question generator", "failed to generate questions") from e

        if not questions:
            raise UpstreamServiceException("Question generator", "no questions available")
        return questions


question_service = QuestionService()
