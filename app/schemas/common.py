"""Shared response schemas"""

from typing import Annotated, Any, Generic, Optional, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from app.models.quiz_result import Difficulty

T = TypeVar("T")


def _parse_difficulty(value: Any) -> Any:
    return Difficulty.parse(value) if isinstance(value, str) else value


# Accepts any casing on input ("hard", "HARD"), always emits "Hard"
DifficultyField = Annotated[Difficulty, BeforeValidator(_parse_difficulty)]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(CamelModel, Generic[T]):
    """Envelope wrapping every successful response"""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class PaginationInfo(CamelModel):
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool

    @classmethod
    def from_page(cls, page) -> "PaginationInfo":
        return cls(
            current_page=page.current_page,
            total_pages=page.total_pages,
            total_count=page.total_count,
            has_next=page.has_next,
            has_prev=page.has_prev,
        )
