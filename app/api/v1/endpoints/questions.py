"""
Question catalogue endpoints
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.api.deps import get_question_service
from app.core.exceptions import NotFoundException
from app.schemas.common import ApiResponse
from app.schemas.questions import (
    SampleQuestionsMeta,
    SampleQuestionsRequest,
    SampleQuestionsResponse,
    SubjectCategoriesResponse,
    SubjectListResponse,
    SubjectResponse,
    SubjectValidationRequest,
    SubjectValidationResponse,
)
from app.services.questions import QuestionService, is_valid_subject_category

router = APIRouter()


@router.get("/subjects", response_model=ApiResponse[SubjectListResponse])
async def get_subjects(service: QuestionService = Depends(get_question_service)):
    """Get available subjects and their categories"""
    catalogue = service.get_subject_categories()
    return ApiResponse(
        data=SubjectListResponse(
            subjects=[SubjectResponse(name=name, categories=categories) for name, categories in catalogue.items()],
            total_subjects=len(catalogue),
            total_categories=sum(len(categories) for categories in catalogue.values()),
        )
    )


@router.get("/subjects/{subject}/categories", response_model=ApiResponse[SubjectCategoriesResponse])
async def get_subject_categories(subject: str, service: QuestionService = Depends(get_question_service)):
    """Get categories for a specific subject"""
    categories = service.get_categories(subject)
    if categories is None:
        raise NotFoundException("Subject not found", details={"subject": subject})
    return ApiResponse(data=SubjectCategoriesResponse(subject=subject, categories=categories))


@router.post("/validate", response_model=ApiResponse[SubjectValidationResponse])
async def validate_subject_category(request: SubjectValidationRequest):
    """Check whether a subject and sub-category combination exists"""
    return ApiResponse(
        data=SubjectValidationResponse(
            is_valid=is_valid_subject_category(request.subject, request.sub_category),
            subject=request.subject,
            sub_category=request.sub_category,
        )
    )


@router.post("/sample", response_model=ApiResponse[SampleQuestionsResponse])
async def generate_sample_questions(
    request: SampleQuestionsRequest,
    service: QuestionService = Depends(get_question_service),
):
    """Generate a numbered question set without touching the cache"""
    questions = await service.sample_questions(
        request.subject, request.sub_category, request.difficulty, request.count
    )
    return ApiResponse(
        data=SampleQuestionsResponse(
            questions=questions,
            meta=SampleQuestionsMeta(
                subject=request.subject,
                sub_category=request.sub_category,
                difficulty=request.difficulty,
                count=len(questions),
                generated_at=datetime.now(timezone.utc),
            ),
        )
    )
