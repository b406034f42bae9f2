"""
Application errors and the handlers that turn them into JSON responses
Every failure leaves the API in the {success: false, message, error} envelope
"""

import logging
from typing import Any, Dict, Optional

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings

logger = logging.getLogger(__name__)

# Locations FastAPI prefixes to every validation error
_REQUEST_PARTS = ("body", "query", "path", "header")


class QuizBoardException(Exception):
    """Base for errors that carry their own HTTP status and error code"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationException(QuizBoardException):
    """Malformed or missing input, rejected before any write"""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class NotFoundException(QuizBoardException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class StorageException(QuizBoardException):
    """Result store could not complete an append or query"""

    error_code = "STORAGE_ERROR"

    def __init__(self, message: str = "Storage operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class UpstreamServiceException(QuizBoardException):
    """Question generation or another collaborator outside this service failed"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "UPSTREAM_SERVICE_ERROR"

    def __init__(
        self,
        service: str,
        message: str = "Upstream service error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(f"{service}: {message}", details)
        self.service = service


def error_envelope(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """
    Build an error response

    Args:
        request: Request being answered; its ID is echoed when the logging
            middleware assigned one
        status_code: HTTP status code
        error_code: Machine-readable code, e.g. ``NOT_FOUND``
        message: Human-readable summary
        details: Extra context for the client

    Returns:
        JSONResponse with ``success`` set to false
    """
    error = {"code": error_code, "details": details or {}}
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        error["request_id"] = request_id

    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": error},
    )


def _field_path(loc) -> str:
    return ".".join(str(part) for part in loc if part not in _REQUEST_PARTS)


def describe_validation_error(error: Dict[str, Any]) -> str:
    """Render one pydantic error as ``"field" message``"""
    field = _field_path(error.get("loc", ()))
    return f'"{field}" {error["msg"]}' if field else error["msg"]


async def handle_quizboard_exception(request: Request, exc: QuizBoardException) -> JSONResponse:
    context = {"error_code": exc.error_code, "status_code": exc.status_code, "path": request.url.path}

    if exc.status_code >= 500:
        logger.error(f"{exc.error_code}: {exc.message}", extra=context, exc_info=exc)
        if settings.SENTRY_DSN:
            sentry_sdk.capture_exception(exc)
    elif exc.status_code == status.HTTP_404_NOT_FOUND:
        logger.info(f"Not found: {exc.message}", extra=context)
    else:
        logger.warning(f"Rejected request: {exc.message}", extra=context)

    return error_envelope(request, exc.status_code, exc.error_code, exc.message, exc.details)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes and unsupported methods"""
    logger.warning(
        f"HTTP {exc.status_code} for {request.method} {request.url.path}: {exc.detail}",
        extra={"status_code": exc.status_code},
    )
    return error_envelope(request, exc.status_code, "HTTP_ERROR", str(exc.detail))


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Bad bodies, query strings and path parameters all answer 400

    The first problem becomes the message; every problem is listed in details.
    """
    problems = exc.errors()
    errors = [{"field": _field_path(p["loc"]), "message": p["msg"]} for p in problems]
    logger.warning(f"Invalid request to {request.url.path}", extra={"errors": errors})

    message = describe_validation_error(problems[0]) if problems else "Request validation failed"
    return error_envelope(
        request,
        status.HTTP_400_BAD_REQUEST,
        ValidationException.error_code,
        message,
        {"errors": errors},
    )


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    if settings.SENTRY_DSN:
        sentry_sdk.capture_exception(exc)

    # Internal details stay server-side outside debug mode
    message = str(exc) if settings.DEBUG else "An unexpected error occurred"
    return error_envelope(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(QuizBoardException, handle_quizboard_exception)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected_exception)
