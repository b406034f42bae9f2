"""
Rate limiting for QuizBoard
"""

from fastapi import FastAPI, Request, status
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from app.core.config import settings
from app.core.exceptions import error_envelope


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Answer in the usual error envelope"""
    return error_envelope(
        request=request,
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        error_code="RATE_LIMIT_ERROR",
        message="Too many requests. Please try again later.",
        details={"limit": str(exc.detail)},
    )


def add_rate_limiting(app: FastAPI) -> Limiter:
    """Apply the configured per-client limit to every route"""
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[f"{settings.RATE_LIMIT_REQUESTS}/{settings.RATE_LIMIT_PERIOD} seconds"],
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    return limiter
