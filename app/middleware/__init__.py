"""Middleware modules for QuizBoard Backend"""

from .cors import setup_cors
from .logging_middleware import RequestLoggingMiddleware
from .rate_limit import add_rate_limiting
from .security_headers import SecurityHeadersMiddleware

__all__ = [
    "setup_cors",
    "add_rate_limiting",
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
]
