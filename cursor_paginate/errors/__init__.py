"""Error handling module for the cursor pagination service."""

from .problem_details import (
    ProblemDetail,
    ProblemDetailException,
    BadRequestError,
    InternalServerError,
    ServiceUnavailableError,
    create_problem_response
)
from .handlers import register_exception_handlers

__all__ = [
    "ProblemDetail",
    "ProblemDetailException",
    "BadRequestError",
    "InternalServerError",
    "ServiceUnavailableError",
    "create_problem_response",
    "register_exception_handlers"
]
