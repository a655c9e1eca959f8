"""Exception handlers rendering every failure as Problem Details."""

import logging
from typing import Any, Dict, List, Union
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import ValidationError

from .problem_details import ProblemDetailException, create_problem_response

logger = logging.getLogger(__name__)

STATUS_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
    504: "Gateway Timeout"
}


def _summarize_errors(errors: List[Dict[str, Any]]) -> tuple[str, List[Dict[str, Any]]]:
    """Flatten pydantic errors into a message and a JSON-safe list."""
    messages = []
    cleaned = []
    for error in errors:
        loc = " -> ".join(str(x) for x in error["loc"])
        messages.append(f"{loc}: {error['msg']}")
        # ctx may hold exception instances that are not JSON serializable
        cleaned.append({
            "loc": [str(x) for x in error["loc"]],
            "msg": error["msg"],
            "type": error["type"]
        })
    return "; ".join(messages), cleaned


async def problem_detail_exception_handler(
    request: Request, 
    exc: ProblemDetailException
) -> JSONResponse:
    """Handle ProblemDetailException instances."""
    logger.info(
        f"Problem detail exception: {exc.status} - {exc.title}",
        extra={
            "status_code": exc.status,
            "path": str(request.url.path),
            "method": request.method
        }
    )
    return exc.to_response(request)


async def http_exception_handler(
    request: Request, 
    exc: Union[HTTPException, StarletteHTTPException]
) -> JSONResponse:
    """Handle FastAPI and Starlette HTTP exceptions."""
    logger.info(f"HTTP exception: {exc.status_code} - {exc.detail}")
    
    response = create_problem_response(
        status=exc.status_code,
        title=STATUS_TITLES.get(exc.status_code, "HTTP Error"),
        detail=str(exc.detail) if exc.detail else None,
        request=request
    )
    for key, value in (getattr(exc, "headers", None) or {}).items():
        response.headers[key] = value
    return response


async def validation_exception_handler(
    request: Request, 
    exc: RequestValidationError
) -> JSONResponse:
    """Reject malformed pagination parameters with a 422."""
    detail, errors = _summarize_errors(exc.errors())
    logger.info(f"Request validation failed on {request.url.path}: {detail}")
    
    return create_problem_response(
        status=422,
        title="Validation Error",
        detail="Validation failed: " + detail,
        request=request,
        validation_errors=errors
    )


async def pydantic_validation_exception_handler(
    request: Request,
    exc: ValidationError
) -> JSONResponse:
    """Handle pydantic errors raised outside request parsing."""
    detail, errors = _summarize_errors(exc.errors())
    logger.info(f"Data validation failed on {request.url.path}: {detail}")
    
    return create_problem_response(
        status=400,
        title="Validation Error",
        detail="Data validation failed: " + detail,
        request=request,
        validation_errors=errors
    )


async def general_exception_handler(
    request: Request, 
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__} - {str(exc)}",
        extra={
            "path": str(request.url.path),
            "method": request.method
        },
        exc_info=True
    )
    
    # Internal error details stay in the logs
    return create_problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred",
        request=request
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(ProblemDetailException, problem_detail_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
