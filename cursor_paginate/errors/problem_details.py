"""Problem Details (RFC 9457) errors raised by the stores and the HTTP layer."""

from typing import Optional, Any
from pydantic import BaseModel, Field
from fastapi import Request
from fastapi.responses import JSONResponse


PROBLEM_JSON = "application/problem+json"


class ProblemDetail(BaseModel):
    """Problem Details body as defined in RFC 9457."""
    
    type: str = Field(default="about:blank", description="URI reference identifying the problem type")
    title: str = Field(description="Short summary of the problem type")
    status: int = Field(description="HTTP status code")
    detail: Optional[str] = Field(default=None, description="Explanation specific to this occurrence")
    instance: Optional[str] = Field(default=None, description="URI reference of the failing request")
    
    # Extension members are carried as extra fields
    model_config = {"extra": "allow"}


def _build_problem(
    status: int,
    title: str,
    detail: Optional[str],
    type_uri: str,
    instance: Optional[str],
    request: Optional[Request],
    extensions: dict[str, Any]
) -> ProblemDetail:
    if instance is None and request is not None:
        instance = str(request.url.path)
    return ProblemDetail(
        type=type_uri,
        title=title,
        status=status,
        detail=detail,
        instance=instance,
        **extensions
    )


class ProblemDetailException(Exception):
    """Base exception rendered as a Problem Details response.
    
    Subclasses pin ``status``, ``title`` and an optional ``default_detail``;
    the base class can also be raised directly with explicit values.
    """
    
    status: int = 500
    title: str = "Internal Server Error"
    default_detail: Optional[str] = None
    
    def __init__(
        self,
        detail: Optional[str] = None,
        *,
        status: Optional[int] = None,
        title: Optional[str] = None,
        type_uri: str = "about:blank",
        instance: Optional[str] = None,
        **extensions: Any
    ):
        if status is not None:
            self.status = status
        if title is not None:
            self.title = title
        self.detail = detail if detail is not None else self.default_detail
        self.type_uri = type_uri
        self.instance = instance
        self.extensions = extensions
        super().__init__(self.detail or self.title)
    
    def to_problem_detail(self, request: Optional[Request] = None) -> ProblemDetail:
        """Convert to a ProblemDetail model."""
        return _build_problem(
            self.status, self.title, self.detail, self.type_uri,
            self.instance, request, self.extensions
        )
    
    def to_response(self, request: Optional[Request] = None) -> JSONResponse:
        """Render as an ``application/problem+json`` response."""
        problem = self.to_problem_detail(request)
        return JSONResponse(
            status_code=self.status,
            content=problem.model_dump(mode="json", exclude_none=True),
            headers={"Content-Type": PROBLEM_JSON}
        )


class BadRequestError(ProblemDetailException):
    """400 Bad Request error."""
    
    status = 400
    title = "Bad Request"


class InternalServerError(ProblemDetailException):
    """500 Internal Server Error."""
    
    status = 500
    title = "Internal Server Error"
    default_detail = "Internal server error"


class ServiceUnavailableError(ProblemDetailException):
    """503 Service Unavailable error."""
    
    status = 503
    title = "Service Unavailable"
    default_detail = "Service temporarily unavailable"


def create_problem_response(
    status: int,
    title: str,
    detail: Optional[str] = None,
    type_uri: str = "about:blank",
    instance: Optional[str] = None,
    request: Optional[Request] = None,
    **extensions: Any
) -> JSONResponse:
    """Create a Problem Details response without raising."""
    problem = _build_problem(status, title, detail, type_uri, instance, request, extensions)
    return JSONResponse(
        status_code=status,
        content=problem.model_dump(mode="json", exclude_none=True),
        headers={"Content-Type": PROBLEM_JSON}
    )
