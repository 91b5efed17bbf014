"""Uniform response envelope."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Generic, List, Optional, TypeVar

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True
    )


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope returned by every endpoint."""
    statusCode: int
    data: Optional[T] = None
    message: str = "Success"
    success: bool = True


class ErrorResponse(BaseModel):
    """Failure envelope."""
    statusCode: int
    data: None = None
    message: str
    success: bool = False
    errors: List[Any] = Field(default_factory=list)


class Page(CamelModel, Generic[T]):
    """One page of a paginated listing."""
    items: List[T]
    total: int
    page: int
    limit: int
    total_pages: int


def api_response(status_code: int, data: Any = None, message: str = "Success") -> ApiResponse:
    """
    Build a success envelope.

    Args:
        status_code: HTTP status code echoed in the body
        data: Payload
        message: Human readable message

    Returns:
        ApiResponse instance
    """
    return ApiResponse(
        statusCode=status_code,
        data=data,
        message=message,
        success=status_code < 400
    )


def error_body(status_code: int, message: str, errors: Optional[List[Any]] = None) -> dict:
    """Serialise the failure envelope for a JSONResponse."""
    return ErrorResponse(statusCode=status_code, message=message, errors=errors or []).model_dump()
