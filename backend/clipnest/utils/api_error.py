"""Error type raised by routes and services."""

from fastapi import HTTPException, status
from typing import Any, List, Optional


class ApiError(HTTPException):
    """
    HTTP error rendered as the failure envelope.

    Subclasses HTTPException so anything FastAPI already does with ``detail``
    (docs, default handlers) keeps working; ``message`` and ``errors`` feed the
    envelope built in ``clipnest.main``.
    """

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        message: str = "Something went wrong",
        errors: Optional[List[Any]] = None,
        headers: Optional[dict] = None
    ):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.message = message
        self.errors = errors or []

    def __repr__(self):
        return f"<ApiError({self.status_code}, {self.message!r})>"


def not_found_or_unauthorized(kind: str) -> ApiError:
    """The single 404 shared by missing rows and rows owned by someone else."""
    return ApiError(status.HTTP_404_NOT_FOUND, f"{kind} not found or unauthorized")
