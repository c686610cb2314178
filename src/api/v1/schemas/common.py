"""Common Pydantic schemas shared across the API."""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standardized error response."""

    error_code: str
    error: str
    details: Any | None = None


class SuccessResponse(BaseModel):
    """Outcome of a workflow action."""

    success: str
