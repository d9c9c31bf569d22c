"""Common Pydantic schemas."""

from typing import Any, Dict

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: Dict[str, Any] = Field(
        ...,
        examples=[
            {
                "code": "PROBLEM_NOT_FOUND",
                "message": "Problem not found",
            }
        ],
    )


def error_detail(code: str, message: str) -> Dict[str, Any]:
    """Body for ``HTTPException(detail=...)``."""
    return {"code": code, "message": message}
