"""Common Pydantic schemas."""

from typing import Any, Dict, Literal

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: Dict[str, Any] = Field(
        ...,
        examples=[
            {
                "code": "NOT_FOUND",
                "message": "Learning path not found",
                "details": {},
            }
        ],
    )


class HealthStatus(BaseModel):
    status: Literal["healthy", "degraded"]
    service: str = "microguide"
    database: bool
