"""
Error Response Schemas

The JSON envelope every relay error is rendered in.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """``{ "error": string, "details"?: string }``"""

    error: str = Field(..., description="Short, human readable error message")
    details: str | None = Field(None, description="Underlying provider or validation detail")
