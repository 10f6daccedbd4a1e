from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy"] = "healthy"
    version: str
    browserbase_configured: bool = Field(
        default=False, description="Browserbase API key and project id are set"
    )
    models_configured: bool = Field(
        default=False, description="OpenAI and Google API keys are set"
    )


class SessionResponse(BaseModel):
    """A freshly opened remote browser session."""

    session_id: str = Field(..., description="Browserbase session id")
    debug_view_url: str = Field(..., description="Live view of the remote browser")


class SummaryResponse(BaseModel):
    summary: str


class CancelResponse(BaseModel):
    cancelled: bool = Field(..., description="Whether an in-flight extraction was found")


class ProgressUpdate(BaseModel):
    """SSE progress update during extraction."""

    step: str = Field(..., description="Current step identifier")
    message: str = Field(..., description="Human-readable progress message")
    progress: int = Field(
        ..., ge=0, le=100, description="Completion percentage (0-100)"
    )
    data: dict | None = Field(default=None, description="Optional step-specific data")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "step": "opening_transcript",
                "message": "Opening the transcript panel...",
                "progress": 50,
                "data": None,
            }
        }
    )


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    detail: str | None = Field(default=None, description="Additional error details")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "ValidationError",
                "message": "Please enter a valid YouTube URL",
                "detail": None,
            }
        }
    )
