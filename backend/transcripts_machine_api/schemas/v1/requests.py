from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from transcripts_machine.components.transcript_extractor.schemas import TranscriptSegment


class TranscriptRequest(BaseModel):
    """Request schema for extracting a transcript with an already opened session."""

    video_url: str = Field(
        ...,
        description="YouTube video URL",
        examples=["https://www.youtube.com/watch?v=dQw4w9WgXcQ"],
    )
    session_id: str = Field(..., description="Session returned by POST /sessions")
    client_id: Optional[str] = Field(
        default=None,
        description="Caller identity; a newer request from the same client cancels older ones",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "video_url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
                "session_id": "0f6a3c9e-5d2b-4c0a-9a43-6c3f8d7f1b21",
                "client_id": "browser-tab-1",
            }
        }
    )


class TranscriptStreamRequest(BaseModel):
    """Request schema for the streaming endpoint, which opens its own session."""

    video_url: str = Field(
        ...,
        description="YouTube video URL",
        examples=["https://www.youtube.com/watch?v=dQw4w9WgXcQ"],
    )
    client_id: Optional[str] = Field(default=None, description="Caller identity")
    with_summary: bool = Field(
        default=False, description="Generate an AI summary after extraction"
    )


class SummaryRequest(BaseModel):
    """Request schema for summarizing an extracted transcript."""

    transcript: List[TranscriptSegment] = Field(
        ..., description="Ordered transcript segments"
    )
