from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from transcripts_machine.components.url_validator.validator import timestamp_to_seconds

TIMESTAMP_PATTERN = r"^\d{1,2}:\d{2}(:\d{2})?$"


class TranscriptSegment(BaseModel):
    """A single timestamped line of a video transcript."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1, description="transcript text")
    timestamp: str = Field(
        pattern=TIMESTAMP_PATTERN,
        description="timestamp in MM:SS format (HH:MM:SS past the first hour)",
    )

    @property
    def seconds(self) -> int:
        return timestamp_to_seconds(self.timestamp)


class StructuredTranscript(BaseModel):
    """Schema the structuring model must fill in."""

    transcripts: List[TranscriptSegment] = Field(
        description="All transcript entries in ascending timestamp order"
    )


class ExtractionResult(BaseModel):
    """
    Ordered transcript returned by one extraction run.

    The content is best-effort: the page fallbacks and the structuring call are
    non-deterministic model calls, so two runs over the same video describe the
    same speech but may split or time segments differently.
    """

    model_config = ConfigDict(frozen=True)

    transcript: List[TranscriptSegment]
    video_id: str = Field(description="YouTube video id")
    session_id: str = Field(description="Browserbase session that produced it")
    fallback_steps: List[str] = Field(
        default_factory=list,
        description="Steps that needed the AI fallback action",
    )
    approximate: Literal[True] = Field(
        default=True, description="Always true: output is model-derived"
    )


def is_chronological(segments: List[TranscriptSegment]) -> bool:
    """True when timestamps never go backwards."""
    return all(
        earlier.seconds <= later.seconds
        for earlier, later in zip(segments, segments[1:])
    )


def transcripts_equivalent(
    first: ExtractionResult,
    second: ExtractionResult,
    count_tolerance: float = 0.2,
) -> bool:
    """
    Content-level comparison of two extraction runs.

    Byte equality is not expected between runs; instead both must describe the
    same video, be non-empty and chronological, and have segment counts within
    ``count_tolerance`` of each other.
    """
    if first.video_id != second.video_id:
        return False
    if not first.transcript or not second.transcript:
        return False
    if not (is_chronological(first.transcript) and is_chronological(second.transcript)):
        return False
    larger = max(len(first.transcript), len(second.transcript))
    difference = abs(len(first.transcript) - len(second.transcript))
    return difference <= count_tolerance * larger


class TranscriptRunOutput(BaseModel):
    """End-to-end output: session used, extracted transcript and optional summary."""

    session_id: str
    debug_view_url: str
    result: ExtractionResult
    summary: Optional[str] = None
    summary_error: Optional[str] = None
