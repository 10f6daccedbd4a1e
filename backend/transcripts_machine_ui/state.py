"""
UI state for the single-page front end.

The page state is an immutable snapshot; every change goes through one of the
transition functions below, driven by the outcome of an API call. Results are
tagged with the request id they belong to, so a result arriving after the user
submitted another URL is discarded instead of overwriting the newer state.
"""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from transcripts_machine.components.transcript_extractor.schemas import TranscriptSegment


class Phase(str, Enum):
    IDLE = "idle"
    SESSION_STARTING = "session_starting"
    EXTRACTING = "extracting"
    READY = "ready"
    SUMMARY_GENERATING = "summary_generating"
    SUMMARY_READY = "summary_ready"
    FAILED = "failed"


class InvalidTransition(RuntimeError):
    """A transition was requested from a phase that does not allow it."""


class UiState(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase: Phase = Phase.IDLE
    request_id: int = 0
    current_url: Optional[str] = None
    video_id: Optional[str] = None
    transcript: Tuple[TranscriptSegment, ...] = ()
    error: Optional[str] = None
    validation_error: Optional[str] = None
    summary: Optional[str] = None
    summary_error: Optional[str] = None
    debug_view_url: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.phase in (Phase.SESSION_STARTING, Phase.EXTRACTING)

    @property
    def is_summary_loading(self) -> bool:
        return self.phase is Phase.SUMMARY_GENERATING

    @property
    def show_debug_view(self) -> bool:
        """The live remote-browser view is only shown while extraction runs."""
        return self.phase is Phase.EXTRACTING and bool(self.debug_view_url)

    @property
    def has_transcript(self) -> bool:
        return bool(self.transcript)


def _require(state: UiState, *phases: Phase) -> None:
    if state.phase not in phases:
        allowed = ", ".join(phase.value for phase in phases)
        raise InvalidTransition(f"Cannot leave '{state.phase.value}' here (expected {allowed})")


def reject_url(state: UiState, message: str) -> UiState:
    """Validation failed client-side; nothing else changes."""
    return state.model_copy(update={"validation_error": message})


def submit(state: UiState, url: str, video_id: Optional[str]) -> UiState:
    """A new (or repeated) URL was submitted: reset everything and start over."""
    return UiState(
        phase=Phase.SESSION_STARTING,
        request_id=state.request_id + 1,
        current_url=url,
        video_id=video_id,
    )


def session_opened(state: UiState, request_id: int, debug_view_url: str) -> UiState:
    if request_id != state.request_id:
        return state
    _require(state, Phase.SESSION_STARTING)
    return state.model_copy(
        update={"phase": Phase.EXTRACTING, "debug_view_url": debug_view_url}
    )


def extraction_succeeded(
    state: UiState, request_id: int, transcript: Tuple[TranscriptSegment, ...]
) -> UiState:
    if request_id != state.request_id:
        return state
    _require(state, Phase.EXTRACTING)
    return state.model_copy(
        update={
            "phase": Phase.READY,
            "transcript": tuple(transcript),
            "debug_view_url": None,
        }
    )


def request_failed(state: UiState, request_id: int, message: str) -> UiState:
    """Session opening or extraction failed: no partial transcript is kept."""
    if request_id != state.request_id:
        return state
    _require(state, Phase.SESSION_STARTING, Phase.EXTRACTING)
    return state.model_copy(
        update={
            "phase": Phase.FAILED,
            "error": message,
            "transcript": (),
            "debug_view_url": None,
        }
    )


def summary_requested(state: UiState) -> UiState:
    """Start summary generation; a no-op without a transcript."""
    if not state.transcript or state.phase not in (Phase.READY, Phase.SUMMARY_READY):
        return state
    return state.model_copy(
        update={"phase": Phase.SUMMARY_GENERATING, "summary_error": None}
    )


def summary_succeeded(state: UiState, request_id: int, summary: str) -> UiState:
    if request_id != state.request_id:
        return state
    _require(state, Phase.SUMMARY_GENERATING)
    return state.model_copy(update={"phase": Phase.SUMMARY_READY, "summary": summary})


def summary_failed(state: UiState, request_id: int, message: str) -> UiState:
    """The transcript stays on screen; only the summary panel shows the error."""
    if request_id != state.request_id:
        return state
    _require(state, Phase.SUMMARY_GENERATING)
    return state.model_copy(update={"phase": Phase.READY, "summary_error": message})


def reset(state: UiState) -> UiState:
    return UiState(request_id=state.request_id + 1)
