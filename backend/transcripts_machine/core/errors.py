class TranscriptsMachineError(Exception):
    """Base class for every error raised by the transcripts pipeline."""


class ValidationError(TranscriptsMachineError, ValueError):
    """Input URL does not look like a YouTube video URL."""


class SessionCreationError(TranscriptsMachineError):
    """Remote browser session could not be created."""


class SessionNotFoundError(TranscriptsMachineError):
    """No pending session with that id; it is unknown or was already used."""


class ExtractionError(TranscriptsMachineError):
    """Transcript extraction failed; the remote session has been released."""


class NavigationError(ExtractionError):
    """The remote page failed to load the video."""


class ActionFallbackExhausted(ExtractionError):
    """Both the selector-based action and its AI fallback failed."""

    def __init__(self, step: str, primary: Exception, fallback: Exception):
        self.step = step
        self.primary = primary
        self.fallback = fallback
        super().__init__(
            f"Step '{step}' failed: selector action ({primary}) "
            f"and AI fallback ({fallback})"
        )


class StructuringError(ExtractionError):
    """The structuring model call failed or produced an unusable transcript."""


class ExtractionCancelled(ExtractionError):
    """Extraction was cancelled, usually because a newer request superseded it."""


class SummarizationError(TranscriptsMachineError):
    """The summary model call failed."""


class StepTimeoutError(TranscriptsMachineError, TimeoutError):
    """A single suspension point exceeded its time budget."""

    def __init__(self, step: str, timeout: float):
        self.step = step
        self.timeout = timeout
        super().__init__(f"Step '{step}' timed out after {timeout:.1f}s")
