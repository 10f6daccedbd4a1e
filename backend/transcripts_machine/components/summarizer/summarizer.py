import asyncio
import logging
from typing import Optional, Sequence

from pydantic_ai import Agent

from transcripts_machine.components.transcript_extractor.schemas import TranscriptSegment
from transcripts_machine.core.errors import SummarizationError
from transcripts_machine.models.config import SUMMARIZER_MODEL
from transcripts_machine.models.llm import get_model

_logger = logging.getLogger(__name__)

DEFAULT_SUMMARY_TIMEOUT = 60.0


def _get_summarizer_agent() -> Agent:
    """Get the free-text summarizer agent instance."""
    return Agent(model=get_model(SUMMARIZER_MODEL), output_type=str)


def build_summary_prompt(transcript: Sequence[TranscriptSegment]) -> str:
    lines = "\n".join(f"{segment.timestamp} {segment.text}" for segment in transcript)
    return (
        "Please provide a concise summary of the following video transcript. "
        "Focus on the main topics, key points, and important takeaways.\n"
        "TRANSCRIPT:\n"
        f"{lines}"
    )


async def summarize(
    transcript: Sequence[TranscriptSegment], *, timeout: Optional[float] = None
) -> str:
    """
    Summarize an ordered transcript in a few paragraphs.

    Each call is independent; output differs between calls for the same input.

    Raises:
        SummarizationError: empty transcript (no model call is made), upstream
            failure or timeout
    """
    if not transcript:
        raise SummarizationError("Cannot summarize an empty transcript")

    timeout = timeout or DEFAULT_SUMMARY_TIMEOUT
    try:
        agent = _get_summarizer_agent()
        result = await asyncio.wait_for(
            agent.run(build_summary_prompt(transcript)), timeout
        )
    except asyncio.TimeoutError as exc:
        _logger.error("Summary generation timed out after %.0fs", timeout)
        raise SummarizationError(
            f"Summary generation timed out after {timeout:.0f}s"
        ) from exc
    except Exception as exc:
        _logger.error("Summary generation failed: %s", exc)
        raise SummarizationError(f"Failed to generate summary: {exc}") from exc

    summary = result.output.strip()
    if not summary:
        raise SummarizationError("The model returned an empty summary")
    _logger.info("Generated summary (%d chars) for %d segments", len(summary), len(transcript))
    return summary
