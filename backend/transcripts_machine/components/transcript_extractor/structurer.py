import logging
from typing import Sequence

from pydantic_ai import Agent
from pydantic_ai.exceptions import AgentRunError

from transcripts_machine.components.page_automation.schemas import ObservedElement
from transcripts_machine.components.transcript_extractor.schemas import (
    StructuredTranscript,
    TranscriptSegment,
    is_chronological,
)
from transcripts_machine.core.errors import StructuringError
from transcripts_machine.models.config import TRANSCRIPT_STRUCTURING_MODEL
from transcripts_machine.models.llm import get_model

_logger = logging.getLogger(__name__)


def _build_structuring_agent() -> Agent:
    """Agent whose output is validated against the transcript schema."""
    return Agent(
        model=get_model(TRANSCRIPT_STRUCTURING_MODEL),
        output_type=StructuredTranscript,  # type: ignore[arg-type]
        retries=3,
        system_prompt="""
        You turn loosely structured text scraped from a YouTube transcript panel into
        clean transcript entries.

        Every entry has:
        - text: the spoken words of that transcript line, verbatim, without the timestamp
        - timestamp: when the line starts, formatted MM:SS (use HH:MM:SS only past one hour)

        Keep every line, order entries by ascending timestamp and never invent text.
        """,
    )


def build_structuring_prompt(observations: Sequence[ObservedElement]) -> str:
    """Embed every observed fragment into the structuring prompt."""
    fragments = "\n".join(observation.description for observation in observations)
    return (
        "Give JSON of all transcript entries with their timestamps in proper "
        "ascending order from the following text.\n"
        "The timestamps should be in MM:SS format ONLY.\n"
        f"{fragments}"
    )


async def structure_transcript(
    observations: Sequence[ObservedElement],
) -> list[TranscriptSegment]:
    """
    Convert observed page fragments into ordered transcript segments.

    Raises:
        StructuringError: the model call failed, its output never matched the
            schema, or it produced no segments
    """
    if not observations:
        raise StructuringError("No transcript text was observed on the page")

    agent = _build_structuring_agent()
    prompt = build_structuring_prompt(observations)
    _logger.debug("Structuring prompt (%d chars)", len(prompt))

    try:
        result = await agent.run(prompt)
    except AgentRunError as exc:
        _logger.error("Transcript structuring failed: %s", exc)
        raise StructuringError(f"Transcript structuring failed: {exc}") from exc

    segments = list(result.output.transcripts)
    _logger.info("Structured %d transcript segments", len(segments))

    if not segments:
        raise StructuringError("The model returned an empty transcript")

    if not is_chronological(segments):
        _logger.warning("Model returned out-of-order timestamps, re-sorting")
        segments = sorted(segments, key=lambda segment: segment.seconds)

    return segments
