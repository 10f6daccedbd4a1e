import asyncio
import logging
from typing import Callable, Optional

from dotenv import load_dotenv

from transcripts_machine.components.page_automation.page import connect_remote_page
from transcripts_machine.components.remote_session.browserbase import BrowserbaseClient
from transcripts_machine.components.remote_session.session_opener import open_session
from transcripts_machine.components.summarizer.summarizer import summarize
from transcripts_machine.components.transcript_extractor.extractor import (
    PageFactory,
    extract_transcript,
)
from transcripts_machine.components.transcript_extractor.schemas import (
    TranscriptRunOutput,
)
from transcripts_machine.components.url_validator.validator import require_youtube_url
from transcripts_machine.config import AutomationSettings, get_automation_settings
from transcripts_machine.core.cancellation import CancelToken
from transcripts_machine.core.errors import SummarizationError
from transcripts_machine.utils.profile import timer

_logger = logging.getLogger(__name__)


async def run_transcripts_machine(
    video_url: str,
    *,
    with_summary: bool = False,
    browserbase: Optional[BrowserbaseClient] = None,
    settings: Optional[AutomationSettings] = None,
    token: Optional[CancelToken] = None,
    page_factory: PageFactory = connect_remote_page,
    progress_callback: Optional[Callable[[str, str, int, dict], None]] = None,
) -> TranscriptRunOutput:
    """
    Validate the URL, open a remote session, extract the transcript and
    optionally summarize it.

    A summary failure does not invalidate the transcript: it is reported in
    ``summary_error`` instead of raising.
    """
    settings = settings or get_automation_settings()
    video_url = require_youtube_url(video_url)
    token = token or CancelToken()
    owns_client = browserbase is None
    browserbase = browserbase or BrowserbaseClient(settings)

    try:
        if progress_callback:
            progress_callback(
                "session_starting", "Initializing extraction process...", 5, {}
            )

        with timer("Open remote session"):
            session = await open_session(browserbase)

        if progress_callback:
            progress_callback(
                "session_started",
                "Remote browser ready",
                10,
                {
                    "session_id": session.session_id,
                    "debug_view_url": session.debug_view_url,
                },
            )

        result = await extract_transcript(
            session,
            video_url,
            browserbase=browserbase,
            token=token,
            settings=settings,
            page_factory=page_factory,
            progress_callback=progress_callback,
        )

        output = TranscriptRunOutput(
            session_id=session.session_id,
            debug_view_url=session.debug_view_url,
            result=result,
        )

        if with_summary:
            if progress_callback:
                progress_callback("summarizing", "Generating AI summary...", 90, {})
            try:
                with timer("Summarize transcript"):
                    output.summary = await summarize(
                        result.transcript, timeout=settings.summary_timeout
                    )
            except SummarizationError as exc:
                _logger.warning("Summary failed, returning transcript only: %s", exc)
                output.summary_error = str(exc)

        if progress_callback:
            progress_callback(
                "complete",
                f"Successfully extracted {len(result.transcript)} transcript segments",
                100,
                {"result": output.model_dump()},
            )
        return output
    finally:
        if owns_client:
            await browserbase.close()


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

    output = asyncio.run(run_transcripts_machine(VIDEO_URL, with_summary=True))
    for segment in output.result.transcript:
        _logger.info(f"{segment.timestamp} {segment.text}")
    if output.summary:
        _logger.info("=" * 80)
        _logger.info(output.summary)
