import logging
from typing import Awaitable, Callable, List, Optional

from transcripts_machine.components.page_automation.page import (
    TRANSCRIPT_PANEL_SELECTOR,
    TranscriptPage,
    connect_remote_page,
)
from transcripts_machine.components.page_automation.schemas import ObservedElement
from transcripts_machine.components.remote_session.browserbase import BrowserbaseClient
from transcripts_machine.components.remote_session.schemas import RemoteSessionHandle
from transcripts_machine.components.transcript_extractor.schemas import ExtractionResult
from transcripts_machine.components.transcript_extractor.steps import (
    StepStrategy,
    first_success_of,
)
from transcripts_machine.components.transcript_extractor.structurer import (
    structure_transcript,
)
from transcripts_machine.components.url_validator.validator import extract_video_id
from transcripts_machine.config import AutomationSettings, get_automation_settings
from transcripts_machine.core.cancellation import CancelToken
from transcripts_machine.core.errors import (
    ExtractionCancelled,
    ExtractionError,
    NavigationError,
    StructuringError,
    TranscriptsMachineError,
    ValidationError,
)
from transcripts_machine.utils.profile import timer

_logger = logging.getLogger(__name__)

VIDEO_PLAYER_SELECTOR = "video"
DESCRIPTION_EXPANDER_XPATH = (
    "//tp-yt-paper-button[@id='expand'][contains(normalize-space(.), '...more')]"
)
SHOW_TRANSCRIPT_XPATH = (
    "//button[contains(@class, 'yt-spec-button-shape-next')]"
    "[contains(normalize-space(.), 'Show transcript')]"
)
WAIT_FOR_PLAYER_DIRECTIVE = "wait for the video player to load"
OPEN_TRANSCRIPT_DIRECTIVE = "open the video transcript panel"
OBSERVE_TRANSCRIPT_INSTRUCTION = (
    "extract all transcript texts and timestamps from segments-container id."
)

PageFactory = Callable[[RemoteSessionHandle, AutomationSettings], Awaitable[TranscriptPage]]
ProgressCallback = Callable[[str, str, int, dict], None]


async def extract_transcript(
    session: RemoteSessionHandle,
    video_url: str,
    *,
    browserbase: BrowserbaseClient,
    token: Optional[CancelToken] = None,
    settings: Optional[AutomationSettings] = None,
    page_factory: PageFactory = connect_remote_page,
    progress_callback: Optional[ProgressCallback] = None,
) -> ExtractionResult:
    """
    Open the transcript panel of ``video_url`` in the remote session and return
    its ordered segments.

    Steps run strictly in sequence: navigate, wait for the player, open the
    transcript panel, observe the segments, structure them with a model. The
    player wait and panel opening each fall back to an AI directive when their
    selector action fails.

    The session is released on every exit path, including cancellation through
    ``token``. Results are best-effort (see ExtractionResult).

    Raises:
        ValidationError: ``video_url`` is not a YouTube video URL
        ExtractionError: any other failure; subclasses name the step that failed
    """
    settings = settings or get_automation_settings()
    token = token or CancelToken()

    def _progress(step: str, message: str, progress: int, data: Optional[dict] = None):
        if progress_callback:
            progress_callback(step, message, progress, data or {})

    timings: dict[str, float] = {}
    page: Optional[TranscriptPage] = None
    try:
        video_id = extract_video_id(video_url)
        if video_id is None:
            raise ValidationError(f"Not a YouTube video URL: {video_url}")

        with timer("Attach to remote browser", timings):
            try:
                page = await token.guard(
                    page_factory(session, settings),
                    timeout=settings.navigation_timeout,
                    step="attach",
                )
            except ExtractionCancelled:
                raise
            except Exception as exc:
                raise ExtractionError(
                    f"Could not attach to remote session {session.session_id}: {exc}"
                ) from exc

        _progress("navigating", "Opening the video page...", 20)
        with timer("Step 1: Navigate", timings):
            await _navigate(page, video_url, token, settings)

        _progress("waiting_for_player", "Waiting for the video player...", 35)
        with timer("Step 2: Wait for player", timings):
            player = await first_success_of(
                StepStrategy(
                    name="wait_for_player",
                    deterministic=lambda: page.wait_for_selector(
                        VIDEO_PLAYER_SELECTOR, settings.player_wait_timeout
                    ),
                    fallback=lambda: page.act(WAIT_FOR_PLAYER_DIRECTIVE),
                    deterministic_timeout=settings.player_wait_timeout + 5,
                    fallback_timeout=settings.act_timeout,
                ),
                token,
            )

        _progress("opening_transcript", "Opening the transcript panel...", 50)
        with timer("Step 3: Open transcript panel", timings):
            panel = await first_success_of(
                StepStrategy(
                    name="open_transcript_panel",
                    deterministic=lambda: _click_transcript_buttons(page, settings),
                    fallback=lambda: page.act(OPEN_TRANSCRIPT_DIRECTIVE),
                    deterministic_timeout=2 * settings.click_timeout + 5,
                    fallback_timeout=settings.act_timeout,
                ),
                token,
            )
        _logger.info("Opened transcript panel")

        _progress("observing", "Reading transcript segments...", 65)
        with timer("Step 4: Observe transcript", timings):
            observations = await _observe(page, token, settings)
        _logger.info("Observed %d transcript fragments", len(observations))

        _progress(
            "structuring",
            f"Structuring {len(observations)} transcript fragments...",
            80,
            {"fragments": len(observations)},
        )
        with timer("Step 5: Structure transcript", timings):
            try:
                segments = await token.guard(
                    structure_transcript(observations),
                    timeout=settings.structuring_timeout,
                    step="structure_transcript",
                )
            except (StructuringError, ExtractionCancelled):
                raise
            except Exception as exc:
                raise StructuringError(f"Transcript structuring failed: {exc}") from exc

        fallback_steps = [
            outcome.step for outcome in (player, panel) if outcome.used_fallback
        ]
        _logger.info(
            "Extracted %d segments for %s (fallbacks: %s, timings: %s)",
            len(segments),
            video_id,
            fallback_steps or "none",
            timings,
        )
        return ExtractionResult(
            transcript=segments,
            video_id=video_id,
            session_id=session.session_id,
            fallback_steps=fallback_steps,
        )
    finally:
        await release_session(session, page, browserbase, settings)


async def _navigate(
    page: TranscriptPage,
    video_url: str,
    token: CancelToken,
    settings: AutomationSettings,
) -> None:
    try:
        await token.guard(
            page.goto(video_url), timeout=settings.navigation_timeout, step="navigate"
        )
    except ExtractionCancelled:
        raise
    except Exception as exc:
        _logger.error("Navigation to %s failed: %s", video_url, exc)
        raise NavigationError(f"Could not load {video_url}: {exc}") from exc


async def _click_transcript_buttons(
    page: TranscriptPage, settings: AutomationSettings
) -> None:
    await page.click(DESCRIPTION_EXPANDER_XPATH, settings.click_timeout)
    await page.click(SHOW_TRANSCRIPT_XPATH, settings.click_timeout)


async def _observe(
    page: TranscriptPage, token: CancelToken, settings: AutomationSettings
) -> List[ObservedElement]:
    try:
        return await token.guard(
            page.observe(
                OBSERVE_TRANSCRIPT_INSTRUCTION, selector=TRANSCRIPT_PANEL_SELECTOR
            ),
            timeout=settings.observe_timeout,
            step="observe_transcript",
        )
    except ExtractionCancelled:
        raise
    except Exception as exc:
        _logger.error("Transcript observation failed: %s", exc)
        raise ExtractionError(f"Could not read the transcript panel: {exc}") from exc


async def release_session(
    session: RemoteSessionHandle,
    page: Optional[TranscriptPage],
    browserbase: BrowserbaseClient,
    settings: AutomationSettings,
) -> None:
    """Quit the WebDriver and ask Browserbase to release the session."""
    if page is not None:
        try:
            await CancelToken().guard(
                page.close(), timeout=settings.release_timeout, step="close_page"
            )
        except Exception as exc:
            _logger.warning(
                "Closing the page for session %s failed: %s", session.session_id, exc
            )

    try:
        await CancelToken().guard(
            browserbase.release_session(session.session_id),
            timeout=settings.release_timeout,
            step="release_session",
        )
    except TranscriptsMachineError as exc:
        _logger.error(
            "Session %s may still be running remotely: %s", session.session_id, exc
        )
