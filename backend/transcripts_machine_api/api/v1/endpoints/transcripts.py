import asyncio
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from transcripts_machine.components.remote_session.browserbase import BrowserbaseClient
from transcripts_machine.components.transcript_extractor.extractor import (
    extract_transcript,
    release_session,
)
from transcripts_machine.components.transcript_extractor.schemas import ExtractionResult
from transcripts_machine.components.url_validator.validator import require_youtube_url
from transcripts_machine.config import AutomationSettings, get_automation_settings
from transcripts_machine.core.errors import (
    SessionNotFoundError,
    TranscriptsMachineError,
    ValidationError,
)
from transcripts_machine.run import run_transcripts_machine
from transcripts_machine_api.core.errors import error_response
from transcripts_machine_api.core.registry import (
    ExtractionRegistry,
    get_browserbase,
    get_registry,
)
from transcripts_machine_api.schemas.v1.requests import (
    TranscriptRequest,
    TranscriptStreamRequest,
)
from transcripts_machine_api.schemas.v1.responses import (
    CancelResponse,
    ErrorResponse,
    ProgressUpdate,
)

router = APIRouter(tags=["transcripts"])
_logger = logging.getLogger(__name__)

# Strong references so streaming pipelines are not garbage collected mid-run
_background_tasks: set[asyncio.Task] = set()


@router.post(
    "/transcripts",
    response_model=ExtractionResult,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid YouTube URL"},
        404: {"model": ErrorResponse, "description": "Unknown or already used session"},
        409: {"model": ErrorResponse, "description": "Superseded by a newer request"},
        502: {"model": ErrorResponse, "description": "Extraction failed"},
    },
)
async def extract_transcript_endpoint(
    request: TranscriptRequest,
    registry: ExtractionRegistry = Depends(get_registry),
    browserbase: BrowserbaseClient = Depends(get_browserbase),
    settings: AutomationSettings = Depends(get_automation_settings),
) -> ExtractionResult:
    """
    Extract the transcript of a video inside a session opened with ``POST /sessions``.

    The session is consumed: it is released when this request finishes, whatever
    the outcome. Results are best-effort and may differ between runs.
    """
    session = registry.claim_session(request.session_id)
    if session is None:
        raise SessionNotFoundError(
            f"Session {request.session_id} is unknown or already used"
        )

    try:
        video_url = require_youtube_url(request.video_url)
    except ValidationError:
        await release_session(session, None, browserbase, settings)
        raise

    token = registry.start(request.client_id)
    try:
        return await extract_transcript(
            session,
            video_url,
            browserbase=browserbase,
            token=token,
            settings=settings,
        )
    finally:
        registry.finish(request.client_id, token)


@router.delete("/transcripts/{client_id}", response_model=CancelResponse)
async def cancel_extraction_endpoint(
    client_id: str, registry: ExtractionRegistry = Depends(get_registry)
) -> CancelResponse:
    """Cancel the in-flight extraction of a client; its session is released."""
    return CancelResponse(cancelled=registry.cancel(client_id))


async def transcript_stream(
    request: TranscriptStreamRequest,
    video_url: str,
    registry: ExtractionRegistry,
    browserbase: BrowserbaseClient,
    settings: AutomationSettings,
) -> AsyncGenerator[str, None]:
    """
    Stream extraction progress using Server-Sent Events (SSE).

    Thin wrapper around the pipeline that converts progress callbacks into
    SSE-formatted messages. A client disconnect cancels the extraction.
    """
    updates_queue: asyncio.Queue[ProgressUpdate | None] = asyncio.Queue()
    token = registry.start(request.client_id)

    def progress_handler(step: str, message: str, progress: int, data: dict | None):
        """Callback that collects updates for SSE streaming."""
        updates_queue.put_nowait(
            ProgressUpdate(step=step, message=message, progress=progress, data=data)
        )

    async def run_pipeline():
        try:
            await run_transcripts_machine(
                video_url,
                with_summary=request.with_summary,
                browserbase=browserbase,
                settings=settings,
                token=token,
                progress_callback=progress_handler,
            )
        except TranscriptsMachineError as exc:
            _logger.error("Transcript pipeline failed: %s", exc)
            updates_queue.put_nowait(
                ProgressUpdate(
                    step="error",
                    message=f"Failed to extract transcript: {exc}",
                    progress=100,
                    data=error_response(exc).model_dump(),
                )
            )
        except Exception as exc:
            _logger.exception("Transcript pipeline crashed: %s", exc)
            updates_queue.put_nowait(
                ProgressUpdate(
                    step="error",
                    message=f"Failed to extract transcript: {exc}",
                    progress=100,
                    data={"error": type(exc).__name__, "message": str(exc)},
                )
            )
        finally:
            registry.finish(request.client_id, token)
            updates_queue.put_nowait(None)

    task = asyncio.create_task(run_pipeline())
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)

    try:
        while True:
            update = await updates_queue.get()
            if update is None:
                break
            yield _format_sse(update)
            if update.step in ("complete", "error"):
                break
    finally:
        if not task.done():
            token.cancel("client disconnected")


def _format_sse(update: ProgressUpdate) -> str:
    """Format a progress update as an SSE message."""
    return f"data: {update.model_dump_json()}\n\n"


@router.post(
    "/transcripts/stream",
    response_class=StreamingResponse,
    responses={
        200: {
            "description": "Stream of progress updates",
            "content": {"text/event-stream": {"example": "data: {...}\n\n"}},
        },
        400: {"model": ErrorResponse, "description": "Invalid YouTube URL"},
    },
)
async def transcript_stream_endpoint(
    request: TranscriptStreamRequest,
    registry: ExtractionRegistry = Depends(get_registry),
    browserbase: BrowserbaseClient = Depends(get_browserbase),
    settings: AutomationSettings = Depends(get_automation_settings),
) -> StreamingResponse:
    """
    Open a session, extract the transcript and stream progress updates.

    The ``session_started`` update carries the live debug view URL; the final
    ``complete`` update carries the full result.
    """
    video_url = require_youtube_url(request.video_url)
    return StreamingResponse(
        transcript_stream(request, video_url, registry, browserbase, settings),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable buffering in nginx
        },
    )
