import logging

from fastapi import APIRouter, Depends, status

from transcripts_machine.components.remote_session.browserbase import BrowserbaseClient
from transcripts_machine.components.remote_session.session_opener import open_session
from transcripts_machine_api.core.registry import (
    ExtractionRegistry,
    get_browserbase,
    get_registry,
)
from transcripts_machine_api.schemas.v1.responses import ErrorResponse, SessionResponse

router = APIRouter(tags=["sessions"])
_logger = logging.getLogger(__name__)


@router.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={502: {"model": ErrorResponse, "description": "Session creation failed"}},
)
async def create_session_endpoint(
    registry: ExtractionRegistry = Depends(get_registry),
    browserbase: BrowserbaseClient = Depends(get_browserbase),
) -> SessionResponse:
    """
    Open a disposable remote browser session.

    The session is held for a single extraction through ``POST /transcripts``;
    sessions never claimed are released when the server shuts down.
    """
    handle = await open_session(browserbase)
    registry.register_session(handle)
    _logger.info("Session %s ready for extraction", handle.session_id)
    return SessionResponse(
        session_id=handle.session_id, debug_view_url=handle.debug_view_url
    )
