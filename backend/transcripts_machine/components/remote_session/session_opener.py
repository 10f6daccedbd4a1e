import asyncio
import logging
from typing import Optional

from transcripts_machine.components.remote_session.browserbase import BrowserbaseClient
from transcripts_machine.components.remote_session.schemas import RemoteSessionHandle
from transcripts_machine.core.errors import SessionCreationError, TranscriptsMachineError

_logger = logging.getLogger(__name__)


async def open_session(
    client: BrowserbaseClient, *, timeout: Optional[float] = None
) -> RemoteSessionHandle:
    """
    Allocate a billable remote browser session and resolve its live debug view.

    No retries: the first failure surfaces as SessionCreationError. When the
    debug lookup fails after the session already exists, the session is released
    before raising so nothing is left running remotely.
    """
    timeout = timeout or client.settings.browserbase_request_timeout

    try:
        session = await asyncio.wait_for(client.create_session(), timeout)
    except asyncio.TimeoutError as exc:
        raise SessionCreationError(
            f"Timed out creating a Browserbase session after {timeout:.0f}s"
        ) from exc

    session_id = session["id"]
    try:
        debug = await asyncio.wait_for(client.get_debug_urls(session_id), timeout)
        debug_view_url = debug.get("debuggerFullscreenUrl") or debug.get("debuggerUrl")
        if not debug_view_url:
            raise SessionCreationError("Browserbase returned no debugger URL")
    except (asyncio.TimeoutError, TranscriptsMachineError) as exc:
        _logger.warning("Debug URL lookup failed for %s, releasing session", session_id)
        await _release_quietly(client, session_id)
        if isinstance(exc, SessionCreationError):
            raise
        raise SessionCreationError(
            f"Could not resolve debug view for session {session_id}: {exc}"
        ) from exc

    return RemoteSessionHandle(
        session_id=session_id,
        debug_view_url=debug_view_url,
        selenium_remote_url=session.get("seleniumRemoteUrl", ""),
        signing_key=session.get("signingKey", ""),
    )


async def _release_quietly(client: BrowserbaseClient, session_id: str) -> None:
    try:
        await client.release_session(session_id)
    except TranscriptsMachineError as exc:
        _logger.error("Failed to release session %s: %s", session_id, exc)
