import logging
from typing import Optional

from fastapi import Request

from transcripts_machine.components.remote_session.browserbase import BrowserbaseClient
from transcripts_machine.components.remote_session.schemas import RemoteSessionHandle
from transcripts_machine.core.cancellation import CancelToken
from transcripts_machine.core.errors import TranscriptsMachineError

_logger = logging.getLogger(__name__)


class ExtractionRegistry:
    """
    In-memory bookkeeping for one API process.

    Tracks sessions opened through ``POST /sessions`` until an extraction claims
    them, and the cancel token of the in-flight extraction per client. Starting
    a new extraction for a client cancels the previous one.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, RemoteSessionHandle] = {}
        self._in_flight: dict[str, CancelToken] = {}

    def register_session(self, handle: RemoteSessionHandle) -> None:
        self._sessions[handle.session_id] = handle

    def claim_session(self, session_id: str) -> Optional[RemoteSessionHandle]:
        """Hand a session to exactly one extraction; later claims get None."""
        return self._sessions.pop(session_id, None)

    @property
    def pending_sessions(self) -> list[str]:
        return list(self._sessions)

    def start(self, client_id: Optional[str]) -> CancelToken:
        token = CancelToken()
        if client_id:
            previous = self._in_flight.get(client_id)
            if previous is not None:
                previous.cancel("superseded by a newer request")
            self._in_flight[client_id] = token
        return token

    def finish(self, client_id: Optional[str], token: CancelToken) -> None:
        if client_id and self._in_flight.get(client_id) is token:
            del self._in_flight[client_id]

    def cancel(self, client_id: str, reason: str = "cancelled by client") -> bool:
        token = self._in_flight.pop(client_id, None)
        if token is None:
            return False
        token.cancel(reason)
        return True

    async def release_pending(self, browserbase: BrowserbaseClient) -> None:
        """Cancel in-flight extractions and release every session never used."""
        for token in self._in_flight.values():
            token.cancel("server shutting down")
        self._in_flight.clear()

        handles = list(self._sessions.values())
        self._sessions.clear()
        for handle in handles:
            try:
                await browserbase.release_session(handle.session_id)
            except TranscriptsMachineError as exc:
                _logger.error(
                    "Could not release unused session %s: %s", handle.session_id, exc
                )


def get_registry(request: Request) -> ExtractionRegistry:
    return request.app.state.registry


def get_browserbase(request: Request) -> BrowserbaseClient:
    return request.app.state.browserbase
