"""
API client for communicating with the Transcripts Machine backend.
"""

from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urljoin

import requests

from transcripts_machine.components.transcript_extractor.schemas import (
    ExtractionResult,
    TranscriptSegment,
)


class ApiError(Exception):
    """The backend answered with an error (or could not be reached)."""

    def __init__(self, message: str, status_code: Optional[int] = None, error: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.error = error


class ApiClient:
    """Client for interacting with the Transcripts Machine API."""

    def __init__(self, base_url: str, timeout: float = 600.0):
        """
        Initialize the API client.

        Args:
            base_url: Base URL of the API
            timeout: Seconds to wait for long-running calls (extraction)
        """
        self.base_url = base_url
        self.api_base = urljoin(base_url, "/api/v1/")
        self.timeout = timeout
        self._http = requests.Session()

    def _url(self, endpoint: str) -> str:
        """Get the full URL for an endpoint."""
        return urljoin(self.api_base, endpoint)

    def _call(self, method: str, endpoint: str, timeout: float, **kwargs) -> Dict[str, Any]:
        try:
            response = self._http.request(
                method, self._url(endpoint), timeout=timeout, **kwargs
            )
        except requests.RequestException as exc:
            raise ApiError(f"Could not reach the transcripts API: {exc}") from exc

        if response.ok:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = {}
        message = body.get("message") or body.get("detail") or response.reason
        raise ApiError(str(message), status_code=response.status_code, error=body.get("error", ""))

    def open_session(self) -> Dict[str, Any]:
        """
        Open a remote browser session.

        Returns:
            Dictionary with session_id and debug_view_url
        """
        return self._call("POST", "sessions", timeout=60)

    def extract_transcript(
        self, video_url: str, session_id: str, client_id: Optional[str] = None
    ) -> ExtractionResult:
        """
        Extract the transcript of a video in an opened session.

        Args:
            video_url: YouTube URL
            session_id: Session from ``open_session``
            client_id: Identity used to cancel superseded requests server-side
        """
        data = self._call(
            "POST",
            "transcripts",
            timeout=self.timeout,
            json={
                "video_url": video_url,
                "session_id": session_id,
                "client_id": client_id,
            },
        )
        return ExtractionResult.model_validate(data)

    def cancel_extraction(self, client_id: str) -> bool:
        """Cancel the in-flight extraction of ``client_id``, if any."""
        data = self._call("DELETE", f"transcripts/{client_id}", timeout=10)
        return bool(data.get("cancelled"))

    def summarize(self, transcript: Sequence[TranscriptSegment]) -> str:
        """
        Generate an AI summary for a transcript.

        Returns:
            Summary text
        """
        payload: List[Dict[str, str]] = [segment.model_dump() for segment in transcript]
        data = self._call("POST", "summaries", timeout=120, json={"transcript": payload})
        return data["summary"]
