import logging
from typing import Any, Optional

import httpx

from transcripts_machine.config import AutomationSettings, get_automation_settings
from transcripts_machine.core.errors import SessionCreationError, TranscriptsMachineError

_logger = logging.getLogger(__name__)


class BrowserbaseClient:
    """Thin async wrapper around the Browserbase sessions REST API."""

    def __init__(
        self,
        settings: Optional[AutomationSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_automation_settings()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.browserbase_api_url,
                timeout=self.settings.browserbase_request_timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        return {
            "X-BB-API-Key": self.settings.browserbase_api_key or "",
            "Content-Type": "application/json",
        }

    async def create_session(self) -> dict[str, Any]:
        """Create a new remote browser session and return the raw session payload."""
        if not self.settings.browserbase_api_key or not self.settings.browserbase_project_id:
            _logger.error(
                "BROWSERBASE_API_KEY / BROWSERBASE_PROJECT_ID are not configured."
            )
            raise SessionCreationError("Browserbase credentials are not configured")

        payload = {
            "projectId": self.settings.browserbase_project_id,
            "proxies": self.settings.browserbase_proxies,
            "timeout": self.settings.browserbase_session_timeout,
        }
        data = await self._request_json("POST", "/v1/sessions", json=payload)
        if not data.get("id"):
            raise SessionCreationError("Browserbase returned a session without an id")
        _logger.info("Created Browserbase session %s", data["id"])
        return data

    async def get_debug_urls(self, session_id: str) -> dict[str, Any]:
        """Fetch the live debugger URLs for a session."""
        return await self._request_json("GET", f"/v1/sessions/{session_id}/debug")

    async def release_session(self, session_id: str) -> None:
        """Ask Browserbase to shut the remote browser down."""
        payload = {
            "projectId": self.settings.browserbase_project_id,
            "status": "REQUEST_RELEASE",
        }
        await self._request_json(
            "POST",
            f"/v1/sessions/{session_id}",
            json=payload,
            error=TranscriptsMachineError,
        )
        _logger.info("Released Browserbase session %s", session_id)

    async def _request_json(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        error: type[TranscriptsMachineError] = SessionCreationError,
    ) -> dict[str, Any]:
        client = await self._get_client()
        try:
            response = await client.request(
                method, path, headers=self._headers(), json=json
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            _logger.error(
                "Browserbase %s %s failed with %s: %s",
                method,
                path,
                exc.response.status_code,
                exc.response.text[:200],
            )
            raise error(
                f"Browserbase rejected the request ({exc.response.status_code})"
            ) from exc
        except httpx.HTTPError as exc:
            _logger.error("Browserbase %s %s failed: %s", method, path, exc)
            raise error(f"Could not reach Browserbase: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            _logger.error("Browserbase returned invalid JSON for %s %s", method, path)
            raise error("Browserbase returned invalid JSON") from exc
