import asyncio
import json

import httpx
import pytest

from transcripts_machine.components.remote_session.browserbase import BrowserbaseClient
from transcripts_machine.components.remote_session.session_opener import open_session
from transcripts_machine.config import AutomationSettings
from transcripts_machine.core.errors import SessionCreationError, TranscriptsMachineError

SESSION_PAYLOAD = {
    "id": "sess-123",
    "seleniumRemoteUrl": "http://connect.browserbase.test/webdriver",
    "signingKey": "signing-secret",
    "status": "RUNNING",
}
DEBUG_PAYLOAD = {
    "debuggerFullscreenUrl": "https://www.browserbase.com/devtools-fullscreen/sess-123",
    "debuggerUrl": "https://www.browserbase.com/devtools/sess-123",
}


def _settings(**overrides) -> AutomationSettings:
    values = {
        "browserbase_api_key": "bb-key",
        "browserbase_project_id": "project-1",
        "browserbase_api_url": "https://api.browserbase.test",
    }
    values.update(overrides)
    return AutomationSettings(_env_file=None, **values)


class Recorder:
    """Mock Browserbase API recording each request it serves."""

    def __init__(self, session_status=201, debug_status=200, debug_payload=None):
        self.requests: list[httpx.Request] = []
        self.session_status = session_status
        self.debug_status = debug_status
        self.debug_payload = DEBUG_PAYLOAD if debug_payload is None else debug_payload

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "POST" and path == "/v1/sessions":
            return httpx.Response(self.session_status, json=SESSION_PAYLOAD)
        if request.method == "GET" and path == "/v1/sessions/sess-123/debug":
            return httpx.Response(self.debug_status, json=self.debug_payload)
        if request.method == "POST" and path == "/v1/sessions/sess-123":
            return httpx.Response(200, json={"id": "sess-123", "status": "COMPLETED"})
        return httpx.Response(404, json={"error": "not found"})

    def calls(self) -> list[tuple[str, str]]:
        return [(request.method, request.url.path) for request in self.requests]


def _client(recorder: Recorder, **overrides) -> BrowserbaseClient:
    return BrowserbaseClient(_settings(**overrides), transport=httpx.MockTransport(recorder))


def test_open_session_returns_handle():
    recorder = Recorder()
    handle = asyncio.run(open_session(_client(recorder)))

    assert handle.session_id == "sess-123"
    assert handle.debug_view_url == DEBUG_PAYLOAD["debuggerFullscreenUrl"]
    assert handle.selenium_remote_url == SESSION_PAYLOAD["seleniumRemoteUrl"]
    assert handle.signing_key == "signing-secret"
    assert recorder.calls() == [
        ("POST", "/v1/sessions"),
        ("GET", "/v1/sessions/sess-123/debug"),
    ]


def test_create_request_carries_project_and_api_key():
    recorder = Recorder()
    asyncio.run(open_session(_client(recorder)))

    create = recorder.requests[0]
    assert create.headers["X-BB-API-Key"] == "bb-key"
    assert json.loads(create.content) == {
        "projectId": "project-1",
        "proxies": True,
        "timeout": 1000,
    }


def test_handle_hides_connection_secrets():
    handle = asyncio.run(open_session(_client(Recorder())))

    assert handle.model_dump() == {
        "session_id": "sess-123",
        "debug_view_url": DEBUG_PAYLOAD["debuggerFullscreenUrl"],
    }
    assert "signing-secret" not in repr(handle)


def test_missing_credentials_never_reach_the_network():
    recorder = Recorder()
    client = _client(recorder, browserbase_api_key=None)

    with pytest.raises(SessionCreationError, match="credentials"):
        asyncio.run(open_session(client))
    assert recorder.requests == []


def test_rejected_creation_raises_session_creation_error():
    recorder = Recorder(session_status=402)

    with pytest.raises(SessionCreationError, match="402"):
        asyncio.run(open_session(_client(recorder)))
    assert recorder.calls() == [("POST", "/v1/sessions")]


def test_debug_lookup_failure_releases_the_session():
    recorder = Recorder(debug_status=500)

    with pytest.raises(SessionCreationError):
        asyncio.run(open_session(_client(recorder)))
    assert recorder.calls()[-1] == ("POST", "/v1/sessions/sess-123")
    release = json.loads(recorder.requests[-1].content)
    assert release == {"projectId": "project-1", "status": "REQUEST_RELEASE"}


def test_missing_debugger_url_releases_the_session():
    recorder = Recorder(debug_payload={"wsUrl": "wss://somewhere"})

    with pytest.raises(SessionCreationError, match="debugger URL"):
        asyncio.run(open_session(_client(recorder)))
    assert ("POST", "/v1/sessions/sess-123") in recorder.calls()


def test_network_failure_raises_session_creation_error():
    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = BrowserbaseClient(_settings(), transport=httpx.MockTransport(unreachable))
    with pytest.raises(SessionCreationError, match="Could not reach Browserbase"):
        asyncio.run(open_session(client))


def test_release_failure_is_not_a_session_creation_error():
    def failing(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="internal error")

    client = BrowserbaseClient(_settings(), transport=httpx.MockTransport(failing))
    with pytest.raises(TranscriptsMachineError) as excinfo:
        asyncio.run(client.release_session("sess-123"))
    assert not isinstance(excinfo.value, SessionCreationError)
