import pytest
import requests

from transcripts_machine.components.transcript_extractor.schemas import TranscriptSegment
from transcripts_machine_ui.api_client import ApiClient, ApiError


class FakeResponse:
    def __init__(self, status_code, body=None, reason="Bad Gateway"):
        self.status_code = status_code
        self._body = body
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class FakeHttp:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def request(self, method, url, timeout=None, **kwargs):
        self.requests.append((method, url, kwargs))
        if self.error:
            raise self.error
        return self.response


def _client(http) -> ApiClient:
    client = ApiClient("http://api.test:8000")
    client._http = http
    return client


def test_summarize_posts_segments():
    http = FakeHttp(FakeResponse(200, {"summary": "Short."}))
    segments = [TranscriptSegment(text="Hi", timestamp="00:01")]

    assert _client(http).summarize(segments) == "Short."
    method, url, kwargs = http.requests[0]
    assert (method, url) == ("POST", "http://api.test:8000/api/v1/summaries")
    assert kwargs["json"] == {"transcript": [{"text": "Hi", "timestamp": "00:01"}]}


def test_extract_parses_result():
    body = {
        "transcript": [{"text": "Hi", "timestamp": "00:01"}],
        "video_id": "dQw4w9WgXcQ",
        "session_id": "sess-1",
        "fallback_steps": [],
        "approximate": True,
    }
    http = FakeHttp(FakeResponse(200, body))

    result = _client(http).extract_transcript("https://youtu.be/dQw4w9WgXcQ", "sess-1", "tab-1")

    assert result.transcript[0].text == "Hi"
    assert http.requests[0][2]["json"]["client_id"] == "tab-1"


def test_error_body_becomes_api_error():
    body = {"error": "SessionCreationError", "message": "Browserbase rejected the request (402)"}
    http = FakeHttp(FakeResponse(502, body))

    with pytest.raises(ApiError) as excinfo:
        _client(http).open_session()

    assert str(excinfo.value) == "Browserbase rejected the request (402)"
    assert excinfo.value.status_code == 502
    assert excinfo.value.error == "SessionCreationError"


def test_fastapi_detail_becomes_api_error():
    http = FakeHttp(FakeResponse(404, {"detail": "Session x is unknown or already used"}))

    with pytest.raises(ApiError, match="unknown or already used"):
        _client(http).extract_transcript("https://youtu.be/dQw4w9WgXcQ", "x")


def test_unreachable_backend():
    http = FakeHttp(error=requests.ConnectionError("refused"))

    with pytest.raises(ApiError, match="Could not reach"):
        _client(http).open_session()
