import pytest

from transcripts_machine.components.transcript_extractor.schemas import TranscriptSegment
from transcripts_machine_ui import state as ui
from transcripts_machine_ui.state import InvalidTransition, Phase, UiState

URL = "https://youtu.be/dQw4w9WgXcQ"
TRANSCRIPT = (
    TranscriptSegment(text="Hello", timestamp="00:00"),
    TranscriptSegment(text="World", timestamp="00:04"),
)


def _ready() -> UiState:
    state = ui.submit(UiState(), URL, "dQw4w9WgXcQ")
    state = ui.session_opened(state, state.request_id, "https://debug.test/s")
    return ui.extraction_succeeded(state, state.request_id, TRANSCRIPT)


def test_happy_path():
    state = ui.submit(UiState(), URL, "dQw4w9WgXcQ")
    assert state.phase is Phase.SESSION_STARTING
    assert state.is_loading
    assert not state.show_debug_view

    state = ui.session_opened(state, state.request_id, "https://debug.test/s")
    assert state.phase is Phase.EXTRACTING
    assert state.show_debug_view

    state = ui.extraction_succeeded(state, state.request_id, TRANSCRIPT)
    assert state.phase is Phase.READY
    assert state.transcript == TRANSCRIPT
    assert not state.is_loading
    assert not state.show_debug_view

    state = ui.summary_requested(state)
    assert state.phase is Phase.SUMMARY_GENERATING
    state = ui.summary_succeeded(state, state.request_id, "A greeting.")
    assert state.phase is Phase.SUMMARY_READY
    assert state.summary == "A greeting."


def test_submit_resets_everything():
    state = ui.summary_succeeded(ui.summary_requested(_ready()), 1, "old summary")

    state = ui.submit(state, URL, "dQw4w9WgXcQ")

    assert state.transcript == ()
    assert state.summary is None
    assert state.error is None
    assert state.request_id == 2


def test_failure_never_keeps_a_transcript():
    state = ui.submit(UiState(), URL, "dQw4w9WgXcQ")
    state = ui.session_opened(state, state.request_id, "https://debug.test/s")

    state = ui.request_failed(state, state.request_id, "Step 'open_transcript_panel' failed")

    assert state.phase is Phase.FAILED
    assert state.transcript == ()
    assert state.error == "Step 'open_transcript_panel' failed"
    assert not state.show_debug_view


def test_stale_results_are_discarded():
    first = ui.submit(UiState(), URL, "dQw4w9WgXcQ")
    stale_id = first.request_id
    second = ui.submit(first, "https://youtu.be/aaaaaaaaaaa", "aaaaaaaaaaa")

    assert ui.session_opened(second, stale_id, "https://debug.test/old") is second
    assert ui.request_failed(second, stale_id, "late failure") is second


def test_summary_without_transcript_is_a_no_op():
    state = UiState()

    assert ui.summary_requested(state) is state


def test_summary_failure_keeps_the_transcript():
    state = ui.summary_requested(_ready())

    state = ui.summary_failed(state, state.request_id, "quota exceeded")

    assert state.phase is Phase.READY
    assert state.transcript == TRANSCRIPT
    assert state.summary_error == "quota exceeded"


def test_illegal_transition_raises():
    with pytest.raises(InvalidTransition):
        ui.extraction_succeeded(UiState(), 0, TRANSCRIPT)


def test_rejected_url_only_sets_validation_error():
    ready = _ready()

    state = ui.reject_url(ready, "Please enter a valid YouTube URL")

    assert state.validation_error == "Please enter a valid YouTube URL"
    assert state.transcript == ready.transcript
    assert state.phase is Phase.READY


def test_reset():
    state = ui.reset(_ready())

    assert state.phase is Phase.IDLE
    assert state.transcript == ()
