"""
Drives the UI state machine from the two user actions: submitting a URL and
asking for a summary. Kept free of Streamlit so it can be exercised directly.
"""

import logging
from typing import Callable, Optional

from transcripts_machine.components.url_validator.validator import (
    extract_video_id,
    require_youtube_url,
)
from transcripts_machine.core.errors import ValidationError
from transcripts_machine_ui import state as ui
from transcripts_machine_ui.api_client import ApiClient, ApiError

_logger = logging.getLogger(__name__)

# notify(kind, message) where kind is one of "info", "success", "error"
Notifier = Callable[[str, str], None]
StateListener = Callable[[ui.UiState], None]


def _noop_listener(_: ui.UiState) -> None:
    return None


def submit_url(
    state: ui.UiState,
    url: str,
    api: ApiClient,
    *,
    notify: Notifier,
    client_id: Optional[str] = None,
    on_state: StateListener = _noop_listener,
) -> ui.UiState:
    """
    Validate ``url``, open a remote session and extract its transcript.

    Invalid input is rejected before any network call. Every intermediate state
    is passed to ``on_state`` so the page can show the live view while the
    extraction runs. Failures produce exactly one error notification.
    """
    try:
        url = require_youtube_url(url)
    except ValidationError as exc:
        return ui.reject_url(state, str(exc))

    state = ui.submit(state, url, extract_video_id(url))
    request_id = state.request_id
    on_state(state)
    notify("info", "Initializing extraction process...")

    try:
        session = api.open_session()
    except ApiError as exc:
        _logger.error(f"Session creation failed: {exc}")
        notify("error", f"Failed to extract transcript: {exc}")
        return ui.request_failed(state, request_id, str(exc))

    state = ui.session_opened(state, request_id, session["debug_view_url"])
    on_state(state)

    try:
        result = api.extract_transcript(url, session["session_id"], client_id=client_id)
    except ApiError as exc:
        _logger.error(f"Extraction failed: {exc}")
        notify("error", f"Failed to extract transcript: {exc}")
        return ui.request_failed(state, request_id, str(exc))

    state = ui.extraction_succeeded(state, request_id, tuple(result.transcript))
    notify("success", f"Successfully extracted {len(result.transcript)} transcript segments")
    return state


def generate_summary(
    state: ui.UiState,
    api: ApiClient,
    *,
    notify: Notifier,
    on_state: StateListener = _noop_listener,
) -> ui.UiState:
    """Summarize the displayed transcript; does nothing without one."""
    next_state = ui.summary_requested(state)
    if next_state is state:
        return state

    state = next_state
    request_id = state.request_id
    on_state(state)

    try:
        summary = api.summarize(state.transcript)
    except ApiError as exc:
        _logger.error(f"Summary generation failed: {exc}")
        notify("error", f"Failed to generate summary: {exc}")
        return ui.summary_failed(state, request_id, str(exc))

    notify("success", "Summary generated")
    return ui.summary_succeeded(state, request_id, summary)


def clear(state: ui.UiState, api: ApiClient, *, client_id: Optional[str] = None) -> ui.UiState:
    """Reset the page, cancelling a server-side extraction still in flight."""
    if state.is_loading and client_id:
        try:
            api.cancel_extraction(client_id)
        except ApiError as exc:
            _logger.warning(f"Could not cancel extraction for {client_id}: {exc}")
    return ui.reset(state)
