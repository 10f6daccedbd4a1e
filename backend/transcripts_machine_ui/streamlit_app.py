"""
Streamlit front end for the Transcripts Machine.

Run with: streamlit run backend/transcripts_machine_ui/streamlit_app.py
"""

import uuid

import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv

from transcripts_machine.components.url_validator.validator import (
    build_timestamp_url,
    format_transcript,
    transcript_filename,
)
from transcripts_machine_ui import controller
from transcripts_machine_ui.api_client import ApiClient
from transcripts_machine_ui.config import get_ui_settings
from transcripts_machine_ui.state import UiState

load_dotenv()

_TOAST_ICONS = {"info": "⏳", "success": "✅", "error": "❌"}


def init_session_state():
    """Initialize session state variables."""
    settings = get_ui_settings()
    if "api_client" not in st.session_state:
        st.session_state.api_client = ApiClient(
            settings.transcripts_api_url, timeout=settings.request_timeout
        )
    if "client_id" not in st.session_state:
        st.session_state.client_id = uuid.uuid4().hex
    if "ui_state" not in st.session_state:
        st.session_state.ui_state = UiState()


def notify(kind: str, message: str):
    st.toast(message, icon=_TOAST_ICONS.get(kind))


def header():
    settings = get_ui_settings()
    st.set_page_config(page_title="YouTube Transcripts Machine", page_icon="🎬", layout="wide")
    st.title("🎬 YouTube Transcripts Machine")
    st.markdown(
        "Paste a YouTube link and get its timestamped transcript, pulled from the page "
        f"by a remote browser. [Read the launch post]({settings.launch_post_url})"
    )
    st.divider()


def footer():
    settings = get_ui_settings()
    st.divider()
    st.markdown(f"[GitHub]({settings.github_url}) · [X]({settings.x_account_url})")


def url_form(state: UiState):
    """
    Display the URL form.

    Returns:
        Tuple of (submitted URL or None, clear clicked)
    """
    with st.form(key="transcript_form"):
        url = st.text_input(
            "YouTube URL",
            value=state.current_url or "",
            placeholder="https://www.youtube.com/watch?v=VIDEO_ID",
            disabled=state.is_loading,
        )
        col1, col2 = st.columns([1, 6])
        with col1:
            submitted = st.form_submit_button("Extract", disabled=state.is_loading)
        with col2:
            cleared = st.form_submit_button("Clear")

    if state.validation_error:
        st.error(state.validation_error)

    return (url if submitted else None), cleared


def live_view(placeholder, state: UiState):
    """Show the remote browser while the extraction runs."""
    placeholder.empty()
    if state.show_debug_view:
        with placeholder.container():
            st.caption("Live view of the remote browser")
            components.iframe(state.debug_view_url, height=480)
    elif state.is_loading:
        placeholder.info("Starting a remote browser session...")


def transcript_panel(state: UiState):
    st.subheader(f"Transcript ({len(state.transcript)} segments)")
    text = format_transcript(state.transcript)

    col1, col2 = st.columns([1, 1])
    with col1:
        with st.expander("Copy transcript"):
            st.code(text, language=None)
    with col2:
        st.download_button(
            "Download .txt",
            data=text,
            file_name=transcript_filename(state.video_id),
            mime="text/plain",
        )

    for segment in state.transcript:
        if state.video_id:
            link = build_timestamp_url(state.video_id, segment.timestamp)
            st.markdown(f"[`{segment.timestamp}`]({link}) {segment.text}")
        else:
            st.markdown(f"`{segment.timestamp}` {segment.text}")


def summary_panel(state: UiState):
    st.subheader("Summary")
    if state.summary:
        st.markdown(state.summary)
        with st.expander("Copy summary"):
            st.code(state.summary, language=None)
    if state.summary_error:
        st.error(state.summary_error)

    if st.button("Generate summary", disabled=state.is_summary_loading or not state.transcript):
        client = st.session_state.api_client
        with st.spinner("Generating summary..."):
            st.session_state.ui_state = controller.generate_summary(state, client, notify=notify)
        st.rerun()


def main():
    header()
    init_session_state()

    state: UiState = st.session_state.ui_state
    url, cleared = url_form(state)
    placeholder = st.empty()

    if cleared:
        st.session_state.ui_state = controller.clear(
            state, st.session_state.api_client, client_id=st.session_state.client_id
        )
        st.rerun()

    if url is not None:

        def on_state(new_state: UiState):
            st.session_state.ui_state = new_state
            live_view(placeholder, new_state)

        with st.spinner("Extracting transcript..."):
            st.session_state.ui_state = controller.submit_url(
                state,
                url,
                st.session_state.api_client,
                notify=notify,
                client_id=st.session_state.client_id,
                on_state=on_state,
            )
        st.rerun()

    if state.error:
        st.error(f"Failed to extract transcript: {state.error}")

    if state.transcript:
        left, right = st.columns([3, 2])
        with left:
            transcript_panel(state)
        with right:
            summary_panel(state)

    footer()


if __name__ == "__main__":
    main()
