import pytest

from transcripts_machine.components.transcript_extractor.schemas import TranscriptSegment
from transcripts_machine.components.url_validator.validator import (
    build_timestamp_url,
    extract_video_id,
    format_transcript,
    is_valid_youtube_url,
    parse_formatted_transcript,
    require_youtube_url,
    timestamp_to_seconds,
    transcript_filename,
)
from transcripts_machine.core.errors import ValidationError

VIDEO_ID = "dQw4w9WgXcQ"


@pytest.mark.parametrize(
    "url",
    [
        f"https://www.youtube.com/watch?v={VIDEO_ID}",
        f"http://youtube.com/watch?v={VIDEO_ID}",
        f"youtube.com/watch?v={VIDEO_ID}",
        f"https://www.youtube.com/watch?feature=share&v={VIDEO_ID}",
        f"https://www.youtube.com/embed/{VIDEO_ID}",
        f"https://www.youtube.com/v/{VIDEO_ID}",
        f"https://youtu.be/{VIDEO_ID}",
        f"https://youtu.be/{VIDEO_ID}?t=42",
        f"https://www.youtube.com/watch?v={VIDEO_ID}&list=PL123",
    ],
)
def test_recognised_shapes(url):
    assert is_valid_youtube_url(url)
    assert extract_video_id(url) == VIDEO_ID


@pytest.mark.parametrize(
    "url",
    [
        "not a url",
        "",
        "https://vimeo.com/123456789",
        "https://www.youtube.com/watch?v=short",
        "https://www.youtube.com/channel/UC1234567890",
        f"https://www.youtube.com/shorts/{VIDEO_ID}",
        f"ftp://youtube.com/watch?v={VIDEO_ID}",
        f"https://www.youtube.com/watch?v={VIDEO_ID} trailing",
    ],
)
def test_rejected_shapes(url):
    assert not is_valid_youtube_url(url)
    assert extract_video_id(url) is None


def test_non_string_input_is_invalid():
    assert extract_video_id(None) is None  # type: ignore[arg-type]
    assert not is_valid_youtube_url(42)  # type: ignore[arg-type]


def test_require_youtube_url_strips_whitespace():
    url = f"  https://youtu.be/{VIDEO_ID}  "
    assert require_youtube_url(url) == f"https://youtu.be/{VIDEO_ID}"


def test_require_youtube_url_messages():
    with pytest.raises(ValidationError, match="Please enter a YouTube URL"):
        require_youtube_url("   ")
    with pytest.raises(ValidationError, match="valid YouTube URL"):
        require_youtube_url("not a url")


def test_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        require_youtube_url("not a url")


@pytest.mark.parametrize(
    "timestamp, seconds",
    [
        ("01:05", 65),
        ("1:00:00", 3600),
        ("00:00", 0),
        ("12:34", 754),
        ("1:02:03", 3723),
        ("5", 0),
        ("1:2:3:4", 0),
        ("", 0),
        ("ab:cd", 0),
        ("-1:05", 0),
        ("1_0:05", 0),
        ("+1:05", 0),
        ("1: 05", 0),
        ("\u00b2:05", 0),
    ],
)
def test_timestamp_to_seconds(timestamp, seconds):
    assert timestamp_to_seconds(timestamp) == seconds


def test_deep_links_round_trip_to_the_same_video():
    segments = [
        TranscriptSegment(text="intro", timestamp="00:00"),
        TranscriptSegment(text="middle", timestamp="03:15"),
        TranscriptSegment(text="late", timestamp="1:00:01"),
    ]
    for segment in segments:
        link = build_timestamp_url(VIDEO_ID, segment.timestamp)
        assert extract_video_id(link) == VIDEO_ID
        assert link.endswith(f"&t={segment.seconds}")


def test_format_and_parse_transcript():
    segments = [
        TranscriptSegment(text="Hello there", timestamp="00:00"),
        TranscriptSegment(text="Note: colons survive", timestamp="00:07"),
    ]
    text = format_transcript(segments)

    assert text == "00:00: Hello there\n\n00:07: Note: colons survive"
    assert parse_formatted_transcript(text) == [
        ("00:00", "Hello there"),
        ("00:07", "Note: colons survive"),
    ]


def test_transcript_filename():
    assert transcript_filename(VIDEO_ID) == f"youtube-transcript-{VIDEO_ID}.txt"
    assert transcript_filename(None) == "youtube-transcript.txt"
