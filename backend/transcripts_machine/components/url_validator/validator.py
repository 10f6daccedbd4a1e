import re
from typing import Iterable, Optional

from transcripts_machine.core.errors import ValidationError

# watch?v=, watch?...&v=, embed/, v/ and youtu.be/ shapes with an 11-char id
_YOUTUBE_URL_PATTERN = re.compile(
    r"^(https?://)?(www\.)?"
    r"(youtube\.com/(?:embed/|v/|watch\?v=|watch\?.+&v=)|youtu\.be/)"
    r"([\w-]{11})(?:\S+)?$"
)

_SEGMENT_SEPARATOR = "\n\n"
_LINE_DELIMITER = ": "


def is_valid_youtube_url(url: str) -> bool:
    """Check whether ``url`` matches one of the known YouTube video URL shapes."""
    return extract_video_id(url) is not None


def extract_video_id(url: str) -> Optional[str]:
    """Extract the 11-character video id, or None when the URL is not recognised."""
    if not isinstance(url, str):
        return None
    match = _YOUTUBE_URL_PATTERN.match(url)
    return match.group(4) if match else None


def require_youtube_url(url: str) -> str:
    """Return the stripped URL, raising ValidationError for anything unrecognised."""
    candidate = (url or "").strip()
    if not candidate:
        raise ValidationError("Please enter a YouTube URL")
    if not is_valid_youtube_url(candidate):
        raise ValidationError("Please enter a valid YouTube URL")
    return candidate


def timestamp_to_seconds(timestamp: str) -> int:
    """
    Convert ``MM:SS`` or ``HH:MM:SS`` into seconds.

    Anything else (wrong separator count, parts that are not plain ASCII
    digits such as signs or underscores) degrades to 0.
    """
    parts = (timestamp or "").strip().split(":")
    if not all(part.isascii() and part.isdigit() for part in parts):
        return 0
    numbers = [int(part) for part in parts]

    if len(numbers) == 2:
        minutes, seconds = numbers
        return minutes * 60 + seconds
    if len(numbers) == 3:
        hours, minutes, seconds = numbers
        return hours * 3600 + minutes * 60 + seconds
    return 0


def build_timestamp_url(video_id: str, timestamp: str) -> str:
    """Deep link into the video at the segment's timestamp."""
    seconds = timestamp_to_seconds(timestamp)
    return f"https://www.youtube.com/watch?v={video_id}&t={seconds}"


def format_transcript(segments: Iterable) -> str:
    """Render segments as ``"<timestamp>: <text>"`` blocks for copy and download."""
    return _SEGMENT_SEPARATOR.join(
        f"{segment.timestamp}{_LINE_DELIMITER}{segment.text}" for segment in segments
    )


def parse_formatted_transcript(text: str) -> list[tuple[str, str]]:
    """Split text produced by ``format_transcript`` back into (timestamp, text) pairs."""
    pairs: list[tuple[str, str]] = []
    for block in text.split(_SEGMENT_SEPARATOR):
        if not block:
            continue
        timestamp, _, body = block.partition(_LINE_DELIMITER)
        pairs.append((timestamp, body))
    return pairs


def transcript_filename(video_id: Optional[str]) -> str:
    """File name used when downloading a transcript as text."""
    if video_id:
        return f"youtube-transcript-{video_id}.txt"
    return "youtube-transcript.txt"
