"""
Embed Module - Canonicalize video URLs into embed form.
=======================================================

Every supported shape of a video link maps to exactly one embed URL:

    https://www.youtube.com/watch?v=ID            -> .../embed/ID
    https://youtu.be/ID                           -> .../embed/ID
    https://www.youtube.com/watch?v=ID&list=L     -> .../embed/ID?list=L
    https://www.youtube.com/playlist?list=L       -> .../embed/videoseries?list=L
    https://www.youtube.com/shorts/ID             -> .../embed/ID
    https://www.youtube.com/live/ID               -> .../embed/ID
    https://www.youtube-nocookie.com/embed/ID     -> .../embed/ID

Anything else (channel pages, other platforms) is reported as
NOT_CANONICALIZABLE instead of raising.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import parse_qs, urlparse

EMBED_BASE = "https://www.youtube.com/embed/"
PLAYLIST_EMBED = EMBED_BASE + "videoseries"

VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{6,}$")
LIST_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

YOUTUBE_HOSTS = re.compile(
    r"^(?:(?:www|m|music)\.)?youtube(?:-nocookie)?\.(?:com|co\.[a-z]{2}|[a-z]{2,3})$"
)
SHORT_HOSTS = frozenset({"youtu.be", "www.youtu.be"})

# Path prefixes whose next segment is the video id
ID_PATH_PREFIXES = ("embed", "shorts", "live", "v", "e")


class EmbedStatus(str, Enum):
    CANONICAL = "canonical"
    NOT_CANONICALIZABLE = "not_canonicalizable"


@dataclass(frozen=True)
class EmbedResult:
    """Outcome of canonicalizing one URL."""

    source: str
    status: EmbedStatus
    embed_url: Optional[str] = None
    is_playlist: bool = False

    @property
    def ok(self) -> bool:
        return self.status == EmbedStatus.CANONICAL


def _embed(video_id: Optional[str], list_id: Optional[str]) -> Optional[str]:
    if list_id is not None and not LIST_ID_PATTERN.match(list_id):
        list_id = None
    if video_id and VIDEO_ID_PATTERN.match(video_id):
        if list_id:
            return f"{EMBED_BASE}{video_id}?list={list_id}"
        return f"{EMBED_BASE}{video_id}"
    if list_id:
        return f"{PLAYLIST_EMBED}?list={list_id}"
    return None


def _first(query: dict[str, list[str]], key: str) -> Optional[str]:
    values = query.get(key)
    return values[0].strip() if values and values[0].strip() else None


def canonicalize_video_url(url: str) -> EmbedResult:
    """
    Canonicalize a video URL.

    Args:
        url: Source URL in any supported shape

    Returns:
        EmbedResult; `embed_url` is set only when status is CANONICAL

    Example:
        >>> canonicalize_video_url("https://youtu.be/dQw4w9WgXcQ").embed_url
        'https://www.youtube.com/embed/dQw4w9WgXcQ'
        >>> canonicalize_video_url("https://vimeo.com/123").ok
        False
    """
    failed = EmbedResult(source=url, status=EmbedStatus.NOT_CANONICALIZABLE)
    text = (url or "").strip()
    if not text:
        return failed
    if text.lower().startswith("www.") or "://" not in text:
        text = "https://" + text

    parsed = urlparse(text)
    host = (parsed.hostname or "").lower()
    segments = [segment for segment in parsed.path.split("/") if segment]
    query = parse_qs(parsed.query)
    list_id = _first(query, "list")

    video_id: Optional[str] = None
    if host in SHORT_HOSTS:
        video_id = segments[0] if segments else None
    elif YOUTUBE_HOSTS.match(host):
        if not segments:
            return failed
        head = segments[0].lower()
        if head == "watch":
            video_id = _first(query, "v")
        elif head == "playlist":
            video_id = None
        elif head in ID_PATH_PREFIXES and len(segments) > 1:
            video_id = segments[1]
            if video_id == "videoseries":
                video_id = None
        else:
            return failed
    else:
        return failed

    embed_url = _embed(video_id, list_id)
    if embed_url is None:
        return failed
    return EmbedResult(
        source=url,
        status=EmbedStatus.CANONICAL,
        embed_url=embed_url,
        is_playlist=bool(list_id) or "playlist" in url.lower(),
    )
