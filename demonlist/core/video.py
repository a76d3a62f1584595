"""
Video URL validation.

Videos must be hosted on one of a small set of platforms. Accepted URLs are
rewritten to one canonical form per platform so the same video is always
stored the same way.
"""
import logging
from typing import Optional
from urllib.parse import parse_qs

from pydantic import AnyUrl, HttpUrl, TypeAdapter, ValidationError

from demonlist.errors import MalformedRawUrl, MalformedVideoUrl, UnsupportedVideoHost

logger = logging.getLogger(__name__)

_http_url = TypeAdapter(HttpUrl)
_any_url = TypeAdapter(AnyUrl)

YOUTUBE_HOSTS = {"www.youtube.com", "youtube.com", "m.youtube.com"}
YOUTUBE_SHORT_HOSTS = {"youtu.be"}
TWITCH_HOSTS = {"www.twitch.tv", "twitch.tv", "m.twitch.tv"}
VIMEO_HOSTS = {"vimeo.com", "www.vimeo.com"}
BILIBILI_HOSTS = {"www.bilibili.com", "bilibili.com"}


def _segments(url: HttpUrl) -> list:
    return [part for part in (url.path or "").split("/") if part]


def _youtube(url: HttpUrl) -> Optional[str]:
    segments = _segments(url)
    if segments == ["watch"]:
        ids = parse_qs(url.query or "").get("v")
        video_id = ids[0] if ids else None
    elif len(segments) == 2 and segments[0] in ("embed", "shorts", "live"):
        video_id = segments[1]
    else:
        return None
    return f"https://www.youtube.com/watch?v={video_id}" if video_id else None


def _youtube_short(url: HttpUrl) -> Optional[str]:
    segments = _segments(url)
    if len(segments) != 1:
        return None
    return f"https://www.youtube.com/watch?v={segments[0]}"


def _twitch(url: HttpUrl) -> Optional[str]:
    segments = _segments(url)
    if len(segments) == 2 and segments[0] == "videos":
        return f"https://www.twitch.tv/videos/{segments[1]}"
    if len(segments) == 3 and segments[1] == "clip":
        return f"https://clips.twitch.tv/{segments[2]}"
    return None


def _twitch_clip(url: HttpUrl) -> Optional[str]:
    segments = _segments(url)
    return f"https://clips.twitch.tv/{segments[0]}" if len(segments) == 1 else None


def _vimeo(url: HttpUrl) -> Optional[str]:
    segments = _segments(url)
    if len(segments) == 1 and segments[0].isdigit():
        return f"https://vimeo.com/{segments[0]}"
    return None


def _bilibili(url: HttpUrl) -> Optional[str]:
    segments = _segments(url)
    if len(segments) == 2 and segments[0] == "video":
        return f"https://www.bilibili.com/video/{segments[1]}"
    return None


_CANONICALIZERS = {}
_CANONICALIZERS.update({host: _youtube for host in YOUTUBE_HOSTS})
_CANONICALIZERS.update({host: _youtube_short for host in YOUTUBE_SHORT_HOSTS})
_CANONICALIZERS.update({host: _twitch for host in TWITCH_HOSTS})
_CANONICALIZERS["clips.twitch.tv"] = _twitch_clip
_CANONICALIZERS.update({host: _vimeo for host in VIMEO_HOSTS})
_CANONICALIZERS.update({host: _bilibili for host in BILIBILI_HOSTS})


def validate_video(video: str) -> str:
    """
    Validates a video URL and returns its canonical form.

    Raises:
        MalformedVideoUrl: the URL does not parse, or does not point at a video.
        UnsupportedVideoHost: the URL is hosted somewhere we do not accept.
    """
    try:
        url = _http_url.validate_python(video.strip())
    except ValidationError:
        raise MalformedVideoUrl() from None

    host = (url.host or "").lower()
    canonicalize = _CANONICALIZERS.get(host)
    if canonicalize is None:
        raise UnsupportedVideoHost(host)

    canonical = canonicalize(url)
    if canonical is None:
        raise MalformedVideoUrl()

    if canonical != video:
        logger.debug(f"Canonicalized video {video} to {canonical}")
    return canonical


def validate_raw_footage(raw_footage: str) -> str:
    """Checks that raw footage is a well-formed URL. Any host is fine."""
    try:
        _any_url.validate_python(raw_footage)
    except ValidationError:
        raise MalformedRawUrl() from None
    return raw_footage
