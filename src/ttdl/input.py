"""URL classification utilities."""

from __future__ import annotations

from urllib.parse import urlparse

from ttdl.config import PHOTO_PATH_SEGMENT, PLATFORM_URL_RE, MediaKind
from ttdl.errors import InvalidUrlError
from ttdl.models import MediaReference


def media_kind_for(url: str) -> MediaKind:
    """Guess the media kind from the URL path; photo slides carry a ``photo`` segment."""

    try:
        path = urlparse((url or "").strip()).path
    except ValueError:
        return MediaKind.VIDEO
    parts = [part for part in path.split("/") if part]
    return MediaKind.PHOTO_SET if PHOTO_PATH_SEGMENT in parts else MediaKind.VIDEO


def classify(url: str) -> MediaReference:
    """Validate a TikTok URL and decide whether it points at a video or a photo set."""

    candidate = (url or "").strip()
    if not candidate:
        raise InvalidUrlError("URL must not be empty")

    if PLATFORM_URL_RE.match(candidate) is None:
        raise InvalidUrlError(f"Invalid TikTok URL format: '{candidate}'")

    return MediaReference(source_url=candidate, kind=media_kind_for(candidate))
