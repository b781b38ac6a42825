"""Extraction strategies and the fallback chain that resolves media URLs."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol, Sequence, Union

from bs4 import BeautifulSoup, NavigableString
from pydantic import ValidationError

from ttdl.config import (
    DEFAULT_SCOPE_KEY,
    REHYDRATION_ELEMENT_ID,
    VIDEO_DETAIL_KEY,
    DownloaderConfig,
    MediaKind,
)
from ttdl.errors import BackupApiError, MalformedResponseError, ResolutionFailedError, TtdlError
from ttdl.fetcher import Fetcher
from ttdl.models import (
    BackupApiResponse,
    BackupApiResult,
    MediaDescriptor,
    MediaReference,
    PhotoSetDescriptor,
    Resolution,
    VideoDescriptor,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolved:
    descriptor: MediaDescriptor


@dataclass(frozen=True)
class NotApplicable:
    reason: str


@dataclass(frozen=True)
class Failed:
    reason: str


StrategyOutcome = Union[Resolved, NotApplicable, Failed]


class ExtractionStrategy(Protocol):
    name: str
    source: str
    applies_to: frozenset[MediaKind]

    def attempt(self, ref: MediaReference) -> StrategyOutcome: ...


def _dig(data: Any, *keys: Any) -> Any:
    current = data
    for key in keys:
        if isinstance(key, int):
            if not isinstance(current, list) or len(current) <= key:
                return None
        elif not isinstance(current, dict):
            return None
        current = current[key] if isinstance(key, int) else current.get(key)
        if current is None:
            return None
    return current


def extract_rehydration_json(html: str) -> str | None:
    """Return the text payload of the page's rehydration script element."""

    soup = BeautifulSoup(html, "html.parser")
    element = soup.find(id=REHYDRATION_ELEMENT_ID)
    if element is None or not element.contents:
        return None

    child = element.contents[0]
    if not isinstance(child, NavigableString):
        return None
    text = str(child).strip()
    return text or None


def parse_video_detail(raw_json: str) -> VideoDescriptor | None:
    """Map rehydration JSON to a video descriptor, or None when fields are missing."""

    try:
        parsed = json.loads(raw_json)
    except ValueError:
        return None

    item = _dig(parsed, DEFAULT_SCOPE_KEY, VIDEO_DETAIL_KEY, "itemInfo", "itemStruct")
    if not isinstance(item, dict):
        return None

    author_id = _dig(item, "author", "uniqueId")
    video = item.get("video")
    if not author_id or not isinstance(video, dict):
        return None

    playback_url = _dig(video, "bitrateInfo", 0, "PlayAddr", "UrlList", 0) or video.get("playAddr")
    if not playback_url or not item.get("id"):
        return None

    if item.get("isAgeRestricted"):
        logger.debug("Item %s is age restricted; resolving it like any other item", item.get("id"))

    try:
        return VideoDescriptor(
            author_id=author_id,
            item_id=item["id"],
            created_at=int(item.get("createTime")),
            playback_url=playback_url,
            title_or_description=item.get("desc") or None,
        )
    except (TypeError, ValueError):
        # ValidationError is a ValueError subclass.
        return None


def parse_backup_payload(payload: Any) -> BackupApiResult:
    """Validate a backup API body and return its ``result`` object."""

    if not isinstance(payload, dict):
        raise MalformedResponseError("Backup API returned a non-object body")

    status = payload.get("status")
    if status is None:
        raise MalformedResponseError("Backup API response has no status field")
    if status != "success":
        raise BackupApiError(f"API Error: {status}")

    try:
        response = BackupApiResponse.model_validate(payload)
    except ValidationError as exc:
        raise MalformedResponseError(f"Backup API response is malformed: {exc}") from exc

    if response.result is None:
        raise MalformedResponseError("Backup API response has no result")
    return response.result


def video_from_backup(result: BackupApiResult) -> VideoDescriptor:
    if result.type != "video":
        raise MalformedResponseError(f"API failed to retrieve video data: unexpected type '{result.type}'")
    if result.video is None or not result.video.play_addr:
        raise MalformedResponseError("API failed to retrieve video data: no playback URL")

    try:
        return VideoDescriptor(
            author_id=result.author.username,
            item_id=result.id,
            created_at=result.create_time,
            playback_url=result.video.play_addr[0],
        )
    except ValidationError as exc:
        raise MalformedResponseError(f"API returned an unusable video: {exc}") from exc


def photo_set_from_backup(result: BackupApiResult) -> PhotoSetDescriptor:
    if result.type != "image" or not result.images:
        raise MalformedResponseError("Invalid photo data structure")

    try:
        return PhotoSetDescriptor(
            author_id=result.author.username,
            set_id=result.id,
            created_at=result.create_time,
            image_urls=result.images,
        )
    except ValidationError as exc:
        raise MalformedResponseError(f"API returned an unusable photo set: {exc}") from exc


class MarkupStrategy:
    """Read the video description embedded in the public page HTML."""

    name = "HTML"
    source = "markup"
    applies_to = frozenset({MediaKind.VIDEO})

    def __init__(self, fetcher: Fetcher) -> None:
        self.fetcher = fetcher

    def attempt(self, ref: MediaReference) -> StrategyOutcome:
        try:
            html = self.fetcher.get_text(ref.source_url)
        except TtdlError as exc:
            return NotApplicable(f"page fetch failed: {exc}")

        raw_json = extract_rehydration_json(html)
        if raw_json is None:
            return NotApplicable("rehydration element not found")

        descriptor = parse_video_detail(raw_json)
        if descriptor is None:
            return NotApplicable("rehydration data lacks video fields")
        return Resolved(descriptor)


class BackupApiStrategy:
    """Ask the third-party download API for the media behind a URL."""

    name = "API"
    source = "backup_api"

    def __init__(self, fetcher: Fetcher, config: DownloaderConfig, kind: MediaKind) -> None:
        self.fetcher = fetcher
        self.config = config
        self.kind = kind
        self.applies_to = frozenset({kind})

    def attempt(self, ref: MediaReference) -> StrategyOutcome:
        try:
            payload = self.fetcher.get_json(self.config.api_url, params={"url": ref.source_url})
            result = parse_backup_payload(payload)
            if self.kind == MediaKind.PHOTO_SET:
                return Resolved(photo_set_from_backup(result))
            return Resolved(video_from_backup(result))
        except TtdlError as exc:
            return Failed(str(exc))


class ResolutionChain:
    """Apply strategies in order until one of them resolves the reference."""

    def __init__(self, strategies: Sequence[ExtractionStrategy]) -> None:
        self.strategies = list(strategies)

    @classmethod
    def default(cls, fetcher: Fetcher, config: DownloaderConfig) -> "ResolutionChain":
        return cls(
            [
                MarkupStrategy(fetcher),
                BackupApiStrategy(fetcher, config, MediaKind.VIDEO),
                BackupApiStrategy(fetcher, config, MediaKind.PHOTO_SET),
            ]
        )

    def resolve(self, ref: MediaReference) -> Resolution:
        last_failure: str | None = None

        for strategy in self.strategies:
            if ref.kind not in strategy.applies_to:
                continue

            outcome = strategy.attempt(ref)
            if isinstance(outcome, Resolved):
                logger.info("Resolved %s via %s strategy", ref.source_url, strategy.name)
                return Resolution(descriptor=outcome.descriptor, strategy=strategy.name)
            if isinstance(outcome, NotApplicable):
                logger.debug("%s strategy not applicable for %s: %s", strategy.name, ref.source_url, outcome.reason)
                continue
            if isinstance(outcome, Failed):
                logger.warning("%s strategy failed for %s: %s", strategy.name, ref.source_url, outcome.reason)
                last_failure = outcome.reason
                continue
            raise TypeError(f"Unexpected strategy outcome: {outcome!r}")

        raise ResolutionFailedError(last_failure or f"No strategy could resolve {ref.kind.value} URL {ref.source_url}")
