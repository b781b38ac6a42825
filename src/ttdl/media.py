"""File naming and sequential downloading of resolved media."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from ttdl.config import DownloaderConfig
from ttdl.errors import RetrievalFailedError, TtdlError
from ttdl.fetcher import Fetcher
from ttdl.models import MediaDescriptor, PhotoSetDescriptor, RetrievalResult, VideoDescriptor

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def format_upload_date(created_at: int) -> str:
    """Format epoch seconds as DDMMYYYY in UTC."""

    return datetime.fromtimestamp(created_at, tz=timezone.utc).strftime("%d%m%Y")


def video_filename(descriptor: VideoDescriptor) -> str:
    date = format_upload_date(descriptor.created_at)
    return f"{descriptor.author_id}_vid_{date}_{descriptor.item_id}.mp4"


def image_filename(descriptor: PhotoSetDescriptor, index: int) -> str:
    date = format_upload_date(descriptor.created_at)
    return f"{descriptor.author_id}_img_{date}_{descriptor.set_id}_{index + 1}.jpg"


class Retriever:
    """Persist resolved media under the configured output directories."""

    def __init__(self, fetcher: Fetcher, config: DownloaderConfig) -> None:
        self.fetcher = fetcher
        self.config = config

    def retrieve(
        self,
        descriptor: MediaDescriptor,
        referer_url: str,
        on_progress: ProgressCallback | None = None,
    ) -> RetrievalResult:
        if isinstance(descriptor, VideoDescriptor):
            return self._retrieve_video(descriptor, referer_url)
        return self._retrieve_photo_set(descriptor, referer_url, on_progress)

    def _write(self, url: str, destination: Path, referer_url: str) -> int:
        written = self.fetcher.stream_to_file(url, destination, headers={"Referer": referer_url})
        logger.info("Saved %s (%d bytes)", destination, written)
        return written

    def _retrieve_video(self, descriptor: VideoDescriptor, referer_url: str) -> RetrievalResult:
        destination = self.config.video_dir / video_filename(descriptor)
        try:
            self.config.video_dir.mkdir(parents=True, exist_ok=True)
            written = self._write(descriptor.playback_url, destination, referer_url)
        except (TtdlError, OSError) as exc:
            raise RetrievalFailedError(f"Video download failed: {exc}") from exc

        return RetrievalResult(saved_paths=[destination], byte_counts=[written])

    def _retrieve_photo_set(
        self,
        descriptor: PhotoSetDescriptor,
        referer_url: str,
        on_progress: ProgressCallback | None,
    ) -> RetrievalResult:
        total = len(descriptor.image_urls)
        result = RetrievalResult()

        try:
            self.config.image_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise RetrievalFailedError(f"Cannot create image directory: {exc}", total=total) from exc

        for index, url in enumerate(descriptor.image_urls):
            if on_progress is not None:
                on_progress(index + 1, total)

            destination = self.config.image_dir / image_filename(descriptor, index)
            try:
                written = self._write(url, destination, referer_url)
            except (TtdlError, OSError) as exc:
                raise RetrievalFailedError(
                    f"Image {index + 1}/{total} download failed: {exc}",
                    saved_paths=result.saved_paths,
                    total=total,
                ) from exc

            result.saved_paths.append(destination)
            result.byte_counts.append(written)

        return result
