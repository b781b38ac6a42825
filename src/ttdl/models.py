"""Domain models used by ttdl."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal, Union

import httpx
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

from ttdl.config import MediaKind, OutcomeStatus


def _check_media_url(value: str) -> str:
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as exc:
        raise ValueError(f"invalid media URL '{value}': {exc}") from exc
    if url.scheme not in {"http", "https"} or not url.host:
        raise ValueError(f"media URL must be absolute http(s): '{value}'")
    return value


MediaUrl = Annotated[str, Field(min_length=1), AfterValidator(_check_media_url)]


class MediaReference(BaseModel):
    """A classified user-provided URL and the kind of media it points at."""

    model_config = ConfigDict(frozen=True)

    source_url: str
    kind: MediaKind


class VideoDescriptor(BaseModel):
    """A resolved single video."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    kind: Literal["video"] = "video"
    author_id: str = Field(min_length=1)
    item_id: str = Field(min_length=1)
    created_at: int
    playback_url: MediaUrl
    title_or_description: str | None = None


class PhotoSetDescriptor(BaseModel):
    """A resolved photo slideshow; image order is display order."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    kind: Literal["photo_set"] = "photo_set"
    author_id: str = Field(min_length=1)
    set_id: str = Field(min_length=1)
    created_at: int
    image_urls: list[MediaUrl] = Field(min_length=1)


MediaDescriptor = Annotated[Union[VideoDescriptor, PhotoSetDescriptor], Field(discriminator="kind")]


class Resolution(BaseModel):
    """A descriptor together with the name of the strategy that produced it."""

    model_config = ConfigDict(frozen=True)

    descriptor: MediaDescriptor
    strategy: str


class RetrievalResult(BaseModel):
    """Files written for one descriptor, in descriptor order."""

    saved_paths: list[Path] = Field(default_factory=list)
    byte_counts: list[int] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_parallel_lists(self) -> "RetrievalResult":
        if len(self.saved_paths) != len(self.byte_counts):
            raise ValueError("saved_paths and byte_counts must have the same length")
        return self


class OutcomeRecord(BaseModel):
    """One line of the end-of-session summary."""

    model_config = ConfigDict(frozen=True)

    media_kind: MediaKind
    id: str
    author: str
    status: OutcomeStatus
    details: str
    strategy: str | None = None


class BackupApiAuthor(BaseModel):
    username: str = Field(min_length=1)


class BackupApiVideo(BaseModel):
    play_addr: list[str] = Field(default_factory=list, alias="playAddr")


class BackupApiResult(BaseModel):
    """The ``result`` object of a backup API response."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    type: str
    id: str = Field(min_length=1)
    create_time: int = Field(alias="createTime")
    author: BackupApiAuthor
    video: BackupApiVideo | None = None
    images: list[str] | None = None


class BackupApiResponse(BaseModel):
    """Envelope returned by the backup download API."""

    status: str
    result: BackupApiResult | None = None
