"""Configuration models and enums for ttdl."""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

PLATFORM_URL_RE = re.compile(r"^https?://(www\.|vm\.|vt\.)?tiktok\.com(?:/(.*))?$")
PHOTO_PATH_SEGMENT = "photo"

REHYDRATION_ELEMENT_ID = "__UNIVERSAL_DATA_FOR_REHYDRATION__"
DEFAULT_SCOPE_KEY = "__DEFAULT_SCOPE__"
VIDEO_DETAIL_KEY = "webapp.video-detail"

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; WOW64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
MOBILE_USER_AGENT = "TikTok 26.2.0 rv:262018 (iPhone; iOS 14.4.2; en_US) Cronet"
BACKUP_API_URL = "https://api-tiktok-downloader.vercel.app/api/v4/download"


class MediaKind(str, Enum):
    VIDEO = "video"
    PHOTO_SET = "photo_set"


class OutcomeStatus(str, Enum):
    SUCCESS = "Success"
    FAILED = "Failed"


class DownloaderConfig(BaseModel):
    """User-adjustable settings for one download session."""

    video_dir: Path = Path("./tiktok-videos")
    image_dir: Path = Path("./tiktok-images")
    api_url: str = Field(default=BACKUP_API_URL, min_length=1)
    user_agent: str = Field(default=DESKTOP_USER_AGENT, min_length=1)
    api_user_agent: str = Field(default=MOBILE_USER_AGENT, min_length=1)
    timeout_seconds: float | None = Field(default=30.0, gt=0)
    chunk_size: int = Field(default=64 * 1024, ge=1024)

    @model_validator(mode="after")
    def validate_output_dirs(self) -> "DownloaderConfig":
        if self.video_dir.resolve() == self.image_dir.resolve():
            raise ValueError("video_dir and image_dir must be different directories")
        return self
