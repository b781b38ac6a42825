import json
from pathlib import Path
from typing import Callable

import httpx
import pytest

from ttdl.config import BACKUP_API_URL, DownloaderConfig

# 5 March 2024, 12:00 UTC
MARCH_5_2024 = 1709640000

PAGE_URL = "https://vt.tiktok.com/ABCDEF/"
PHOTO_URL = "https://www.tiktok.com/@ab/photo/777"
VIDEO_CDN_URL = "https://cdn.example.com/video/123.mp4"


class FakeWeb:
    """Routes httpx requests to canned responses and remembers every request."""

    def __init__(self) -> None:
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, response: httpx.Response | Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[url] = response if callable(response) else (lambda request, _r=response: _r)

    def fail(self, url: str) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        self.routes[url] = _raise

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, text="not found")
        return route(request)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def calls_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if f"{r.url.scheme}://{r.url.host}{r.url.path}" == url]


def rehydration_html(item_struct: dict | None) -> str:
    if item_struct is None:
        return "<html><body><div id='app'></div></body></html>"
    payload = {"__DEFAULT_SCOPE__": {"webapp.video-detail": {"itemInfo": {"itemStruct": item_struct}}}}
    return (
        "<html><head>"
        f'<script id="__UNIVERSAL_DATA_FOR_REHYDRATION__" type="application/json">{json.dumps(payload)}</script>'
        "</head><body></body></html>"
    )


def item_struct(**overrides: object) -> dict:
    item = {
        "id": "123",
        "createTime": str(MARCH_5_2024),
        "desc": "hello",
        "author": {"uniqueId": "ab"},
        "video": {"playAddr": VIDEO_CDN_URL},
    }
    item.update(overrides)
    return item


def api_video_body(play_addr: list[str] | None = None) -> dict:
    return {
        "status": "success",
        "result": {
            "type": "video",
            "id": 123,
            "createTime": MARCH_5_2024,
            "author": {"username": "ab"},
            "video": {"playAddr": [VIDEO_CDN_URL] if play_addr is None else play_addr},
        },
    }


def api_image_body(images: list[str]) -> dict:
    return {
        "status": "success",
        "result": {
            "type": "image",
            "id": "777",
            "createTime": MARCH_5_2024,
            "author": {"username": "ab"},
            "images": images,
        },
    }


@pytest.fixture
def fake_web() -> FakeWeb:
    return FakeWeb()


@pytest.fixture
def config(tmp_path: Path) -> DownloaderConfig:
    return DownloaderConfig(
        video_dir=tmp_path / "videos",
        image_dir=tmp_path / "images",
        api_url=BACKUP_API_URL,
    )
