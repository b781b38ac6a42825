import httpx
import pytest
from conftest import PAGE_URL, PHOTO_URL, VIDEO_CDN_URL, api_image_body, api_video_body, item_struct, rehydration_html

from ttdl.config import BACKUP_API_URL, MediaKind
from ttdl.errors import ResolutionFailedError
from ttdl.extractor import Failed, NotApplicable, Resolved, ResolutionChain
from ttdl.fetcher import Fetcher
from ttdl.input import classify
from ttdl.models import PhotoSetDescriptor, VideoDescriptor


def _chain(fake_web, config) -> ResolutionChain:
    return ResolutionChain.default(Fetcher(config, client=fake_web.client()), config)


def test_markup_success_never_calls_backup_api(fake_web, config) -> None:
    fake_web.add(PAGE_URL, httpx.Response(200, text=rehydration_html(item_struct())))
    fake_web.add(BACKUP_API_URL, httpx.Response(200, json=api_video_body()))

    resolution = _chain(fake_web, config).resolve(classify(PAGE_URL))

    assert resolution.strategy == "HTML"
    assert isinstance(resolution.descriptor, VideoDescriptor)
    assert resolution.descriptor.title_or_description == "hello"
    assert fake_web.calls_to(BACKUP_API_URL) == []


def test_missing_rehydration_element_falls_through_to_backup_api(fake_web, config) -> None:
    fake_web.add(PAGE_URL, httpx.Response(200, text=rehydration_html(None)))
    fake_web.add(BACKUP_API_URL, httpx.Response(200, json=api_video_body()))

    resolution = _chain(fake_web, config).resolve(classify(PAGE_URL))

    assert resolution.strategy == "API"
    assert resolution.descriptor.playback_url == VIDEO_CDN_URL
    assert [r.url.host for r in fake_web.requests] == ["vt.tiktok.com", "api-tiktok-downloader.vercel.app"]


def test_page_transport_error_falls_through_to_backup_api(fake_web, config) -> None:
    fake_web.fail(PAGE_URL)
    fake_web.add(BACKUP_API_URL, httpx.Response(200, json=api_video_body()))

    resolution = _chain(fake_web, config).resolve(classify(PAGE_URL))

    assert resolution.strategy == "API"


def test_backup_api_receives_source_url_and_mobile_agent(fake_web, config) -> None:
    fake_web.add(PAGE_URL, httpx.Response(403))
    fake_web.add(BACKUP_API_URL, httpx.Response(200, json=api_video_body()))

    _chain(fake_web, config).resolve(classify(PAGE_URL))

    (api_request,) = fake_web.calls_to(BACKUP_API_URL)
    assert api_request.url.params["url"] == PAGE_URL
    assert api_request.headers["User-Agent"] == config.api_user_agent


def test_backup_api_failure_is_terminal_for_videos(fake_web, config) -> None:
    fake_web.add(PAGE_URL, httpx.Response(200, text=rehydration_html(None)))
    fake_web.add(BACKUP_API_URL, httpx.Response(200, json=api_video_body([])))

    with pytest.raises(ResolutionFailedError, match="no playback URL"):
        _chain(fake_web, config).resolve(classify(PAGE_URL))


def test_backup_api_transport_failure_is_terminal(fake_web, config) -> None:
    fake_web.fail(PAGE_URL)
    fake_web.fail(BACKUP_API_URL)

    with pytest.raises(ResolutionFailedError, match="Failed to fetch"):
        _chain(fake_web, config).resolve(classify(PAGE_URL))


def test_photo_sets_use_only_the_backup_api(fake_web, config) -> None:
    images = ["https://cdn.example.com/1.jpg", "https://cdn.example.com/2.jpg"]
    fake_web.add(BACKUP_API_URL, httpx.Response(200, json=api_image_body(images)))

    resolution = _chain(fake_web, config).resolve(classify(PHOTO_URL))

    assert isinstance(resolution.descriptor, PhotoSetDescriptor)
    assert resolution.descriptor.image_urls == images
    assert len(fake_web.requests) == 1
    assert fake_web.requests[0].url.host == "api-tiktok-downloader.vercel.app"


def test_photo_set_with_video_payload_fails(fake_web, config) -> None:
    fake_web.add(BACKUP_API_URL, httpx.Response(200, json=api_video_body()))

    with pytest.raises(ResolutionFailedError, match="Invalid photo data structure"):
        _chain(fake_web, config).resolve(classify(PHOTO_URL))
    assert len(fake_web.requests) == 1


class _ScriptedStrategy:
    def __init__(self, name, kinds, outcome) -> None:
        self.name = name
        self.source = "test"
        self.applies_to = frozenset(kinds)
        self.outcome = outcome
        self.attempts = 0

    def attempt(self, ref):
        self.attempts += 1
        return self.outcome


def test_chain_skips_strategies_for_other_kinds() -> None:
    descriptor = VideoDescriptor(author_id="ab", item_id="1", created_at=0, playback_url="https://cdn/x.mp4")
    photo_only = _ScriptedStrategy("photo", {MediaKind.PHOTO_SET}, Failed("should not run"))
    video = _ScriptedStrategy("video", {MediaKind.VIDEO}, Resolved(descriptor))

    resolution = ResolutionChain([photo_only, video]).resolve(classify(PAGE_URL))

    assert resolution.strategy == "video"
    assert photo_only.attempts == 0


def test_chain_continues_after_failure_and_reports_last_reason() -> None:
    first = _ScriptedStrategy("first", {MediaKind.VIDEO}, Failed("first broke"))
    second = _ScriptedStrategy("second", {MediaKind.VIDEO}, NotApplicable("nothing here"))

    with pytest.raises(ResolutionFailedError, match="first broke"):
        ResolutionChain([first, second]).resolve(classify(PAGE_URL))
    assert second.attempts == 1


def test_chain_without_applicable_strategies_fails() -> None:
    with pytest.raises(ResolutionFailedError, match="No strategy"):
        ResolutionChain([]).resolve(classify(PHOTO_URL))
