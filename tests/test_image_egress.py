from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from adapters.image_egress import (
    CACHE_CONTROL,
    download_avatar,
    egress_fallback_url,
    is_generated_avatar_url,
)
from core.domain.errors import EgressFailure, InvalidAvatarUrlError
from core.domain.models import Platform
from core.services.placeholder import placeholder_url


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.mark.asyncio
async def test_download_succeeds_after_a_retry(settings, make_client):
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(503)
        return httpx.Response(200, content=b"\xff\xd8\xff", headers={"content-type": "image/jpeg"})

    sleep = SleepRecorder()
    async with make_client(handler) as client:
        avatar = await download_avatar("https://pbs.twimg.com/profile_images/1/a.jpg", settings, client=client, sleep=sleep)

    assert avatar.content == b"\xff\xd8\xff"
    assert avatar.content_type == "image/jpeg"
    assert avatar.cache_control == CACHE_CONTROL
    assert sleep.delays == [1.0]
    assert calls[0].headers["Referer"] == "https://pbs.twimg.com"
    assert calls[0].headers["Accept"].startswith("image/")


@pytest.mark.asyncio
async def test_missing_content_type_defaults_to_png(settings, make_client):
    async with make_client(lambda r: httpx.Response(200, content=b"\x89PNG")) as client:
        avatar = await download_avatar("https://cdn.example/a", settings, client=client, sleep=SleepRecorder())

    assert avatar.content_type == "image/png"


@pytest.mark.asyncio
async def test_timeouts_are_retried(settings, make_client):
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) < 3:
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(200, content=b"ok", headers={"content-type": "image/webp"})

    sleep = SleepRecorder()
    async with make_client(handler) as client:
        avatar = await download_avatar("https://cdn.example/a.webp", settings, client=client, sleep=sleep)

    assert avatar.content_type == "image/webp"
    assert len(attempts) == 3
    assert sleep.delays == [1.0, 1.0]


@pytest.mark.asyncio
async def test_exhausted_retries_raise_with_platform_placeholder(settings, make_client):
    attempts = []

    def handler(request):
        attempts.append(request)
        return httpx.Response(500)

    url = "https://scontent-xyz.cdninstagram.com/v/t51.2885-19/pic.jpg"
    sleep = SleepRecorder()
    async with make_client(handler) as client:
        with pytest.raises(EgressFailure) as excinfo:
            await download_avatar(url, settings, client=client, sleep=sleep)

    assert len(attempts) == 3
    assert sleep.delays == [1.0, 1.0]
    assert excinfo.value.attempts == 3
    assert excinfo.value.reason == "HTTP 500"
    assert excinfo.value.fallback_url == placeholder_url(Platform.INSTAGRAM, "IN", settings)


@pytest.mark.asyncio
async def test_generated_avatars_are_fetched_once(settings, make_client):
    attempts = []

    def handler(request):
        attempts.append(request)
        return httpx.Response(502)

    async with make_client(handler) as client:
        with pytest.raises(EgressFailure) as excinfo:
            await download_avatar("https://ui-avatars.com/api/?name=a", settings, client=client, sleep=SleepRecorder())

    assert len(attempts) == 1
    assert excinfo.value.attempts == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["", "not a url", "/relative/path.png", "javascript:alert(1)"])
async def test_invalid_urls_are_rejected(settings, url):
    with pytest.raises(InvalidAvatarUrlError):
        await download_avatar(url, settings)


def test_fallback_uses_username_from_profile_links(settings):
    assert egress_fallback_url("https://www.instagram.com/nasa/", settings) == placeholder_url(
        Platform.INSTAGRAM, "nasa", settings
    )
    assert egress_fallback_url("https://twitter.com/jack/photo", settings) == placeholder_url(
        Platform.TWITTER, "jack", settings
    )
    assert egress_fallback_url("https://scontent.xx.fbcdn.net/v/a.jpg", settings) == placeholder_url(
        Platform.FACEBOOK, "FA", settings
    )


def test_fallback_for_unknown_hosts_is_generic(settings):
    params = parse_qs(urlparse(egress_fallback_url("https://cdn.example/a.png", settings)).query)
    assert params == {"name": ["User"], "background": ["random"], "size": ["256"]}


def test_generated_hosts():
    assert is_generated_avatar_url("https://ui-avatars.com/api/?name=a")
    assert is_generated_avatar_url("https://avatar.vercel.sh/twitter:jack")
    assert not is_generated_avatar_url("https://unavatar.io/twitter/jack")
