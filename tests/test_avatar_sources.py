import httpx
import pytest

from adapters.avatar_sources import build_sources
from adapters.avatar_sources.extraction import first_match, unescape_url, upgrade_twitter_resolution
from adapters.avatar_sources.facebook import (
    PROFILE_HTML_PATTERNS,
    FacebookSource,
    is_default_facebook_image,
    numeric_substring,
)
from adapters.avatar_sources.instagram import InstagramSource, parse_shared_data
from adapters.avatar_sources.twitter import TwitterSource
from adapters.http_client import extract_og_image
from core.domain.errors import StrategyMiss
from core.domain.models import Platform


def _by_name(source, name):
    return next(s for s in source.strategies() if s.name == name)


# --- Facebook -------------------------------------------------------------


@pytest.mark.parametrize(
    "url",
    [
        "https://scontent.xx.fbcdn.net/v/t1.30497-1/84628273_176159830277856_n.jpg",
        "https://static.xx.fbcdn.net/rsrc.php/v3/yo/r/UlIqmHJn-SK.gif",
        "https://scontent.fxyz.fbcdn.net/v/s230x230/abc.jpg",
        "https://scontent.fxyz.fbcdn.net/v/p64x64/abc.jpg",
        "",
    ],
)
def test_silhouette_markers_are_rejected(url):
    assert is_default_facebook_image(url)


def test_real_photo_is_accepted():
    assert not is_default_facebook_image("https://scontent.fxyz.fbcdn.net/v/t39.30808-1/4321_n.jpg?stp=dst-jpg")


def test_silhouette_payload_flag():
    assert is_default_facebook_image({"is_silhouette": True, "url": "https://scontent/x.jpg"})
    assert not is_default_facebook_image({"is_silhouette": False, "url": "https://scontent/x.jpg"})


def test_numeric_substring_picks_longest_run():
    assert numeric_substring("john.smith.100004567890123") == "100004567890123"
    assert numeric_substring("ab1cd234") == "234"
    assert numeric_substring("zuck") is None


def test_facebook_html_patterns_skip_silhouette_og_image():
    html = (
        '<meta property="og:image" content="https://static.xx.fbcdn.net/rsrc.php/v3/logo.png" />'
        '"profilePicLarge":{"uri":"https:\\/\\/scontent.fbcdn.net\\/v\\/t39.30808-1\\/me.jpg?a=1\\u0026b=2"}'
    )
    found = first_match(html, PROFILE_HTML_PATTERNS, reject=is_default_facebook_image)
    assert found == "https://scontent.fbcdn.net/v/t39.30808-1/me.jpg?a=1&b=2"


@pytest.mark.asyncio
async def test_graph_cdn_skips_silhouette_redirects(settings, make_client):
    def handler(request):
        if request.url.host == "graph.facebook.com":
            if request.url.params.get("redirect") == "false":
                return httpx.Response(
                    200,
                    json={"data": {"is_silhouette": False, "url": "https://scontent.fbcdn.net/v/real.jpg"}},
                )
            return httpx.Response(302, headers={"Location": "https://static.xx.fbcdn.net/rsrc.php/silhouette.gif"})
        if request.url.host == "static.xx.fbcdn.net":
            return httpx.Response(200, content=b"GIF89a", headers={"content-type": "image/gif"})
        return httpx.Response(404)

    async with make_client(handler) as client:
        url = await _by_name(FacebookSource(settings), "graph_cdn").attempt(client, "someone")

    assert url == "https://scontent.fbcdn.net/v/real.jpg"


@pytest.mark.asyncio
async def test_graph_cdn_returns_final_redirect_target(settings, make_client):
    def handler(request):
        if request.url.host == "graph.facebook.com":
            return httpx.Response(302, headers={"Location": "https://scontent.fbcdn.net/v/t39.30808-1/zuck.jpg"})
        return httpx.Response(200, content=b"\xff\xd8", headers={"content-type": "image/jpeg"})

    async with make_client(handler) as client:
        url = await _by_name(FacebookSource(settings), "graph_cdn").attempt(client, "zuck")

    assert url == "https://scontent.fbcdn.net/v/t39.30808-1/zuck.jpg"


@pytest.mark.asyncio
async def test_numeric_id_strategy_needs_a_distinct_id(settings, make_client):
    strategy = _by_name(FacebookSource(settings), "numeric_id_cdn")
    async with make_client(lambda r: httpx.Response(404)) as client:
        with pytest.raises(StrategyMiss):
            await strategy.attempt(client, "4")


@pytest.mark.asyncio
async def test_numeric_id_strategy_queries_graph_with_the_id(settings, make_client):
    seen = []

    def handler(request):
        seen.append(request.url.path)
        if request.url.host == "graph.facebook.com":
            return httpx.Response(302, headers={"Location": "https://scontent.fbcdn.net/v/t39.30808-1/id.jpg"})
        return httpx.Response(200, content=b"\xff\xd8")

    async with make_client(handler) as client:
        url = await _by_name(FacebookSource(settings), "numeric_id_cdn").attempt(client, "jane.doe.1000123")

    assert url.endswith("/id.jpg")
    assert seen[0] == "/1000123/picture"


@pytest.mark.asyncio
async def test_mobile_html_uses_og_image(settings, make_client):
    def handler(request):
        if request.url.host == "m.facebook.com":
            return httpx.Response(
                200,
                text='<html><head><meta content="https://scontent.fbcdn.net/v/t39/p.jpg" property="og:image"></head></html>',
            )
        return httpx.Response(404)

    async with make_client(handler) as client:
        url = await _by_name(FacebookSource(settings), "mobile_html").attempt(client, "someone")

    assert url == "https://scontent.fbcdn.net/v/t39/p.jpg"


# --- Instagram ------------------------------------------------------------


def test_shared_data_prefers_hd_picture():
    html = (
        '<script type="text/javascript">window._sharedData = {"entry_data": {"ProfilePage": '
        '[{"graphql": {"user": {"profile_pic_url": "https://ig/sd.jpg", '
        '"profile_pic_url_hd": "https://ig/hd.jpg"}}}]}};</script>'
    )
    assert parse_shared_data(html) == "https://ig/hd.jpg"


def test_shared_data_tolerates_garbage():
    assert parse_shared_data("<script>window._sharedData = {not json};</script>") is None
    assert parse_shared_data("") is None


@pytest.mark.asyncio
async def test_instagram_api_falls_back_to_standard_picture(settings, make_client):
    def handler(request):
        return httpx.Response(200, json={"data": {"user": {"profile_pic_url": "https://ig/sd.jpg"}}})

    async with make_client(handler) as client:
        url = await _by_name(InstagramSource(settings), "web_profile_api").attempt(client, "nasa")

    assert url == "https://ig/sd.jpg"


@pytest.mark.asyncio
async def test_instagram_api_with_malformed_payload_misses(settings, make_client):
    async with make_client(lambda r: httpx.Response(200, json=["unexpected"])) as client:
        with pytest.raises(StrategyMiss):
            await _by_name(InstagramSource(settings), "web_profile_api").attempt(client, "nasa")


@pytest.mark.asyncio
async def test_instagram_html_regex_fallback(settings, make_client):
    html = '{"user":{"profile_pic_url_hd":"https:\\/\\/scontent.cdninstagram.com\\/v\\/hd.jpg?x=1\\u0026y=2"}}'

    async with make_client(lambda r: httpx.Response(200, text=html)) as client:
        url = await _by_name(InstagramSource(settings), "profile_html").attempt(client, "nasa")

    assert url == "https://scontent.cdninstagram.com/v/hd.jpg?x=1&y=2"


# --- Twitter --------------------------------------------------------------


def test_twitter_resolution_upgrade():
    assert (
        upgrade_twitter_resolution("https://pbs.twimg.com/profile_images/1/abc_normal.jpg")
        == "https://pbs.twimg.com/profile_images/1/abc_400x400.jpg"
    )
    assert upgrade_twitter_resolution("https://pbs.twimg.com/profile_images/1/abc_normal") == (
        "https://pbs.twimg.com/profile_images/1/abc_400x400"
    )
    assert upgrade_twitter_resolution("https://pbs.twimg.com/profile_images/1/normalize.png") == (
        "https://pbs.twimg.com/profile_images/1/normalize.png"
    )


def test_unescape_url():
    assert unescape_url("https:\\u002F\\u002Fpbs.twimg.com\\/a.jpg") == "https://pbs.twimg.com/a.jpg"
    assert unescape_url("https://x/y?a=1&amp;b=2") == "https://x/y?a=1&b=2"


@pytest.mark.asyncio
async def test_twitter_profile_html(settings, make_client):
    html = '<img src="https://pbs.twimg.com/profile_images/123/pic_normal.jpg" alt="">'

    async with make_client(lambda r: httpx.Response(200, text=html)) as client:
        url = await _by_name(TwitterSource(settings), "profile_html").attempt(client, "jack")

    assert url == "https://pbs.twimg.com/profile_images/123/pic_400x400.jpg"


@pytest.mark.asyncio
async def test_twitter_syndication(settings, make_client):
    body = '{"profile_image_url_https":"https:\\u002F\\u002Fpbs.twimg.com\\u002Fprofile_images\\u002F9\\u002Fme_normal.png"}'

    async with make_client(lambda r: httpx.Response(200, text=body)) as client:
        url = await _by_name(TwitterSource(settings), "syndication").attempt(client, "jack")

    assert url == "https://pbs.twimg.com/profile_images/9/me_400x400.png"


def test_strategy_tables_are_ordered(settings):
    sources = build_sources(settings)
    names = {platform: [s.name for s in source.strategies()] for platform, source in sources.items()}

    assert names[Platform.FACEBOOK] == ["graph_cdn", "profile_html", "mobile_html", "numeric_id_cdn", "unavatar"]
    assert names[Platform.INSTAGRAM] == ["web_profile_api", "profile_html", "unavatar", "vercel_mirror"]
    assert names[Platform.TWITTER] == ["unavatar", "vercel_mirror", "profile_html", "syndication"]


def test_og_image_is_made_absolute():
    html = '<html><head><meta property="og:image" content="/img/me.jpg"></head></html>'

    assert extract_og_image(html=html, base_url="https://m.facebook.com/someone") == "https://m.facebook.com/img/me.jpg"
    assert extract_og_image(html="<html></html>") is None
