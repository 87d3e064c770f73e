"""Fuente de avatares: Facebook.

Cadena (en orden):
1. Graph CDN (`/picture`) con varias queries; se descarta la silueta por defecto.
2. HTML público de www.facebook.com con lista ordenada de regex.
3. Lo mismo contra m.facebook.com.
4. Si el username contiene dígitos, reintenta el CDN con ese ID numérico.
5. unavatar.io.

Nota:
- La detección de silueta es una denylist heurística: puede fallar en ambos
  sentidos y se acepta como limitación conocida.
"""

from __future__ import annotations

import re
from typing import Any, Mapping
from urllib.parse import quote

import httpx

from adapters.avatar_sources.extraction import ensure_success, first_match
from adapters.avatar_sources.mirrors import unavatar_strategy
from adapters.http_client import browser_headers, extract_og_image
from core.config import AppSettings
from core.domain.errors import StrategyMiss
from core.domain.models import Platform
from core.interfaces.strategy import Strategy
from core.logger import get_logger

logger = get_logger(__name__)

GRAPH_BASE = "https://graph.facebook.com"
DESKTOP_BASE = "https://www.facebook.com"
MOBILE_BASE = "https://m.facebook.com"

CDN_QUERIES: tuple[str, ...] = (
    "type=large",
    "width=720&height=720",
    "type=large&redirect=false",
)

# Substrings seen in Facebook's generic "no photo" assets.
SILHOUETTE_MARKERS: tuple[str, ...] = (
    "rsrc.php",
    "silhouette",
    "default_avatar",
    "t1.30497-1",
    "s230x230",
    "p64x64",
    "p50x50",
    "/images/blank",
)

PROFILE_HTML_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r'<meta\s+property="og:image"\s+content="([^"]+)"', re.IGNORECASE),
    re.compile(r'"profilePicLarge":\{"uri":"([^"]+)"'),
    re.compile(r'"profilePic160":\{"uri":"([^"]+)"'),
    re.compile(r'"profilePicture":\{"uri":"([^"]+)"'),
    re.compile(r'"profile_picture":\{"uri":"([^"]+)"'),
    re.compile(r'<image[^>]+xlink:href="([^"]+)"'),
    re.compile(r'<img[^>]+class="[^"]*profpic[^"]*"[^>]+src="([^"]+)"', re.IGNORECASE),
)


def is_default_facebook_image(value: str | Mapping[str, Any] | None) -> bool:
    """True when a URL (or Graph `picture` payload) points at a silhouette."""

    if value is None:
        return True
    if isinstance(value, Mapping):
        if value.get("is_silhouette") is True:
            return True
        value = value.get("url") or ""
    lowered = str(value).lower()
    if not lowered:
        return True
    return any(marker in lowered for marker in SILHOUETTE_MARKERS)


def numeric_substring(username: str) -> str | None:
    runs = re.findall(r"\d+", username)
    if not runs:
        return None
    return max(runs, key=len)


class FacebookSource:
    platform = Platform.FACEBOOK

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    def strategies(self) -> tuple[Strategy, ...]:
        return (
            Strategy(name="graph_cdn", attempt=self._graph_cdn),
            Strategy(name="profile_html", attempt=self._desktop_html),
            Strategy(name="mobile_html", attempt=self._mobile_html),
            Strategy(name="numeric_id_cdn", attempt=self._numeric_id_cdn),
            unavatar_strategy(self.platform),
        )

    async def _graph_cdn(self, client: httpx.AsyncClient, username: str) -> str:
        return await self._fetch_cdn(client, username)

    async def _numeric_id_cdn(self, client: httpx.AsyncClient, username: str) -> str:
        numeric = numeric_substring(username)
        if numeric is None or numeric == username:
            raise StrategyMiss("no distinct numeric id in username")
        return await self._fetch_cdn(client, numeric)

    async def _fetch_cdn(self, client: httpx.AsyncClient, ident: str) -> str:
        for query in CDN_QUERIES:
            url = f"{GRAPH_BASE}/{quote(ident, safe='')}/picture?{query}"
            try:
                response = await client.get(url)
            except httpx.HTTPError as exc:
                logger.debug("graph endpoint %s failed: %s", url, exc)
                continue
            if not response.is_success:
                continue

            if "redirect=false" in query:
                payload = response.json()
                data = payload.get("data") if isinstance(payload, dict) else None
                if not isinstance(data, dict) or is_default_facebook_image(data):
                    continue
                return str(data["url"])

            final_url = str(response.url)
            if final_url.startswith(GRAPH_BASE):
                # No redirect happened; not an image we can hand out.
                continue
            if is_default_facebook_image(final_url):
                continue
            return final_url

        raise StrategyMiss(f"graph CDN only returned default images for {ident!r}")

    async def _desktop_html(self, client: httpx.AsyncClient, username: str) -> str:
        return await self._profile_html(client, f"{DESKTOP_BASE}/{quote(username, safe='.')}")

    async def _mobile_html(self, client: httpx.AsyncClient, username: str) -> str:
        return await self._profile_html(client, f"{MOBILE_BASE}/{quote(username, safe='.')}")

    async def _profile_html(self, client: httpx.AsyncClient, url: str) -> str:
        response = ensure_success(
            await client.get(url, headers=browser_headers(self._settings)),
            url,
        )
        html = response.text or ""

        found = first_match(html, PROFILE_HTML_PATTERNS, reject=is_default_facebook_image)
        if found:
            return found

        og_image = extract_og_image(html=html, base_url=str(response.url))
        if og_image and not is_default_facebook_image(og_image):
            return og_image

        raise StrategyMiss(f"no profile image in {url}")
