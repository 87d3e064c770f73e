"""Fuente de avatares: Instagram.

Cadena (en orden):
1. API privada `web_profile_info` con el App-ID público de la web.
2. HTML del perfil: primero el JSON embebido (`window._sharedData`), luego regex.
3. Mirrors (unavatar.io, avatar.vercel.sh).
"""

from __future__ import annotations

import json
import re
from typing import Any
from urllib.parse import quote

import httpx

from adapters.avatar_sources.extraction import ensure_success, first_match, unescape_url
from adapters.avatar_sources.mirrors import unavatar_strategy, vercel_strategy
from adapters.http_client import browser_headers
from core.config import AppSettings
from core.domain.errors import StrategyMiss
from core.domain.models import Platform
from core.interfaces.strategy import Strategy

API_URL = "https://i.instagram.com/api/v1/users/web_profile_info/"
PROFILE_BASE = "https://www.instagram.com"
# Public application id used by instagram.com itself.
WEB_APP_ID = "936619743392459"

SHARED_DATA = re.compile(
    r"window\._sharedData\s*=\s*(\{.*?\});\s*</script>",
    re.DOTALL,
)

PROFILE_HTML_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r'"profile_pic_url_hd":"([^"]+)"'),
    re.compile(r'"profile_pic_url":"([^"]+)"'),
    re.compile(r'profilePicture[^}]+"uri":"([^"]+)"'),
    re.compile(r'<meta\s+property="og:image"\s+content="([^"]+)"', re.IGNORECASE),
    re.compile(r'profile_pic_url\\?":\\?"([^"\\]+)'),
)


def pick_profile_pic(user: Any) -> str | None:
    """HD picture first, standard one otherwise."""

    if not isinstance(user, dict):
        return None
    for key in ("profile_pic_url_hd", "profile_pic_url"):
        value = user.get(key)
        if isinstance(value, str) and value.strip():
            return unescape_url(value)
    return None


def parse_shared_data(html: str) -> str | None:
    match = SHARED_DATA.search(html or "")
    if not match:
        return None
    try:
        data = json.loads(match.group(1))
    except ValueError:
        return None
    pages = (data.get("entry_data") or {}).get("ProfilePage") if isinstance(data, dict) else None
    if not isinstance(pages, list) or not pages or not isinstance(pages[0], dict):
        return None
    user = (pages[0].get("graphql") or {}).get("user")
    return pick_profile_pic(user)


class InstagramSource:
    platform = Platform.INSTAGRAM

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    def strategies(self) -> tuple[Strategy, ...]:
        return (
            Strategy(name="web_profile_api", attempt=self._web_profile_api),
            Strategy(name="profile_html", attempt=self._profile_html),
            unavatar_strategy(self.platform),
            vercel_strategy(self.platform, self._settings),
        )

    async def _web_profile_api(self, client: httpx.AsyncClient, username: str) -> str:
        headers = {
            "User-Agent": self._settings.user_agent,
            "Accept": "application/json",
            "X-IG-App-ID": WEB_APP_ID,
            "X-Requested-With": "XMLHttpRequest",
            "Referer": f"{PROFILE_BASE}/",
            "Origin": PROFILE_BASE,
        }
        response = ensure_success(
            await client.get(API_URL, params={"username": username}, headers=headers),
            "web_profile_info",
        )
        payload = response.json()
        data = payload.get("data") if isinstance(payload, dict) else None
        user = data.get("user") if isinstance(data, dict) else None
        url = pick_profile_pic(user)
        if not url:
            raise StrategyMiss("web_profile_info payload has no profile picture")
        return url

    async def _profile_html(self, client: httpx.AsyncClient, username: str) -> str:
        url = f"{PROFILE_BASE}/{quote(username, safe='.')}/"
        response = ensure_success(
            await client.get(url, headers=browser_headers(self._settings, Referer=f"{PROFILE_BASE}/")),
            url,
        )
        html = response.text or ""

        found = parse_shared_data(html) or first_match(html, PROFILE_HTML_PATTERNS)
        if not found:
            raise StrategyMiss(f"no profile image in {url}")
        return found
