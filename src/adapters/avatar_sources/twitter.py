"""Fuente de avatares: Twitter / X.

Cadena (en orden):
1. unavatar.io (con probe de existencia).
2. avatar.vercel.sh (sin verificación, salvo `assume_unchecked_mirrors=False`).
3. HTML del perfil: ruta `pbs.twimg.com/profile_images/...`.
4. Endpoint de syndication: campo `profile_image_url_https` escapado.

En 3 y 4 se sube la resolución (`_normal` -> `_400x400`).
"""

from __future__ import annotations

import re
from urllib.parse import quote

import httpx

from adapters.avatar_sources.extraction import ensure_success, first_match, upgrade_twitter_resolution
from adapters.avatar_sources.mirrors import unavatar_strategy, vercel_strategy
from adapters.http_client import browser_headers
from core.config import AppSettings
from core.domain.errors import StrategyMiss
from core.domain.models import Platform
from core.interfaces.strategy import Strategy

PROFILE_BASE = "https://twitter.com"
SYNDICATION_BASE = "https://syndication.twitter.com/srv/timeline-profile/screen-name"

PROFILE_IMAGE = re.compile(r"https://pbs\.twimg\.com/profile_images/[^\"'\s\\<>]+")
SYNDICATION_IMAGE = re.compile(r'"profile_image_url_https":"([^"]+)"')


class TwitterSource:
    platform = Platform.TWITTER

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    def strategies(self) -> tuple[Strategy, ...]:
        return (
            unavatar_strategy(self.platform),
            vercel_strategy(self.platform, self._settings),
            Strategy(name="profile_html", attempt=self._profile_html),
            Strategy(name="syndication", attempt=self._syndication),
        )

    async def _profile_html(self, client: httpx.AsyncClient, username: str) -> str:
        url = f"{PROFILE_BASE}/{quote(username, safe='')}"
        response = ensure_success(await client.get(url, headers=browser_headers(self._settings)), url)
        found = first_match(response.text or "", (PROFILE_IMAGE,))
        if not found:
            raise StrategyMiss(f"no profile_images path in {url}")
        return upgrade_twitter_resolution(found)

    async def _syndication(self, client: httpx.AsyncClient, username: str) -> str:
        url = f"{SYNDICATION_BASE}/{quote(username, safe='')}"
        response = ensure_success(await client.get(url, headers=browser_headers(self._settings)), url)
        found = first_match(response.text or "", (SYNDICATION_IMAGE,))
        if not found:
            raise StrategyMiss("syndication payload has no profile_image_url_https")
        return upgrade_twitter_resolution(found)
