"""Mirrors de avatares de terceros.

- unavatar.io: proxy del avatar real; se verifica con un probe de existencia
  (`fallback=false` hace que responda 404 si no encuentra nada).
- avatar.vercel.sh: siempre responde con una imagen generada, así que no
  hay nada que verificar; su resultado lleva warning.
"""

from __future__ import annotations

from urllib.parse import quote

import httpx

from core.config import AppSettings
from core.domain.errors import StrategyMiss
from core.domain.models import Platform
from core.interfaces.strategy import Strategy

UNAVATAR_BASE = "https://unavatar.io"
VERCEL_BASE = "https://avatar.vercel.sh"

_NO_CACHE = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


async def probe_image(client: httpx.AsyncClient, url: str) -> bool:
    """HEAD the URL (GET when HEAD is not allowed) and report a 2xx image-ish answer."""

    response = await client.head(url, headers=_NO_CACHE)
    if response.status_code in (405, 501):
        response = await client.get(url, headers=_NO_CACHE)
    if not response.is_success:
        return False
    content_type = response.headers.get("content-type", "")
    return not content_type or content_type.startswith("image/")


def unavatar_url(platform: Platform, username: str) -> str:
    return f"{UNAVATAR_BASE}/{platform.value}/{quote(username, safe='')}?fallback=false"


def vercel_url(platform: Platform, username: str) -> str:
    return f"{VERCEL_BASE}/{platform.value}:{quote(username, safe='')}"


def unavatar_strategy(platform: Platform) -> Strategy:
    async def attempt(client: httpx.AsyncClient, username: str) -> str:
        url = unavatar_url(platform, username)
        if not await probe_image(client, url):
            raise StrategyMiss(f"unavatar has no {platform.value} avatar for {username!r}")
        return url

    return Strategy(name="unavatar", attempt=attempt)


def vercel_strategy(platform: Platform, settings: AppSettings) -> Strategy:
    async def attempt(client: httpx.AsyncClient, username: str) -> str:
        url = vercel_url(platform, username)
        if settings.assume_unchecked_mirrors:
            return url
        if not await probe_image(client, url):
            raise StrategyMiss("avatar.vercel.sh did not answer")
        return url

    return Strategy(
        name="vercel_mirror",
        attempt=attempt,
        warning=f"Using a generated {platform.label()} avatar from avatar.vercel.sh; the profile photo was not verified.",
    )
