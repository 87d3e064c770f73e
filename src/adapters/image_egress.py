"""Descarga de imágenes en servidor (egress proxy).

Por qué existe:
- Los CDN de Instagram/Facebook/Twitter no siempre sirven a clientes de otro
  origen; descargamos los bytes nosotros con headers de navegador.
- Reintentos acotados (N intentos, timeout por intento, pausa fija) y, si todo
  falla, `EgressFailure` con un placeholder sugerido en lugar de un crash.
"""

from __future__ import annotations

import asyncio
import re
from typing import Awaitable, Callable
from urllib.parse import quote, urlencode, urlparse

import httpx

from adapters.http_client import IMAGE_ACCEPT, build_async_client
from core.config import AppSettings
from core.domain.errors import EgressFailure, InvalidAvatarUrlError
from core.domain.models import DownloadedAvatar, Platform
from core.logger import get_logger
from core.services.placeholder import placeholder_url

logger = get_logger(__name__)

CACHE_CONTROL = "public, max-age=86400"
DEFAULT_CONTENT_TYPE = "image/png"

GENERATED_AVATAR_HOSTS: tuple[str, ...] = ("ui-avatars.com", "avatar.vercel.sh")

# (markers in the URL, platform, profile-link pattern for the username)
_PLATFORM_HINTS: tuple[tuple[tuple[str, ...], Platform, re.Pattern[str]], ...] = (
    (("instagram", "cdninstagram"), Platform.INSTAGRAM, re.compile(r"(?:^|[/.])instagram\.com/([^/?#]+)", re.IGNORECASE)),
    (("twitter", "twimg"), Platform.TWITTER, re.compile(r"(?:^|[/.])twitter\.com/([^/?#]+)", re.IGNORECASE)),
    (("facebook", "fbcdn"), Platform.FACEBOOK, re.compile(r"(?:^|[/.])facebook\.com/([^/?#]+)", re.IGNORECASE)),
)

Sleep = Callable[[float], Awaitable[None]]


def validate_avatar_url(url: str) -> str:
    value = (url or "").strip()
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidAvatarUrlError(url)
    return value


def is_generated_avatar_url(url: str) -> bool:
    host = urlparse(url).netloc.lower()
    return any(host == h or host.endswith(f".{h}") for h in GENERATED_AVATAR_HOSTS)


def egress_fallback_url(url: str, settings: AppSettings | None = None) -> str:
    """Platform-coloured placeholder for a URL that could not be downloaded."""

    settings = settings or AppSettings()
    lowered = url.lower()
    for markers, platform, pattern in _PLATFORM_HINTS:
        if any(marker in lowered for marker in markers):
            match = pattern.search(url)
            username = match.group(1) if match else platform.value[:2].upper()
            return placeholder_url(platform, username, settings)

    params = {"name": "User", "background": "random", "size": settings.placeholder_size}
    return f"{settings.placeholder_base_url}?{urlencode(params, quote_via=quote)}"


def _request_headers(url: str, settings: AppSettings) -> dict[str, str]:
    parsed = urlparse(url)
    return {
        "User-Agent": settings.user_agent,
        "Accept": IMAGE_ACCEPT,
        "Accept-Language": "en-US,en;q=0.9",
        "Referer": f"{parsed.scheme}://{parsed.netloc}",
    }


def _to_avatar(response: httpx.Response) -> DownloadedAvatar:
    content_type = response.headers.get("content-type") or DEFAULT_CONTENT_TYPE
    return DownloadedAvatar(
        content=response.content,
        content_type=content_type,
        cache_control=CACHE_CONTROL,
        source_url=str(response.url),
    )


async def _download(
    client: httpx.AsyncClient,
    url: str,
    settings: AppSettings,
    sleep: Sleep,
) -> DownloadedAvatar:
    if is_generated_avatar_url(url):
        # Generator services have no origin restrictions: one plain attempt.
        attempts = 1
        headers: dict[str, str] = {"Accept": IMAGE_ACCEPT}
    else:
        attempts = settings.download_retries
        headers = _request_headers(url, settings)

    timeout = httpx.Timeout(settings.download_timeout_seconds)
    last_error: str | None = None

    for attempt in range(1, attempts + 1):
        try:
            response = await client.get(url, headers=headers, timeout=timeout)
            response.raise_for_status()
            return _to_avatar(response)
        except httpx.HTTPStatusError as exc:
            last_error = f"HTTP {exc.response.status_code}"
        except httpx.HTTPError as exc:
            last_error = f"{type(exc).__name__}: {exc}"

        logger.warning("fetch attempt %d/%d for %s failed: %s", attempt, attempts, url, last_error)
        if attempt < attempts:
            await sleep(settings.download_retry_delay_seconds)

    raise EgressFailure(
        url,
        attempts=attempts,
        fallback_url=egress_fallback_url(url, settings),
        reason=last_error,
    )


async def download_avatar(
    url: str,
    settings: AppSettings | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    sleep: Sleep = asyncio.sleep,
) -> DownloadedAvatar:
    """Download an avatar with retries.

    Raises:
    - `InvalidAvatarUrlError` if `url` is not an absolute http(s) URL.
    - `EgressFailure` once every attempt failed; `fallback_url` is the
      suggested placeholder.
    """

    settings = settings or AppSettings()
    url = validate_avatar_url(url)

    if client is not None:
        return await _download(client, url, settings, sleep)
    async with build_async_client(settings, timeout=settings.download_timeout_seconds) as owned:
        return await _download(owned, url, settings, sleep)
