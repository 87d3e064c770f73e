"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers de navegador y redirects para todas las estrategias.
- Facilita testeo: se puede sustituir por un cliente con `httpx.MockTransport`.
"""

from __future__ import annotations

from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from core.config import AppSettings

BROWSER_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
IMAGE_ACCEPT = "image/webp,image/apng,image/*,*/*;q=0.8"


def browser_headers(settings: AppSettings, **extra: str) -> dict[str, str]:
    headers = {
        "User-Agent": settings.user_agent,
        "Accept": BROWSER_ACCEPT,
        "Accept-Language": "en-US,en;q=0.9",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
    }
    headers.update(extra)
    return headers


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults de navegador.

    Por qué un builder:
    - Centraliza timeouts/headers para que todas las estrategias se comporten igual.
    - `transport` permite inyectar `httpx.MockTransport` en tests.
    """

    settings = settings or AppSettings()
    headers = browser_headers(settings)
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout or settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


def extract_og_image(*, html: str, base_url: str | None = None) -> str | None:
    """Devuelve el `og:image` del HTML (absoluto si se pasa `base_url`)."""

    if not html:
        return None

    soup = BeautifulSoup(html, "html.parser")
    tag = soup.find("meta", attrs={"property": "og:image"})
    if not tag or not tag.get("content"):
        return None
    value = str(tag.get("content")).strip()
    return urljoin(base_url, value) if base_url else value
