"""Helpers compartidos por las estrategias de scraping.

- Listas ordenadas de regex: gana el primer match no rechazado.
- Desescapado de URLs embebidas en JSON/HTML (`\\u0026`, `\\/`, ...).
"""

from __future__ import annotations

import re
from typing import Callable, Iterable

import httpx

from core.domain.errors import StrategyMiss

_ESCAPES: tuple[tuple[str, str], ...] = (
    ("\\u0026", "&"),
    ("\\u002F", "/"),
    ("\\u002f", "/"),
    ("\\/", "/"),
    ("&amp;", "&"),
)

_TWITTER_SIZE = re.compile(r"_normal(\.[A-Za-z0-9]+)?(?=$|[?#])")


def unescape_url(value: str) -> str:
    out = value.strip()
    for needle, replacement in _ESCAPES:
        out = out.replace(needle, replacement)
    return out.replace("\\", "")


def first_match(
    text: str,
    patterns: Iterable[re.Pattern[str]],
    *,
    reject: Callable[[str], bool] | None = None,
) -> str | None:
    """Run `patterns` in order; return the first unescaped match `reject` accepts.

    Patterns with a capture group yield group 1, otherwise the whole match.
    """

    if not text:
        return None
    for pattern in patterns:
        for match in pattern.finditer(text):
            raw = match.group(1) if pattern.groups else match.group(0)
            if not raw:
                continue
            url = unescape_url(raw)
            if not url.startswith(("http://", "https://")):
                continue
            if reject is not None and reject(url):
                continue
            return url
    return None


def upgrade_twitter_resolution(url: str) -> str:
    """`..._normal.jpg` -> `..._400x400.jpg`."""

    return _TWITTER_SIZE.sub(lambda m: f"_400x400{m.group(1) or ''}", url)


def ensure_success(response: httpx.Response, what: str) -> httpx.Response:
    if not response.is_success:
        raise StrategyMiss(f"{what} returned HTTP {response.status_code}")
    return response
