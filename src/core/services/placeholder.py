"""Deterministic placeholder avatars.

The terminal step of every chain. Pure: same (platform, username) always gives
the same URL, no I/O, cannot fail.

Colour pipeline:
1. `username_hash`: 32-bit rolling hash over UTF-16 code units (`h*31 + c`).
2. `hue/saturation/lightness = base + hash % range`, per platform palette.
3. HSL -> hex, text colour picked from the background lightness.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from urllib.parse import quote, urlencode

from core.config import AppSettings
from core.domain.models import Platform
from core.interfaces.strategy import Strategy

_UINT32 = 0xFFFFFFFF


@dataclass(frozen=True)
class PlaceholderPalette:
    """`(base, range)` pairs; each component is `base + hash % range`."""

    hue: tuple[int, int]
    saturation: tuple[int, int]
    lightness: tuple[int, int]

    def hsl(self, value: int) -> tuple[int, int, int]:
        return (
            self.hue[0] + value % self.hue[1],
            self.saturation[0] + value % self.saturation[1],
            self.lightness[0] + value % self.lightness[1],
        )


PALETTES: dict[Platform, PlaceholderPalette] = {
    Platform.FACEBOOK: PlaceholderPalette(hue=(210, 30), saturation=(55, 30), lightness=(40, 20)),
    # Pink -> purple band.
    Platform.INSTAGRAM: PlaceholderPalette(hue=(300, 50), saturation=(60, 30), lightness=(45, 15)),
    Platform.TWITTER: PlaceholderPalette(hue=(195, 20), saturation=(70, 25), lightness=(40, 20)),
}


def username_hash(username: str) -> int:
    """`hash = ((hash << 5) - hash) + code`, wrapped to signed 32 bits, then `abs`."""

    value = 0
    raw = username.encode("utf-16-le")
    for i in range(0, len(raw), 2):
        code = raw[i] | (raw[i + 1] << 8)
        value = (((value << 5) - value) + code) & _UINT32
    if value & 0x80000000:
        value -= 0x100000000
    return abs(value)


def _channel(value: float) -> str:
    # Half-up rounding; `round()` would use banker's rounding.
    scaled = int(math.floor(value * 255 + 0.5))
    return f"{max(0, min(255, scaled)):02x}"


def hsl_to_hex(hue: float, saturation: float, lightness: float) -> str:
    """Convert HSL (degrees, percent, percent) to a 6-digit lowercase hex string."""

    s = saturation / 100
    l = lightness / 100  # noqa: E741
    a = s * min(l, 1 - l)

    def f(n: int) -> float:
        k = (n + hue / 30) % 12
        return l - a * max(min(k - 3, 9 - k, 1), -1)

    return f"{_channel(f(0))}{_channel(f(8))}{_channel(f(4))}"


def text_color_for(lightness: float) -> str:
    return "333" if lightness > 50 else "fff"


def placeholder_colors(platform: Platform | str, username: str) -> tuple[str, str]:
    """Return `(background_hex, text_hex)` for a username on a platform."""

    palette = PALETTES[Platform.parse(platform)]
    hue, saturation, lightness = palette.hsl(username_hash(username))
    return hsl_to_hex(hue, saturation, lightness), text_color_for(lightness)


def placeholder_display_name(username: str) -> str:
    cleaned = username.strip().lstrip("@")
    for ch in "._-":
        cleaned = cleaned.replace(ch, " ")
    cleaned = " ".join(cleaned.split())
    return cleaned or username.strip() or "User"


def placeholder_url(platform: Platform | str, username: str, settings: AppSettings | None = None) -> str:
    settings = settings or AppSettings()
    background, color = placeholder_colors(platform, username)
    params = {
        "name": placeholder_display_name(username),
        "background": background,
        "color": color,
        "size": settings.placeholder_size,
        "bold": "true",
        "length": 2,
    }
    return f"{settings.placeholder_base_url}?{urlencode(params, quote_via=quote)}"


def placeholder_warning(platform: Platform | str) -> str:
    return f"Could not fetch {Platform.parse(platform).label()} avatar. Using generated placeholder."


def placeholder_strategy(platform: Platform, settings: AppSettings | None = None) -> Strategy:
    settings = settings or AppSettings()

    async def attempt(client: object, username: str) -> str:
        return placeholder_url(platform, username, settings)

    return Strategy(name="placeholder", attempt=attempt, warning=placeholder_warning(platform))
