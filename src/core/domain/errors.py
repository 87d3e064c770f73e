"""Errores del dominio.

- Los errores de estrategia (`StrategyMiss`) nunca salen del ejecutor de cadena.
- `EgressFailure` es recuperable: trae un `fallback_url` sugerido.
"""

from __future__ import annotations


class AvatarFetchError(Exception):
    """Base class for every error raised by this package."""


class UnsupportedPlatformError(AvatarFetchError):
    def __init__(self, platform: str) -> None:
        super().__init__(f"Unsupported platform: {platform!r}")
        self.platform = platform


class UnsupportedProfileUrlError(AvatarFetchError):
    def __init__(self, url: str, reason: str = "not a Facebook, Instagram or Twitter profile link") -> None:
        super().__init__(f"{url!r}: {reason}")
        self.url = url
        self.reason = reason


class StrategyMiss(AvatarFetchError):
    """A strategy found nothing usable (bad status, no match, default image)."""


class InvalidAvatarUrlError(AvatarFetchError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid URL format: {url!r}")
        self.url = url


class EgressFailure(AvatarFetchError):
    """The image could not be downloaded after every retry."""

    def __init__(self, url: str, *, attempts: int, fallback_url: str, reason: str | None = None) -> None:
        message = f"Failed to fetch image after {attempts} attempt(s): {url}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.url = url
        self.attempts = attempts
        self.fallback_url = fallback_url
        self.reason = reason
