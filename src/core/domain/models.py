"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Permite serializar resultados (CLI `--json`) con un esquema estable.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from core.domain.errors import UnsupportedPlatformError


class Platform(str, Enum):
    """Social platforms with a resolution chain."""

    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    TWITTER = "twitter"

    @classmethod
    def parse(cls, value: str | "Platform") -> "Platform":
        """Normalize user input (`Instagram`, ` x `) into a `Platform`."""

        if isinstance(value, Platform):
            return value
        key = str(value or "").strip().lower()
        if key == "x":
            key = cls.TWITTER.value
        try:
            return cls(key)
        except ValueError:
            raise UnsupportedPlatformError(str(value)) from None

    def label(self) -> str:
        """Human readable label for warnings and the CLI."""

        return self.value.capitalize()


MAX_USERNAME_LENGTH = 256


class RetrievalRequest(BaseModel):
    """One avatar lookup: created per invocation, never stored."""

    model_config = ConfigDict(frozen=True)

    platform: Platform = Field(
        ...,
        description="Platform whose chain resolves the avatar.",
    )
    username: str = Field(
        ...,
        min_length=1,
        max_length=MAX_USERNAME_LENGTH,
        description="Handle, vanity name or numeric ID, already extracted from the link.",
    )


class RetrievalResult(BaseModel):
    """Outcome of a resolution chain.

    - `avatar_url` is absent only for unsupported platforms.
    - `warning` is set whenever the URL is a mirror/placeholder image rather
      than a verified profile photo.
    """

    avatar_url: str | None = Field(
        default=None,
        description="Resolved avatar URL.",
    )
    warning: str | None = Field(
        default=None,
        description="Non-fatal note attached to fallback results.",
    )
    error: str | None = Field(
        default=None,
        description="Hard error (only for unsupported platforms).",
    )
    platform: str | None = Field(
        default=None,
        description="Platform the request was made for.",
    )
    username: str | None = Field(
        default=None,
        description="Username the request was made for.",
    )
    strategy: str | None = Field(
        default=None,
        description="Name of the strategy that produced `avatar_url`.",
    )

    @property
    def ok(self) -> bool:
        return bool(self.avatar_url)

    @property
    def is_placeholder(self) -> bool:
        return self.ok and bool(self.warning)


class DownloadedAvatar(BaseModel):
    """Image bytes fetched server-side by the egress adapter."""

    content: bytes = Field(
        ...,
        description="Raw image payload.",
    )
    content_type: str = Field(
        default="image/png",
        min_length=1,
        description="MIME type reported by the origin (or the default).",
    )
    cache_control: str = Field(
        default="public, max-age=86400",
        description="Cache directive to forward alongside the bytes.",
    )
    source_url: str = Field(
        ...,
        description="URL the bytes were finally read from.",
    )
