"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP/egress/placeholders) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "avatar-fetch"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "avatar-fetch"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "avatar-fetch"
    return Path.home() / ".config" / "avatar-fetch"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="AVATAR_FETCH_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout per strategy request (seconds).",
    )
    user_agent: str = Field(
        default=BROWSER_USER_AGENT,
        min_length=1,
        description="Browser-like User-Agent sent to profile pages and APIs.",
    )

    download_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Timeout per image download attempt (seconds).",
    )
    download_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Image download attempts before giving up.",
    )
    download_retry_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Fixed delay between image download attempts (seconds).",
    )

    placeholder_base_url: str = Field(
        default="https://ui-avatars.com/api/",
        min_length=8,
        description="Base URL of the placeholder image service.",
    )
    placeholder_size: int = Field(
        default=256,
        ge=16,
        le=1024,
        description="Pixel size requested for generated placeholders.",
    )

    assume_unchecked_mirrors: bool = Field(
        default=True,
        description="Trust mirrors that always answer with an image without probing them.",
    )
    memoize_results: bool = Field(
        default=True,
        description="Reuse results for identical (platform, username) requests within the process.",
    )

    log_level: str = Field(
        default="WARNING",
        description="Root level for the avatar_fetch loggers.",
    )
    output_dir: Path = Field(
        default=Path("avatars"),
        description="Where downloaded avatars are written.",
    )
