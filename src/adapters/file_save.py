"""Guardado de avatares en disco.

- Extensión a partir del MIME (tabla fija, `png` por defecto).
- Nombre estable: `{platform}-{username}-avatar.{ext}`.
"""

from __future__ import annotations

from pathlib import Path

from core.domain.models import DownloadedAvatar, Platform

MIME_EXTENSIONS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
    "image/bmp": "bmp",
    "image/tiff": "tiff",
}
DEFAULT_EXTENSION = "png"


def extension_for_mime(mime_type: str | None) -> str:
    base = (mime_type or "").split(";", 1)[0].strip().lower()
    return MIME_EXTENSIONS.get(base, DEFAULT_EXTENSION)


def sanitize_for_filename(value: str) -> str:
    """Generate a filesystem-friendly slug."""

    out: list[str] = []
    for ch in value.strip():
        if ch.isalnum() or ch in ("-", "_", "."):
            out.append(ch)
        else:
            out.append("-")
    cleaned = "".join(out).strip("-_.")
    return cleaned or "user"


def avatar_filename(platform: Platform | str, username: str, mime_type: str | None) -> str:
    name = platform.value if isinstance(platform, Platform) else str(platform).strip().lower()
    return f"{name or 'social'}-{sanitize_for_filename(username)}-avatar.{extension_for_mime(mime_type)}"


def save_avatar(
    avatar: DownloadedAvatar,
    *,
    platform: Platform | str,
    username: str,
    output_dir: Path,
) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / avatar_filename(platform, username, avatar.content_type)
    path.write_bytes(avatar.content)
    return path
