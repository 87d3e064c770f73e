"""Fuentes de avatar por plataforma (tablas de estrategias).

Por qué un paquete:
- Agrupa un módulo por plataforma; cada uno implementa
  `core.interfaces.strategy.AvatarSource`.
- `SOURCES` es la configuración data-driven que consume el resolver.
"""

from adapters.avatar_sources.facebook import FacebookSource
from adapters.avatar_sources.instagram import InstagramSource
from adapters.avatar_sources.twitter import TwitterSource
from core.config import AppSettings
from core.domain.models import Platform
from core.interfaces.strategy import AvatarSource

SOURCES: dict[Platform, type] = {
	Platform.FACEBOOK: FacebookSource,
	Platform.INSTAGRAM: InstagramSource,
	Platform.TWITTER: TwitterSource,
}


def build_sources(settings: AppSettings | None = None) -> dict[Platform, AvatarSource]:
	settings = settings or AppSettings()
	return {platform: source(settings) for platform, source in SOURCES.items()}


__all__ = [
	"FacebookSource",
	"InstagramSource",
	"SOURCES",
	"TwitterSource",
	"build_sources",
]
