"""Contratos de estrategias de avatar.

Por qué Protocol + dataclass:
- Una estrategia es solo configuración: nombre + función async `(client, username) -> url | None`.
- Cada plataforma publica su tabla ordenada vía `AvatarSource`; el motor de
  cadena es uno solo para las tres.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol, Sequence, runtime_checkable

import httpx

from core.domain.models import Platform

AttemptFn = Callable[[httpx.AsyncClient, str], Awaitable[str | None]]


@dataclass(frozen=True)
class Strategy:
    """One named step of a platform chain.

    `warning` is attached to the result when this step wins; mirror and
    generated images set it so callers know the photo is not verified.
    """

    name: str
    attempt: AttemptFn
    warning: str | None = None


@runtime_checkable
class AvatarSource(Protocol):
    """Contrato mínimo de una plataforma.

    Reglas de diseño:
    - `strategies` devuelve la tabla en orden de prioridad (la primera que
      encuentre una URL gana).
    - La tabla no incluye el placeholder terminal; lo añade el resolver.
    """

    platform: Platform

    def strategies(self) -> Sequence[Strategy]:
        ...
