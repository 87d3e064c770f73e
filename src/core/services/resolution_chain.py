"""Resolution chain executor.

One engine for every platform: walk the platform's strategy table in order,
isolate each attempt, stop at the first URL. The generated placeholder is
always appended last, so a supported platform never ends without a URL.

Side effects are limited to logging and the optional `ChainHooks`; neither can
change which strategy wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Sequence

import httpx

from adapters.avatar_sources import build_sources
from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.errors import StrategyMiss, UnsupportedPlatformError
from core.domain.models import Platform, RetrievalRequest, RetrievalResult
from core.interfaces.strategy import AvatarSource, Strategy
from core.logger import get_logger
from core.services.placeholder import placeholder_strategy

UNSUPPORTED_PLATFORM = "Unsupported platform"

_logger = get_logger(__name__)


@dataclass
class ChainHooks:
    """Optional callbacks for UI layers (progress, tracing)."""

    attempt: Callable[[str, str], None] | None = None
    miss: Callable[[str, str, str], None] | None = None
    hit: Callable[[str, str, str], None] | None = None


@dataclass(frozen=True)
class ChainOutcome:
    url: str
    strategy: Strategy
    misses: tuple[str, ...] = field(default_factory=tuple)


def _notify(callback: Callable[..., None] | None, *args: str, logger: logging.Logger) -> None:
    if callback is None:
        return
    try:
        callback(*args)
    except Exception as exc:
        logger.warning("chain hook %r raised %s; ignoring", callback, exc)


async def run_chain(
    strategies: Sequence[Strategy],
    username: str,
    *,
    client: httpx.AsyncClient,
    label: str = "",
    hooks: ChainHooks | None = None,
    logger: logging.Logger | None = None,
) -> ChainOutcome | None:
    """Try `strategies` sequentially; return the first hit or None.

    Any exception or empty return from a strategy counts as a miss and the next
    one runs.
    """

    hooks = hooks or ChainHooks()
    logger = logger or _logger
    misses: list[str] = []

    for strategy in strategies:
        _notify(hooks.attempt, label, strategy.name, logger=logger)
        try:
            url = await strategy.attempt(client, username)
        except StrategyMiss as exc:
            reason = str(exc) or "miss"
        except Exception as exc:
            reason = f"{type(exc).__name__}: {exc}"
        else:
            if url:
                logger.info("%s: %s found %s", label or username, strategy.name, url)
                _notify(hooks.hit, label, strategy.name, url, logger=logger)
                return ChainOutcome(url=url, strategy=strategy, misses=tuple(misses))
            reason = "no result"

        misses.append(strategy.name)
        logger.debug("%s: %s missed (%s)", label or username, strategy.name, reason)
        _notify(hooks.miss, label, strategy.name, reason, logger=logger)

    return None


class AvatarResolver:
    """Resolve `(platform, username)` to an avatar URL.

    - Owns its `httpx.AsyncClient` unless one is injected.
    - Memoizes results per `(platform, username)` for the lifetime of the
      instance when `settings.memoize_results` is on.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        hooks: ChainHooks | None = None,
        sources: Mapping[Platform, AvatarSource] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client
        self._hooks = hooks
        self._sources = dict(sources) if sources is not None else build_sources(self._settings)
        self._logger = logger or _logger
        self._cache: dict[tuple[Platform, str], RetrievalResult] = {}

    def strategies_for(self, platform: Platform) -> list[Strategy]:
        source = self._sources.get(platform)
        chain = list(source.strategies()) if source is not None else []
        chain.append(placeholder_strategy(platform, self._settings))
        return chain

    async def resolve(self, platform: Platform | str, username: str) -> RetrievalResult:
        try:
            parsed = Platform.parse(platform)
        except UnsupportedPlatformError:
            self._logger.warning("unsupported platform %r", platform)
            return RetrievalResult(error=UNSUPPORTED_PLATFORM, platform=str(platform), username=username)

        key = (parsed, username)
        if self._settings.memoize_results and key in self._cache:
            return self._cache[key]

        if self._client is not None:
            result = await self._resolve_with(self._client, parsed, username)
        else:
            async with build_async_client(self._settings) as client:
                result = await self._resolve_with(client, parsed, username)

        if self._settings.memoize_results:
            self._cache[key] = result
        return result

    async def resolve_request(self, request: RetrievalRequest) -> RetrievalResult:
        return await self.resolve(request.platform, request.username)

    async def _resolve_with(self, client: httpx.AsyncClient, platform: Platform, username: str) -> RetrievalResult:
        label = f"{platform.value}:{username}"
        outcome = await run_chain(
            self.strategies_for(platform),
            username,
            client=client,
            label=label,
            hooks=self._hooks,
            logger=self._logger,
        )
        if outcome is None:
            # Only reachable with a broken placeholder configuration.
            return RetrievalResult(
                error=f"Could not resolve {platform.label()} avatar",
                platform=platform.value,
                username=username,
            )
        return RetrievalResult(
            avatar_url=outcome.url,
            warning=outcome.strategy.warning,
            platform=platform.value,
            username=username,
            strategy=outcome.strategy.name,
        )


async def resolve_avatar(
    platform: Platform | str,
    username: str,
    settings: AppSettings | None = None,
) -> RetrievalResult:
    return await AvatarResolver(settings).resolve(platform, username)
