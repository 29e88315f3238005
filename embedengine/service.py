"""Cached entry point for resolving embedded players."""

from __future__ import annotations

from datetime import datetime
from functools import partial
from typing import Protocol

from embedengine.browser import PlaywrightSession
from embedengine.cache import CacheStore
from embedengine.clock import Clock, SystemClock, as_utc
from embedengine.config import Settings
from embedengine.logger import get_logger
from embedengine.resolver import EmbedResolver

log = get_logger(__name__)


class Resolver(Protocol):
    """Anything that turns a source URL into an embed locator."""

    async def resolve(self, source_url: str) -> str: ...


class EmbedService:
    """Serves locators from the cache while fresh, resolving otherwise.

    A failed resolution propagates unchanged and leaves the cache as it
    was; a stale entry is never returned after a failed refresh.
    """

    def __init__(
        self,
        cache: CacheStore,
        resolver: Resolver,
        clock: Clock | None = None,
    ) -> None:
        self.cache = cache
        self.resolver = resolver
        self.clock = clock or SystemClock()

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock | None = None) -> EmbedService:
        """Build the service with a Playwright-backed resolver."""
        cache = CacheStore(
            settings.cache_file,
            ttl=settings.cache_ttl,
            corrupt_policy=settings.corrupt_cache_policy,
        )
        session_factory = partial(
            PlaywrightSession,
            headless=settings.headless,
            launch_timeout_ms=settings.launch_timeout_ms,
            navigation_timeout_ms=settings.navigation_timeout_ms,
        )
        resolver = EmbedResolver(
            session_factory=session_factory,
            frame_marker=settings.frame_marker,
        )
        return cls(cache=cache, resolver=resolver, clock=clock)

    async def get_locator(self, source_url: str, now: datetime | None = None) -> str:
        """Return the embed locator for ``source_url``.

        Raises:
            StorageError: If the cache file cannot be read or written.
            ResolutionError: If a fresh resolution was needed and failed.
        """
        now = as_utc(now or self.clock.now())

        entry = self.cache.get(source_url)
        if entry is not None and self.cache.is_fresh(entry, now):
            log.debug("cache_hit", source_url=source_url)
            return entry.resolved_url

        log.info(
            "cache_miss",
            source_url=source_url,
            stale=entry is not None,
        )
        resolved_url = await self.resolver.resolve(source_url)
        self.cache.put(source_url, resolved_url, now)
        return resolved_url
