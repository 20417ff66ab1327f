from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError as SchemaError

from sentrydash.core.async_utils import run_blocking
from sentrydash.core.cache import RedisCache, profile_cache_key
from sentrydash.core.errors import DependencyError
from sentrydash.schemas import ProfileRead
from sentrydash.stores import RosterStore

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TIMEOUT = 1.0


class CachedRosterLookup:
    """Read-through cache in front of ``RosterStore.get``.

    Cache calls run in a worker thread with a deadline. A cache that does not
    answer in time is treated as a miss. Misses are not cached, so a profile
    created later is found on the next call.
    """

    def __init__(
        self,
        store: RosterStore,
        cache: RedisCache,
        ttl: Optional[int] = None,
        timeout: float = DEFAULT_CACHE_TIMEOUT,
    ) -> None:
        self.store = store
        self.cache = cache
        self.ttl = ttl
        self.timeout = timeout

    async def _cache_call(self, operation: str, func, *args) -> Any:
        try:
            return await run_blocking(func, *args, timeout=self.timeout, operation=operation)
        except DependencyError as e:
            logger.warning(f"Roster cache skipped: {e.message}")
            return None

    async def __call__(self, profile_id: str) -> Optional[ProfileRead]:
        key = profile_cache_key(profile_id)
        cached = await self._cache_call("roster cache get", self.cache.get, key)
        if isinstance(cached, dict):
            try:
                return ProfileRead.model_validate(cached)
            except SchemaError:
                logger.warning(f"Discarding malformed cache entry {key}")
                await self._cache_call("roster cache delete", self.cache.delete, key)

        profile = await self.store.get(profile_id)
        if profile is not None:
            await self._cache_call(
                "roster cache set",
                self.cache.set,
                key,
                profile.model_dump(mode="json"),
                self.ttl,
            )
        return profile
