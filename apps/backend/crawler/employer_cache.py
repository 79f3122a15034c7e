"""
Run-scoped employer profile cache.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, Hashable, Optional

import metrics

logger = logging.getLogger(__name__)

EmployerProfile = Dict[str, str]


class EmployerDetailCache:
    """
    Employer id -> profile attributes, filled lazily.

    The first stored profile for a key wins. Loads for the same key are
    serialised by a per-key lock so the profile page is fetched once.
    """

    def __init__(self):
        self._profiles: Dict[Hashable, EmployerProfile] = {}
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self.hits = 0
        self.misses = 0

    def __contains__(self, employer_id: Hashable) -> bool:
        return employer_id in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)

    def get(self, employer_id: Hashable) -> Optional[EmployerProfile]:
        return self._profiles.get(employer_id)

    def put(self, employer_id: Hashable, profile: EmployerProfile) -> EmployerProfile:
        """Store a profile unless one exists; returns the stored profile."""
        return self._profiles.setdefault(employer_id, profile)

    def _lock_for(self, employer_id: Hashable) -> asyncio.Lock:
        lock = self._locks.get(employer_id)
        if lock is None:
            lock = self._locks[employer_id] = asyncio.Lock()
        return lock

    async def get_or_load(
        self,
        employer_id: Hashable,
        loader: Callable[[], Awaitable[EmployerProfile]]
    ) -> EmployerProfile:
        """Return the cached profile, calling `loader` on a miss."""
        profile = self._profiles.get(employer_id)
        if profile is not None:
            self._record_hit()
            return profile

        async with self._lock_for(employer_id):
            profile = self._profiles.get(employer_id)
            if profile is not None:
                self._record_hit()
                return profile

            self.misses += 1
            metrics.incr_employer_cache_misses()
            logger.debug(f"[employer_cache] miss for employer {employer_id}")
            return self.put(employer_id, await loader())

    def _record_hit(self):
        self.hits += 1
        metrics.incr_employer_cache_hits()
