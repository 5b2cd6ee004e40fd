"""
Collision detection for slugs.

CollisionChecker answers "is this slug already taken for this entity type?"
with a cache in front of a pluggable backing check.

Cache rules:
    - Only positive answers are cached; "absent" is asked again every time.
    - One set per entity type, created on first use.
    - clear() empties one or all partitions and zeroes the hit/miss counters.

Failure rules:
    - A backing check that raises yields SlugStatus.UNKNOWN, never EXISTS.
      Callers decide whether to proceed without collision protection.
    - With degrade_on_check_failure=False the failure propagates as
      CheckUnavailableError instead.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, Set

from ..errors import CheckUnavailableError

log = logging.getLogger("longlink.collision")

ExistenceCheck = Callable[[str, str], Awaitable[bool]]  # (entity_type, slug) -> taken?


class SlugStatus(Enum):
    EXISTS = "exists"
    ABSENT = "absent"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    ratio: float
    total: int


class CollisionChecker:
    def __init__(self, backing_check: ExistenceCheck, degrade_on_check_failure: bool = True):
        self.backing_check = backing_check
        self.degrade_on_check_failure = degrade_on_check_failure
        self._taken: Dict[str, Set[str]] = {}
        self._hits = 0
        self._misses = 0

    async def check(self, entity_type: str, slug: str) -> SlugStatus:
        """
        Tri-state existence check: EXISTS, ABSENT, or UNKNOWN when the backing
        check is unavailable.
        """
        taken = self._taken.setdefault(entity_type, set())
        if slug in taken:
            self._hits += 1
            return SlugStatus.EXISTS

        self._misses += 1
        try:
            exists = await self.backing_check(entity_type, slug)
        except Exception as exc:
            if not self.degrade_on_check_failure:
                raise CheckUnavailableError(f"Existence check failed: {exc}") from exc
            log.warning("Existence check unavailable for %s/%s: %s", entity_type, slug, exc)
            return SlugStatus.UNKNOWN

        if exists:
            taken.add(slug)
            return SlugStatus.EXISTS
        return SlugStatus.ABSENT

    async def exists(self, entity_type: str, slug: str) -> bool:
        """Boolean form of check(); raises CheckUnavailableError when unknown."""
        status = await self.check(entity_type, slug)
        if status is SlugStatus.UNKNOWN:
            raise CheckUnavailableError(f"Existence of {entity_type}/{slug} could not be checked")
        return status is SlugStatus.EXISTS

    def clear(self, entity_type: Optional[str] = None) -> None:
        if entity_type is not None:
            if entity_type in self._taken:
                self._taken[entity_type].clear()
        else:
            for taken in self._taken.values():
                taken.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> CacheStats:
        total = self._hits + self._misses
        return CacheStats(
            hits=self._hits,
            misses=self._misses,
            ratio=self._hits / total if total else 0,
            total=total,
        )
