"""
Base storage interface for longlink.

Purpose:
    Define a small, stable async contract that multiple storage backends
    (in-memory, PostgreSQL, ...) can implement without requiring changes to
    the manager, generator or resolver.

Two groups of methods:
    - slug records: save / resolve / exists / increment_clicks / get_analytics
    - entity lookups used by the Resolver: find_entity_id / fetch_entity

Testing & Coverage:
    Abstract methods are not executed directly in tests and are annotated with
    `# pragma: no cover`.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

from ..models import AnalyticsRecord, EntityRecord


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod  # pragma: no cover
    async def initialize(self) -> None:
        """Prepare the backend (connectivity check, table presence, ...)."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def save(self, slug: str, record: EntityRecord) -> bool:
        """
        Save or update a slug record.

        Returns:
            bool: True on success, False when the slug already belongs to a
            different entity.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def resolve(self, slug: str) -> Optional[EntityRecord]:
        """Return the record stored under `slug`, or None."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def exists(self, slug: str, entity_type: Optional[str] = None) -> bool:
        """
        True if `slug` is taken. With an entity type other than 'default' the
        check is scoped to that type.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def increment_clicks(self, slug: str, **click: Any) -> bool:
        """
        Count one click and record its details (user_agent, referer, ip,
        country). Returns False if the slug does not exist; that click is
        still recorded, as an invalid event.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def get_analytics(self, slug: str) -> Optional[AnalyticsRecord]:
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def close(self) -> None:
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def find_entity_id(self, lookup_table: str, entity_type: str, slug: str) -> Optional[str]:
        """Entity id bound to (entity_type, slug) in the lookup table, or None."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    async def fetch_entity(self, table: str, column: str, value: Any) -> Optional[Dict[str, Any]]:
        """First row of `table` where `column` equals `value`, or None."""
        raise NotImplementedError

    async def health_check(self) -> bool:
        return True

    async def save_batch(self, records: Iterable[EntityRecord]) -> int:
        """Save records one by one; returns how many were accepted."""
        saved = 0
        for record in records:
            if await self.save(record.slug, record):
                saved += 1
        return saved
