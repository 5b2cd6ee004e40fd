"""
Resolver: slug -> entity record, with a process-lifetime resolution cache.

Resolution is validated first (shortening-mode format, no storage access on
failure), then served from the cache, then from the backing store using the
configured StorageStrategy:

    LOOKUP_TABLE  lookup table (slug, entity_type) -> entity_id, then the entity
                  row fetched from its own table by primary key
    INLINE        the slug is a column on the entity's own table

Only successful resolutions are cached. Bindings are append-only by
convention, so cached entries never expire; clear() is the only eviction.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from ..errors import (
    ConfigurationError,
    ErrorKind,
    LongLinkError,
    NotFoundError,
    UnknownEntityTypeError,
)
from ..models import EntityConfig, ResolutionResult, StorageConfig, StorageStrategy
from ..storage.base import BaseStorage
from .slugs import validate_slug

log = logging.getLogger("longlink.resolver")

EntityMapping = Dict[str, EntityConfig]
Resolved = Tuple[Optional[str], Dict[str, Any]]  # (entity_id, entity row)


class ResolutionCache:
    def __init__(self):
        self._entries: Dict[str, Dict[str, Resolved]] = {}

    def get(self, entity_type: str, slug: str) -> Optional[Resolved]:
        return self._entries.get(entity_type, {}).get(slug)

    def put(self, entity_type: str, slug: str, resolved: Resolved) -> None:
        self._entries.setdefault(entity_type, {})[slug] = resolved

    def clear(self, entity_type: Optional[str] = None) -> None:
        if entity_type is not None:
            self._entries.pop(entity_type, None)
        else:
            self._entries.clear()

    def __len__(self) -> int:
        return sum(len(slugs) for slugs in self._entries.values())


class Resolver:
    def __init__(self, storage: BaseStorage, cache: Optional[ResolutionCache] = None):
        self.storage = storage
        self.cache = cache if cache is not None else ResolutionCache()

    async def resolve(
        self,
        entity_type: str,
        slug: str,
        storage_config: Optional[StorageConfig] = None,
        entity_mapping: Optional[EntityMapping] = None,
    ) -> ResolutionResult:
        config = storage_config or StorageConfig()
        if not validate_slug(slug, config.id_length):
            return ResolutionResult.failure(
                ErrorKind.INVALID_FORMAT, "Invalid URL slug format", entity_type=entity_type, slug=slug
            )

        cached = self.cache.get(entity_type, slug)
        if cached is not None:
            entity_id, entity = cached
            return ResolutionResult(
                success=True, entity=entity, entity_id=entity_id, entity_type=entity_type, slug=slug
            )

        try:
            entity_id, entity = await self._query(entity_type, slug, config, entity_mapping or {})
        except LongLinkError as exc:
            return ResolutionResult.failure(exc.kind, str(exc), entity_type=entity_type, slug=slug)
        except Exception as exc:
            log.exception("Resolution of %s/%s failed", entity_type, slug)
            return ResolutionResult.failure(
                ErrorKind.STORAGE, f"Error resolving slug: {exc}", entity_type=entity_type, slug=slug
            )

        self.cache.put(entity_type, slug, (entity_id, entity))
        return ResolutionResult(
            success=True, entity=entity, entity_id=entity_id, entity_type=entity_type, slug=slug
        )

    async def _query(
        self, entity_type: str, slug: str, config: StorageConfig, mapping: EntityMapping
    ) -> Resolved:
        entity_config = mapping.get(entity_type)
        if entity_config is None:
            raise UnknownEntityTypeError(entity_type)

        if config.strategy is StorageStrategy.LOOKUP_TABLE:
            entity_id = await self.storage.find_entity_id(config.lookup_table, entity_type, slug)
            if entity_id is None:
                raise NotFoundError("URL slug not found")
            entity = await self.storage.fetch_entity(
                entity_config.table_name, entity_config.primary_key, entity_id
            )
            if entity is None:
                raise NotFoundError("Entity not found")
            return str(entity_id), entity

        if config.strategy is StorageStrategy.INLINE:
            entity = await self.storage.fetch_entity(entity_config.table_name, config.slug_column, slug)
            if entity is None:
                raise NotFoundError("URL slug not found")
            entity_id = entity.get(entity_config.primary_key, entity.get("id"))
            return (str(entity_id) if entity_id is not None else None), entity

        raise ConfigurationError(f"Unsupported storage strategy: {config.strategy!r}")
