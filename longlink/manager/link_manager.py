"""
LinkManager module for longlink.

Responsibilities:
    - Generate collision-free slugs for entities (random, framework, pattern)
    - Persist slug -> destination records through an injected storage adapter
    - Follow slugs back to their destination while counting clicks
    - Resolve slugs to entity rows (lookup-table or inline strategy)
    - Own the collision and resolution caches and expose their admin operations

Design notes:
    - Storage is an injected dependency; the existence check defaults to the
      storage adapter's `exists` but any async (entity_type, slug) -> bool works.
    - Caches belong to the manager instance, so a fresh manager is a clean slate.
    - Public methods return result objects and never raise; internal code raises
      LongLinkError subclasses which are converted here.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from ..config import MAX_ATTEMPTS, settings
from ..errors import ConfigurationError, ErrorKind, UnknownEntityTypeError
from ..models import (
    AnalyticsResult,
    EntityConfig,
    EntityRecord,
    GenerationOptions,
    GenerationResult,
    ResolutionResult,
    StorageConfig,
    StorageStrategy,
)
from ..storage.base import BaseStorage
from ..storage.storage_factory import get_storage
from .collision import CacheStats, CollisionChecker, ExistenceCheck
from .generator import OptionsLike, SlugGenerator, coerce_options, failure_result
from .resolver import EntityMapping, ResolutionCache, Resolver
from .slugs import SlugMode, generate_random_id
from .slugs import validate_slug as _validate_slug
from .strategies import IdFactory

log = logging.getLogger("longlink.manager")


class LinkManager:
    """Coordinates generation, persistence, following and resolution of slugs."""

    def __init__(
        self,
        storage: Optional[BaseStorage] = None,
        entities: Optional[Mapping[str, EntityConfig]] = None,
        existence_check: Optional[ExistenceCheck] = None,
        degrade_on_check_failure: bool = True,
        id_factory: IdFactory = generate_random_id,
        domain: Optional[str] = None,
        storage_config: Optional[StorageConfig] = None,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        """
        Args:
            storage (Optional[BaseStorage]): Backend; defaults to get_storage().
            entities (Optional[Mapping[str, EntityConfig]]): Known entity types.
                When given, any other entity type is rejected.
            existence_check (Optional[ExistenceCheck]): Backing collision query;
                defaults to the storage adapter's `exists`.
            degrade_on_check_failure (bool): Proceed without collision protection
                when the existence check fails, instead of failing generation.
            id_factory (IdFactory): Random id source (length -> id).
            domain (Optional[str]): Default public domain.
            storage_config (Optional[StorageConfig]): Resolution strategy and tables.
            max_attempts (int): Candidates tried before giving up on a unique slug.
        """
        self.storage = storage if storage is not None else get_storage()
        self.entities: Dict[str, EntityConfig] = dict(entities or {})
        self.domain = domain or settings.DOMAIN
        self.storage_config = storage_config or StorageConfig(
            strategy=StorageStrategy(settings.STORAGE_STRATEGY),
            lookup_table=settings.LOOKUP_TABLE,
            slug_column=settings.SLUG_COLUMN,
            id_length=settings.ID_LENGTH,
        )
        self.collision_checker = CollisionChecker(
            existence_check or self._storage_exists,
            degrade_on_check_failure=degrade_on_check_failure,
        )
        self.resolution_cache = ResolutionCache()
        self.generator = SlugGenerator(
            self.collision_checker, id_factory=id_factory, domain=self.domain, max_attempts=max_attempts
        )
        self.resolver = Resolver(self.storage, self.resolution_cache)

    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------
    async def _storage_exists(self, entity_type: str, slug: str) -> bool:
        return await self.storage.exists(slug, entity_type=entity_type)

    def _options(self, options: OptionsLike) -> GenerationOptions:
        """Layer caller options over the configured defaults."""
        explicit = coerce_options(options)
        merged: Dict[str, Any] = {
            "id_length": settings.ID_LENGTH,
            "domain": self.domain,
            "include_entity_in_path": settings.INCLUDE_ENTITY_IN_PATH,
            "enable_shortening": settings.ENABLE_SHORTENING,
        }
        merged.update(explicit.model_dump(include=explicit.model_fields_set))
        return GenerationOptions.model_validate(merged)

    def _check_entity_type(self, entity_type: str) -> None:
        if not isinstance(entity_type, str):
            raise ConfigurationError("entity_type must be a string")
        if self.entities and entity_type not in self.entities:
            raise UnknownEntityTypeError(entity_type)

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------
    async def initialize(self) -> None:
        await self.storage.initialize()

    async def close(self) -> None:
        await self.storage.close()

    async def health_check(self) -> bool:
        return await self.storage.health_check()

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    async def generate(
        self, entity_type: str, entity_id: str, options: OptionsLike = None
    ) -> GenerationResult:
        """
        Generate a slug and public URL without persisting anything.

        Rules:
            - Unknown entity types (when entities are configured) fail before
              any collision check.
            - Options default to the configured id length, domain, path and
              shortening settings; caller values win.
        """
        try:
            self._check_entity_type(entity_type)
            opts = self._options(options)
        except ConfigurationError as exc:
            return failure_result(exc.kind, str(exc), entity_type, entity_id)
        except ValidationError as exc:
            return failure_result(
                ErrorKind.CONFIGURATION,
                f"Invalid generation options: {exc.error_count()} error(s)",
                entity_type,
                entity_id,
            )
        return await self.generator.generate(entity_type, entity_id, opts)

    async def shorten(
        self,
        entity_type: str,
        entity_id: str,
        url_base: str,
        metadata: Optional[Dict[str, Any]] = None,
        options: OptionsLike = None,
    ) -> GenerationResult:
        """
        Generate a slug for an entity and persist the slug -> url_base record.

        Returns:
            GenerationResult: on success also carries `url_base`. A save the
            storage refuses (slug taken by another entity) is a `conflict`.
            A missing or blank `url_base` is a `configuration` failure and
            nothing is generated.
        """
        if not isinstance(url_base, str) or not url_base.strip():
            return failure_result(
                ErrorKind.CONFIGURATION, "url_base must be a non-empty string", entity_type, entity_id
            )

        result = await self.generate(entity_type, entity_id, options)
        if not result.success:
            return result

        try:
            record = EntityRecord(
                slug=result.slug,
                url_base=url_base,
                entity_type=entity_type,
                entity_id=entity_id,
                public_id=result.public_id,
                metadata=metadata or {},
            )
        except ValidationError as exc:
            return failure_result(
                ErrorKind.CONFIGURATION,
                f"Invalid URL record: {exc.error_count()} error(s)",
                entity_type,
                entity_id,
            )

        try:
            saved = await self.storage.save(result.slug, record)
        except Exception as exc:
            log.exception("Saving %s/%s failed", entity_type, result.slug)
            return GenerationResult.failure(
                ErrorKind.STORAGE, f"Failed to save URL: {exc}", entity_type=entity_type, entity_id=entity_id
            )
        if not saved:
            return GenerationResult.failure(
                ErrorKind.CONFLICT,
                f"Slug '{result.slug}' is already taken",
                entity_type=entity_type,
                entity_id=entity_id,
            )
        return result.model_copy(update={"url_base": url_base})

    async def follow(self, slug: str, **click: Any) -> ResolutionResult:
        """
        Look up a stored slug, count the click, and return its destination.

        Keyword args are click details (user_agent, referer, ip, country).
        """
        try:
            record = await self.storage.resolve(slug)
            if record is None:
                await self.storage.increment_clicks(slug, **click)
                return ResolutionResult.failure(ErrorKind.NOT_FOUND, "URL not found", slug=slug)
            await self.storage.increment_clicks(slug, **click)
            updated = await self.storage.resolve(slug) or record
        except Exception as exc:
            log.exception("Following %s failed", slug)
            return ResolutionResult.failure(ErrorKind.STORAGE, f"Failed to resolve URL: {exc}", slug=slug)

        return ResolutionResult(
            success=True,
            slug=slug,
            url_base=updated.url_base,
            entity_type=updated.entity_type,
            entity_id=updated.entity_id,
            metadata=updated.metadata,
            click_count=updated.click_count,
        )

    async def analytics(self, slug: str) -> AnalyticsResult:
        try:
            data = await self.storage.get_analytics(slug)
        except Exception as exc:
            log.exception("Analytics for %s failed", slug)
            return AnalyticsResult(
                success=False, error=f"Failed to get analytics: {exc}", error_kind=ErrorKind.STORAGE
            )
        if data is None:
            return AnalyticsResult(success=False, error="URL not found", error_kind=ErrorKind.NOT_FOUND)
        return AnalyticsResult(success=True, data=data)

    async def resolve(
        self,
        entity_type: str,
        slug: str,
        storage_config: Optional[StorageConfig] = None,
        entity_mapping: Optional[EntityMapping] = None,
    ) -> ResolutionResult:
        """Resolve a slug to its entity row; defaults to the manager's config and entities."""
        mapping = entity_mapping if entity_mapping is not None else self.entities
        return await self.resolver.resolve(
            entity_type, slug, storage_config or self.storage_config, mapping
        )

    # ---------------------------------------------------------------------
    # Validation & cache administration
    # ---------------------------------------------------------------------
    @staticmethod
    def validate_slug(slug: Any, length: int = 6, mode: str = SlugMode.SHORTENING) -> bool:
        return _validate_slug(slug, length, mode)

    def clear_collision_cache(self, entity_type: Optional[str] = None) -> None:
        self.collision_checker.clear(entity_type)

    def clear_resolution_cache(self, entity_type: Optional[str] = None) -> None:
        self.resolution_cache.clear(entity_type)

    def get_collision_cache_stats(self) -> CacheStats:
        return self.collision_checker.stats()
