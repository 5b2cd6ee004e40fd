"""
longlink package initializer.
"""

from . import analytics
from . import manager
from . import storage
from .errors import ErrorKind, LongLinkError
from .manager.collision import CacheStats, CollisionChecker, SlugStatus
from .manager.generator import SlugGenerator
from .manager.link_manager import LinkManager
from .manager.patterns import validate_url_pattern
from .manager.resolver import ResolutionCache, Resolver
from .manager.slugs import BASE62_ALPHABET, SlugMode, derive_slug, generate_random_id, validate_slug
from .manager.urls import build_public_url, parse_entity_url
from .models import (
    EntityConfig,
    EntityRecord,
    GenerationOptions,
    GenerationResult,
    ResolutionResult,
    StorageConfig,
    StorageStrategy,
)

__all__ = [
    "analytics",
    "manager",
    "storage",
    "BASE62_ALPHABET",
    "CacheStats",
    "CollisionChecker",
    "EntityConfig",
    "EntityRecord",
    "ErrorKind",
    "GenerationOptions",
    "GenerationResult",
    "LinkManager",
    "LongLinkError",
    "ResolutionCache",
    "ResolutionResult",
    "Resolver",
    "SlugGenerator",
    "SlugMode",
    "SlugStatus",
    "StorageConfig",
    "StorageStrategy",
    "build_public_url",
    "derive_slug",
    "generate_random_id",
    "parse_entity_url",
    "validate_slug",
    "validate_url_pattern",
]
