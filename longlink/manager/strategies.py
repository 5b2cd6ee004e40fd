"""
Slug generation strategies.

Provided strategies:
- RandomSlugStrategy:  shortening mode; random Base62 slug, bounded retry on collision
- EntitySlugStrategy:  framework mode; readable slug derived from the entity id,
                       fails fast on collision
- PatternSlugStrategy: public id substituted into a URL template, bounded retry

Shared behaviour lives in BaseStrategy.first_free(): up to `max_attempts`
candidates, strictly in order. A candidate that is free wins; a candidate
whose check is unavailable also wins (storage-level uniqueness still
applies); running out of attempts raises RetryExhaustedError.

Framework mode never retries: a taken derived slug is a SlugConflictError.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Tuple, Type

from ..config import MAX_ATTEMPTS
from ..errors import ConfigurationError, RetryExhaustedError, SlugConflictError
from ..models import GenerationMode, GenerationRequest
from .collision import CollisionChecker, SlugStatus
from .patterns import find_placeholder, render_pattern
from .slugs import derive_slug, generate_random_id

log = logging.getLogger("longlink.strategies")

IdFactory = Callable[[int], str]  # length -> random id
Candidate = Tuple[str, str]  # (slug, public_id)


@dataclass
class BaseStrategy(ABC):
    """Abstract base for slug generation strategies."""

    checker: CollisionChecker
    id_factory: IdFactory = generate_random_id
    max_attempts: int = MAX_ATTEMPTS

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> Candidate:
        """Return the winning (slug, public_id) for the request."""
        raise NotImplementedError

    async def first_free(self, entity_type: str, propose: Callable[[], Candidate]) -> Candidate:
        slug, public_id = propose()
        attempts = 1
        while attempts < self.max_attempts:
            status = await self.checker.check(entity_type, slug)
            if status is SlugStatus.ABSENT:
                return slug, public_id
            if status is SlugStatus.UNKNOWN:
                log.warning(
                    "Collision checking unavailable, continuing with %s/%s unchecked",
                    entity_type,
                    slug,
                )
                return slug, public_id
            log.info("Collision detected for %s/%s, regenerating (attempt %d)", entity_type, slug, attempts)
            slug, public_id = propose()
            attempts += 1
        raise RetryExhaustedError(self.max_attempts)


@dataclass
class RandomSlugStrategy(BaseStrategy):
    async def generate(self, request: GenerationRequest) -> Candidate:
        opts = request.options
        if opts.public_id and opts.include_in_slug:
            return opts.public_id, opts.public_id

        def propose() -> Candidate:
            slug = self.id_factory(opts.id_length)
            if opts.include_in_slug:
                return slug, slug
            return slug, opts.public_id or self.id_factory(opts.id_length)

        return await self.first_free(request.entity_type, propose)


@dataclass
class EntitySlugStrategy(BaseStrategy):
    async def generate(self, request: GenerationRequest) -> Candidate:
        opts = request.options
        public_id = opts.public_id or derive_slug(request.entity_id)
        if not public_id:
            raise ConfigurationError(f"Cannot derive a slug from entity id {request.entity_id!r}")

        slug = public_id if opts.include_in_slug else self.id_factory(opts.id_length)
        if opts.public_id:
            return slug, public_id

        status = await self.checker.check(request.entity_type, slug)
        if status is SlugStatus.EXISTS:
            raise SlugConflictError(
                f"Slug '{slug}' conflicts with existing URL for entity type '{request.entity_type}'"
            )
        if status is SlugStatus.UNKNOWN:
            log.warning(
                "Collision checking unavailable, continuing with %s/%s unchecked",
                request.entity_type,
                slug,
            )
        return slug, public_id


@dataclass
class PatternSlugStrategy(BaseStrategy):
    async def generate(self, request: GenerationRequest) -> Candidate:
        opts = request.options
        pattern = opts.url_pattern
        find_placeholder(pattern)

        if opts.public_id and opts.include_in_slug:
            return render_pattern(pattern, opts.public_id), opts.public_id

        def propose() -> Candidate:
            public_id = opts.public_id or self.id_factory(opts.id_length)
            return render_pattern(pattern, public_id, opts.include_in_slug), public_id

        return await self.first_free(request.entity_type, propose)


STRATEGY_REGISTRY: Dict[GenerationMode, Type[BaseStrategy]] = {
    GenerationMode.RANDOM: RandomSlugStrategy,
    GenerationMode.ENTITY: EntitySlugStrategy,
    GenerationMode.PATTERN: PatternSlugStrategy,
}


def get_strategy(
    mode: GenerationMode,
    checker: CollisionChecker,
    id_factory: IdFactory = generate_random_id,
    max_attempts: int = MAX_ATTEMPTS,
) -> BaseStrategy:
    cls = STRATEGY_REGISTRY[mode]
    return cls(checker=checker, id_factory=id_factory, max_attempts=max_attempts)
