"""
SlugGenerator: turns (entity, options) into a unique slug and public URL.

Flow:
    request -> strategy (random | entity | pattern) -> collision checker
            -> URL assembly -> GenerationResult

Every outcome, including malformed patterns, conflicts and exhausted
retries, comes back as a GenerationResult; nothing raises past generate().
"""

import logging
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from ..config import MAX_ATTEMPTS, settings
from ..errors import ErrorKind, LongLinkError
from ..models import GenerationOptions, GenerationRequest, GenerationResult
from .collision import CollisionChecker
from .slugs import generate_random_id
from .strategies import IdFactory, get_strategy
from .urls import build_public_url

log = logging.getLogger("longlink.generator")

OptionsLike = Union[GenerationOptions, Dict[str, Any], None]


def failure_result(kind: ErrorKind, message: str, entity_type: Any, entity_id: Any) -> GenerationResult:
    """Failure result echoing the entity fields only when they are strings."""
    return GenerationResult.failure(
        kind,
        message,
        entity_type=entity_type if isinstance(entity_type, str) else None,
        entity_id=entity_id if isinstance(entity_id, str) else None,
    )


def coerce_options(options: OptionsLike) -> GenerationOptions:
    """Accept a GenerationOptions, a (possibly camelCase) dict, or None."""
    if options is None:
        return GenerationOptions()
    if isinstance(options, GenerationOptions):
        return options
    return GenerationOptions.model_validate(options)


class SlugGenerator:
    def __init__(
        self,
        checker: CollisionChecker,
        id_factory: IdFactory = generate_random_id,
        domain: Optional[str] = None,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        """
        Args:
            checker (CollisionChecker): Cache-fronted existence check.
            id_factory (IdFactory): length -> random id; injectable for tests.
            domain (Optional[str]): Fallback domain when options carry none.
            max_attempts (int): Candidates tried by the retrying strategies.
        """
        self.checker = checker
        self.id_factory = id_factory
        self.domain = domain or settings.DOMAIN
        self.max_attempts = max_attempts

    async def generate(
        self, entity_type: str, entity_id: str, options: OptionsLike = None
    ) -> GenerationResult:
        """
        Generate a slug and public URL for an entity.

        Returns:
            GenerationResult: success with slug/url/public_id, or a failure
            with `error` and `error_kind` (slug and url left empty).
        """
        try:
            opts = coerce_options(options)
        except ValidationError as exc:
            return failure_result(
                ErrorKind.CONFIGURATION,
                f"Invalid generation options: {exc.error_count()} error(s)",
                entity_type,
                entity_id,
            )

        try:
            request = GenerationRequest(entity_type=entity_type, entity_id=entity_id, options=opts)
        except ValidationError as exc:
            return failure_result(
                ErrorKind.CONFIGURATION,
                f"Invalid generation request: {exc.error_count()} error(s)",
                entity_type,
                entity_id,
            )
        strategy = get_strategy(request.mode, self.checker, self.id_factory, self.max_attempts)

        try:
            slug, public_id = await strategy.generate(request)
        except LongLinkError as exc:
            log.warning("Slug generation failed for %s/%s: %s", entity_type, entity_id, exc)
            return failure_result(exc.kind, str(exc), entity_type, entity_id)

        url = build_public_url(
            opts.domain or self.domain,
            slug,
            entity_type,
            include_entity_in_path=opts.include_entity_in_path,
        )
        return GenerationResult(
            success=True,
            slug=slug,
            url=url,
            public_id=public_id,
            entity_type=entity_type,
            entity_id=entity_id,
        )
