"""
Error taxonomy for longlink.

Internal code raises these exceptions; the public boundary (SlugGenerator,
Resolver, LinkManager) turns them into failure results carrying the same
`ErrorKind`. They subclass ValueError so callers that already guard the
manager with `except ValueError` keep working.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of a failed generation or resolution."""

    UNKNOWN_ENTITY_TYPE = "unknown_entity_type"
    CONFIGURATION = "configuration"
    RETRY_EXHAUSTED = "retry_exhausted"
    CONFLICT = "conflict"
    PATTERN_MALFORMED = "pattern_malformed"
    INVALID_FORMAT = "invalid_format"
    NOT_FOUND = "not_found"
    STORAGE = "storage"


class LongLinkError(ValueError):
    """Base class for every error raised inside longlink."""

    kind: ErrorKind = ErrorKind.CONFIGURATION


class ConfigurationError(LongLinkError):
    kind = ErrorKind.CONFIGURATION


class UnknownEntityTypeError(ConfigurationError):
    kind = ErrorKind.UNKNOWN_ENTITY_TYPE

    def __init__(self, entity_type: str):
        super().__init__(f"Unknown entity type: {entity_type}")
        self.entity_type = entity_type


class PatternError(LongLinkError):
    kind = ErrorKind.PATTERN_MALFORMED


class RetryExhaustedError(LongLinkError):
    kind = ErrorKind.RETRY_EXHAUSTED

    def __init__(self, attempts: int):
        super().__init__(f"Failed to generate unique id after {attempts} attempts")
        self.attempts = attempts


class SlugConflictError(LongLinkError):
    kind = ErrorKind.CONFLICT


class InvalidSlugError(LongLinkError):
    kind = ErrorKind.INVALID_FORMAT


class NotFoundError(LongLinkError):
    kind = ErrorKind.NOT_FOUND


class CheckUnavailableError(LongLinkError):
    """The backing existence check failed; availability of the slug is unknown."""

    kind = ErrorKind.STORAGE
