"""
Slug primitives: alphabet, random ids, validation, entity-derived slugs.

- BASE62_ALPHABET: digits, then uppercase, then lowercase (62 symbols)
- generate_random_id: uniform random Base62 id of an exact length
- validate_slug: format rules for shortening mode and framework mode
- derive_slug: deterministic, idempotent readable slug from an entity id

All functions here are pure (apart from the randomness source) and do no I/O.
"""

import random
import re
from enum import Enum
from typing import Any

BASE62_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
_BASE62_SET = frozenset(BASE62_ALPHABET)

FRAMEWORK_SLUG_MAX_LENGTH = 100
_FRAMEWORK_SLUG_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")
_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")

_rng = random.SystemRandom()


class SlugMode(str, Enum):
    SHORTENING = "shortening"
    FRAMEWORK = "framework"


def generate_random_id(length: int = 6) -> str:
    """
    Random Base62 id of exactly `length` characters.
    62^6 ~ 5.68e10 values at the default length.
    """
    if length < 1:
        raise ValueError("length must be a positive integer")
    return "".join(_rng.choice(BASE62_ALPHABET) for _ in range(length))


def validate_slug(candidate: Any, expected_length: int = 6, mode: str = SlugMode.SHORTENING) -> bool:
    """
    Check a candidate slug against the format rules for `mode`.

    shortening: exact length and Base62 characters only.
    framework:  1..100 characters, ASCII letters, digits and hyphens.

    Never raises; anything that is not a non-empty string is invalid.
    """
    if not isinstance(candidate, str) or not candidate:
        return False
    if mode == SlugMode.FRAMEWORK:
        return (
            len(candidate) <= FRAMEWORK_SLUG_MAX_LENGTH
            and _FRAMEWORK_SLUG_PATTERN.match(candidate) is not None
        )
    if mode == SlugMode.SHORTENING:
        return len(candidate) == expected_length and all(c in _BASE62_SET for c in candidate)
    return False


def derive_slug(entity_id: str) -> str:
    """
    Readable slug from an entity id.

    >>> derive_slug("USER_123")
    'user-123'
    >>> derive_slug("---multiple---dashes---")
    'multiple-dashes'
    """
    return _NON_ALNUM_RUN.sub("-", str(entity_id).lower()).strip("-")
