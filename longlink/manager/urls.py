"""
Public URL assembly and parsing.
"""

import re
from typing import Dict, Iterable, Optional

from .slugs import validate_slug

DEFAULT_ENTITY_TYPE = "default"
_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


def clean_domain(domain: str) -> str:
    """Strip scheme and surrounding slashes: 'https://x.co/' -> 'x.co'."""
    return _SCHEME.sub("", domain.strip()).strip("/")


def build_public_url(
    domain: str,
    slug: str,
    entity_type: Optional[str] = None,
    include_entity_in_path: bool = False,
) -> str:
    """
    Assemble the public URL for a slug.

    >>> build_public_url("yourdomain.co", "X7gT5p", "product", include_entity_in_path=True)
    'https://yourdomain.co/product/X7gT5p'
    >>> build_public_url("https://yourdomain.co/", "X7gT5p")
    'https://yourdomain.co/X7gT5p'
    """
    base = f"https://{clean_domain(domain)}"
    if include_entity_in_path and entity_type:
        return f"{base}/{entity_type.strip('/')}/{slug}"
    return f"{base}/{slug}"


def parse_entity_url(
    url_path: str,
    valid_entity_types: Optional[Iterable[str]] = None,
    id_length: int = 6,
) -> Optional[Dict[str, str]]:
    """
    Parse '/product/X7gT5p' or '/X7gT5p' into entity type and slug.

    A bare slug maps to the 'default' entity type. Returns None when the path
    has the wrong shape, the entity type is not allowed, or the slug fails the
    shortening-mode format check.
    """
    path = url_path[1:] if url_path.startswith("/") else url_path
    parts = path.split("/")
    if len(parts) == 2:
        entity_type, slug = parts
        if not entity_type:
            return None
        if valid_entity_types is not None and entity_type not in set(valid_entity_types):
            return None
    elif len(parts) == 1:
        entity_type, slug = DEFAULT_ENTITY_TYPE, parts[0]
    else:
        return None

    if not validate_slug(slug, id_length):
        return None
    return {"entity_type": entity_type, "slug": slug}
