"""
URL pattern templates, e.g. 'summer-sale-{publicId}'.

A template carries exactly one placeholder. `{publicId}` is the current
spelling, `{endpointId}` is still accepted for older templates.
"""

import re
from typing import Optional

from ..errors import PatternError

PLACEHOLDERS = ("{publicId}", "{endpointId}")
_TOKEN = re.compile(r"\{[^{}]*\}")


def find_placeholder(pattern: Optional[str]) -> str:
    """
    Return the single placeholder used by `pattern`.

    Raises:
        PatternError: empty pattern, no placeholder, an unsupported `{...}`
            token, or more than one placeholder.
    """
    if not pattern or not isinstance(pattern, str):
        raise PatternError("URL pattern must be a non-empty string")

    tokens = _TOKEN.findall(pattern)
    unsupported = [t for t in tokens if t not in PLACEHOLDERS]
    if unsupported:
        raise PatternError(f"URL pattern contains unsupported placeholder(s): {', '.join(unsupported)}")
    if not tokens:
        raise PatternError("URL pattern must contain a {publicId} placeholder")
    if len(tokens) > 1:
        raise PatternError("URL pattern must contain exactly one placeholder")
    return tokens[0]


def validate_url_pattern(pattern: Optional[str]) -> bool:
    try:
        find_placeholder(pattern)
    except PatternError:
        return False
    return True


def render_pattern(pattern: str, public_id: str, include_in_slug: bool = True) -> str:
    """
    Substitute `public_id` into the template, or drop the placeholder (with one
    adjacent hyphen) when the public id must stay out of the slug.

    >>> render_pattern("summer-sale-{publicId}", "WEEKEND2024")
    'summer-sale-WEEKEND2024'
    >>> render_pattern("summer-sale-{publicId}", "WEEKEND2024", include_in_slug=False)
    'summer-sale'
    """
    placeholder = find_placeholder(pattern)
    if include_in_slug:
        return pattern.replace(placeholder, public_id, 1)

    for fragment in (f"-{placeholder}", f"{placeholder}-"):
        if fragment in pattern:
            slug = pattern.replace(fragment, "", 1)
            break
    else:
        slug = pattern.replace(placeholder, "", 1)
    if not slug:
        raise PatternError("URL pattern is empty once the public id is left out of the slug")
    return slug
