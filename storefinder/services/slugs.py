"""Slug generation for store URLs.

Slug = URL-safe identifier derived from a store name:
    "Cafe Blue!"  -> "cafe-blue"
    "Café Noël"   -> "cafe-noel"

De-duplication: when other stores already use ``base`` or ``base-N``, the new
slug is ``base-{count+1}`` where count is the number of such stores.

Example:
    cafe-blue, cafe-blue-2, cafe-blue-3, ...
"""

import re
import unicodedata
from collections.abc import Iterable

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

# Fallback for names with no ASCII letters/digits at all (e.g. "☕☕")
EMPTY_SLUG = "store"


def slugify(name: str) -> str:
    """Normalize a store name to a lowercase, dash-separated slug."""
    text = unicodedata.normalize("NFKD", name or "")
    text = text.encode("ascii", "ignore").decode("ascii").lower()
    text = _NON_ALNUM.sub("-", text).strip("-")
    return text or EMPTY_SLUG


def slug_match_pattern(base: str) -> str:
    """POSIX regex matching ``base`` and its numbered variants.

    Used with PostgreSQL's case-insensitive ``~*`` operator.
    """
    return f"^{re.escape(base)}(-[0-9]+)?$"


def next_slug(base: str, taken: Iterable[str]) -> str:
    """Pick the slug for a new/renamed store given the slugs already in use.

    ``taken`` must only contain slugs matching ``slug_match_pattern(base)``
    (excluding the store being renamed).
    """
    taken_lower = {s.lower() for s in taken}
    if not taken_lower:
        return base

    counter = len(taken_lower) + 1
    candidate = f"{base}-{counter}"
    # Gaps (e.g. base-2 renamed away) can make count+1 collide; keep counting.
    while candidate in taken_lower:
        counter += 1
        candidate = f"{base}-{counter}"
    return candidate
