# backend/aimak/slugs.py
"""URL slugs for bilingual titles and names.

Latin, Cyrillic and the Kazakh-specific letters survive as-is (lowercased);
every other run of characters collapses into a single hyphen.
"""

import re
from typing import Awaitable, Callable

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9а-яёәғқңөұүһі]+")

DEFAULT_SLUG = "article"


def derive_slug(title: str | None, *, fallback: str = DEFAULT_SLUG) -> str:
    if not title:
        return fallback
    slug = _NON_SLUG_CHARS.sub("-", title.lower()).strip("-")
    return slug or fallback


async def unique_slug(base: str, exists: Callable[[str], Awaitable[bool]]) -> str:
    """First of ``base``, ``base-2``, ``base-3``... for which ``exists`` is False."""
    candidate = base
    suffix = 2
    while await exists(candidate):
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate
