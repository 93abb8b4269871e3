# backend/aimak/articles/services/categorization.py
"""
AI category advisor.

The model is asked for a single category slug. Replies are messy ("Категория:
sayasat", '"qogam".', "madeniyet\n\nПотому что..."), so the reply is matched
against the known slugs in three passes, and anything else is discarded.
The advisor never returns a slug outside the supplied set.
"""

import logging
import re
from typing import Optional, Sequence

from ...ai.gateway import AIGateway, GenerationOptions
from .prompt_builder import build_categorization_prompt

logger = logging.getLogger(__name__)

FEATURE = "AI categorization"

_QUOTES = "\"'`«»“”„"
_SLUG_CHARS = re.compile(r"[^a-z\-]")


def match_category_slug(reply: Optional[str], valid_slugs: Sequence[str]) -> Optional[str]:
    if not reply:
        return None
    valid = {s.lower(): s for s in valid_slugs}
    cleaned = reply.strip().lower().strip(_QUOTES + ".,;: \n\t")

    # (a) exact
    if cleaned in valid:
        return valid[cleaned]

    # (b) a known slug somewhere in the reply; longest first so "ozekti-news" beats "ozekti"
    for slug in sorted(valid, key=len, reverse=True):
        if slug in cleaned:
            return valid[slug]

    # (c) first token reduced to slug characters
    tokens = cleaned.split()
    if tokens:
        candidate = _SLUG_CHARS.sub("", tokens[0]).strip("-")
        if candidate in valid:
            return valid[candidate]
    return None


class CategorizationAdvisor:
    def __init__(self, gateway: AIGateway):
        self.gateway = gateway

    async def categorize(self, article, categories: Sequence) -> Optional[str]:
        """Return the slug of the best-fitting category, or None if the reply matched nothing."""
        self.gateway.ensure_configured(FEATURE)
        if not categories:
            return None

        prompt = build_categorization_prompt(article, categories)
        reply = await self.gateway.generate(
            prompt,
            GenerationOptions(temperature=0.3, max_output_tokens=50),
            feature=FEATURE,
        )

        slug = match_category_slug(reply, [c.slug for c in categories])
        if slug is None:
            logger.warning(f"AI returned invalid category slug: {reply[:100]!r}")
        return slug
