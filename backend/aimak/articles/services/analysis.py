# backend/aimak/articles/services/analysis.py
"""
Editorial analysis ("AI editor").

Produces a score, a summary, suggestions, strengths and an improved
title/excerpt. Models do not always follow the schema: ``improvements.title``
sometimes comes back as ``{"kk": "...", "ru": "..."}`` instead of a string, the
score as ``"8/10"``, lists as a single string. Everything is coerced into
``ArticleAnalysis`` here so the admin UI only ever sees one shape.
"""

import logging
import re
from typing import Any, List

from ...ai.errors import (
    AIContentBlockedError,
    AINoCandidatesError,
    AIProviderError,
    AIResponseFormatError,
)
from ...ai.extraction import extract_json_object
from ...ai.gateway import AIGateway, FailureKind, GenerationOptions
from ...translation.schemas import Language
from ..schemas import ArticleAnalysis, ArticleImprovements
from .prompt_builder import build_analysis_prompt

logger = logging.getLogger(__name__)

FEATURE = "AI editor"

KAZAKH_KEYS = ("kz", "kk", "kaz", "kazakh")
RUSSIAN_KEYS = ("ru", "rus", "russian")
GENERIC_KEYS = ("text", "value")

_NUMBER_RE = re.compile(r"-?\d+(?:[.,]\d+)?")


def improvement_keys(language: Language) -> tuple:
    if language == Language.RUSSIAN:
        return RUSSIAN_KEYS + KAZAKH_KEYS + GENERIC_KEYS
    return KAZAKH_KEYS + RUSSIAN_KEYS + GENERIC_KEYS


def normalize_improvement(value: Any, language: Language) -> str:
    """Plain string as-is; language-keyed object -> first non-empty known key; else ""."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, dict):
        lowered = {str(k).lower(): v for k, v in value.items()}
        for key in improvement_keys(language):
            candidate = lowered.get(key)
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
    return ""


def coerce_score(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _NUMBER_RE.search(value)
        if not match:
            return 0
        number = float(match.group().replace(",", "."))
    else:
        return 0
    return max(0, min(10, int(round(number))))


def coerce_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        items = []
        for item in value:
            if isinstance(item, str):
                if item.strip():
                    items.append(item.strip())
            elif item is not None:
                items.append(str(item))
        return items
    return [str(value)]


def normalize_analysis(data: dict, language: Language) -> ArticleAnalysis:
    improvements = data.get("improvements")
    if not isinstance(improvements, dict):
        improvements = {}
    summary = data.get("summary")
    return ArticleAnalysis(
        score=coerce_score(data.get("score")),
        summary=summary.strip() if isinstance(summary, str) else "",
        suggestions=coerce_str_list(data.get("suggestions")),
        strengths=coerce_str_list(data.get("strengths")),
        improvements=ArticleImprovements(
            title=normalize_improvement(improvements.get("title"), language),
            excerpt=normalize_improvement(improvements.get("excerpt"), language),
        ),
    )


class EditorialAnalysisAdvisor:
    def __init__(self, gateway: AIGateway):
        self.gateway = gateway

    async def analyze(self, article, language: Language = Language.KAZAKH) -> ArticleAnalysis:
        self.gateway.ensure_configured(FEATURE)

        prompt = build_analysis_prompt(article, language)
        try:
            reply = await self.gateway.generate(prompt, GenerationOptions(temperature=0.4), feature=FEATURE)
        except AIProviderError as exc:
            # report the most specific cause the providers gave us
            if exc.has_failure(FailureKind.BLOCKED):
                raise AIContentBlockedError() from exc
            if exc.has_failure(FailureKind.NO_CANDIDATES):
                raise AINoCandidatesError() from exc
            raise

        extraction = extract_json_object(reply)
        if not extraction.ok:
            logger.error(f"AI editor returned invalid JSON ({extraction.error}): {reply[:300]!r}")
            raise AIResponseFormatError("AI editor returned invalid JSON. Please try again.")

        analysis = normalize_analysis(extraction.data, language)
        logger.info(f"AI editor score {analysis.score}/10 ({language.value})")
        return analysis
