# backend/aimak/articles/services/prompt_builder.py
"""
Prompt construction for the article advisors.

Prompts are plain strings; every advisor sends one user message through the
AI gateway and parses the reply itself.
"""

import html
import re
from typing import Iterable, Optional

from ...translation.schemas import Language


CONTENT_LIMIT = 2000

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def strip_html(text: Optional[str]) -> str:
    """Drop tags, unescape entities and collapse whitespace."""
    if not text:
        return ""
    plain = html.unescape(_TAG_RE.sub(" ", text))
    return _WS_RE.sub(" ", plain).strip()


def truncate(text: str, limit: int = CONTENT_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def describe_categories(categories: Iterable) -> str:
    lines = []
    for cat in categories:
        description = cat.description_ru or cat.description_kz or "Без описания"
        lines.append(f"- {cat.slug} ({cat.name_kz} / {cat.name_ru}): {description}")
    return "\n".join(lines)


def build_categorization_prompt(article, categories) -> str:
    content = truncate(strip_html(article.content_kz))
    excerpt = strip_html(getattr(article, "excerpt_kz", None))
    slugs = ", ".join(f'"{c.slug}"' for c in categories)

    parts = [
        "Ты - эксперт по категоризации новостных статей. "
        "Проанализируй следующую статью и определи наиболее подходящую категорию.",
        "",
        "СТАТЬЯ:",
        f"Заголовок: {article.title_kz}",
    ]
    if excerpt:
        parts.append(f"Краткое описание: {excerpt}")
    parts += [
        f"Содержание: {content}",
        "",
        "ДОСТУПНЫЕ КАТЕГОРИИ:",
        describe_categories(categories),
        "",
        "ИНСТРУКЦИИ:",
        "1. Внимательно прочитай статью и определи её основную тему",
        "2. Выбери ОДНУ наиболее подходящую категорию из списка выше",
        f"3. Верни ТОЛЬКО slug категории, один из: {slugs}",
        "",
        "Верни ТОЛЬКО slug категории без дополнительного текста.",
    ]
    return "\n".join(parts)


def build_tagging_prompt(article, existing_names: Iterable[str]) -> str:
    content = truncate(strip_html(article.content_kz))
    known = [n for n in existing_names if n]

    parts = [
        "You are an editor of a bilingual Kazakh/Russian news website.",
        "Suggest 3-5 short topical tags for the article below.",
        "",
        f"Title (Kazakh): {article.title_kz}",
    ]
    if getattr(article, "title_ru", None):
        parts.append(f"Title (Russian): {article.title_ru}")
    parts += [
        f"Content: {content}",
        "",
    ]
    if known:
        parts += [
            "Existing tags (reuse them when they fit, spelled exactly as listed):",
            ", ".join(known),
            "",
        ]
    parts += [
        "Return ONLY a JSON array, each item with a Kazakh and a Russian name:",
        '[{"nameKz": "...", "nameRu": "..."}]',
        "No explanations, no markdown.",
    ]
    return "\n".join(parts)


ANALYSIS_RUBRIC = """1. Structure: lead, logical flow, paragraphs.
2. Content quality: facts, sources, completeness, accuracy.
3. Title and excerpt: informative, engaging, accurate.
4. Language and style: grammar, clarity, journalistic register.
{bilingual}5. SEO and readability: keywords, length, scannability."""

BILINGUAL_CRITERION = "4a. Bilingual consistency: the Kazakh and Russian versions say the same thing.\n"

ANALYSIS_SCHEMA = """{
  "score": <integer 0-10>,
  "summary": "<one paragraph overall assessment>",
  "suggestions": ["<concrete suggestion>", "..."],
  "strengths": ["<strength>", "..."],
  "improvements": {
    "title": "<improved title as a single string>",
    "excerpt": "<improved excerpt as a single string>"
  }
}"""


def build_analysis_prompt(article, language: Language) -> str:
    has_russian = bool(article.title_ru and article.content_ru)
    rubric = ANALYSIS_RUBRIC.format(bilingual=BILINGUAL_CRITERION if has_russian else "")

    parts = [
        "You are an experienced editor-in-chief of a bilingual Kazakh/Russian newspaper.",
        "Review the article below against this rubric:",
        rubric,
        "",
        "ARTICLE (Kazakh):",
        f"Title: {article.title_kz}",
    ]
    if article.excerpt_kz:
        parts.append(f"Excerpt: {strip_html(article.excerpt_kz)}")
    parts.append(f"Content: {truncate(strip_html(article.content_kz), CONTENT_LIMIT * 2)}")

    if has_russian:
        parts += ["", "ARTICLE (Russian):", f"Title: {article.title_ru}"]
        if article.excerpt_ru:
            parts.append(f"Excerpt: {strip_html(article.excerpt_ru)}")
        parts.append(f"Content: {truncate(strip_html(article.content_ru), CONTENT_LIMIT * 2)}")

    parts += [
        "",
        f"Write every text value of your answer in {language.display_name}.",
        f"The improved title and excerpt must also be in {language.display_name}.",
        "Return ONLY a JSON object with this exact structure:",
        ANALYSIS_SCHEMA,
    ]
    return "\n".join(parts)
