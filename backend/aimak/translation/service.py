# backend/aimak/translation/service.py
"""
Kazakh <-> Russian translation through the AI gateway.

- translate(): plain text in, plain text out
- translate_article(): title/excerpt/content in one call, JSON out

Input is validated before any provider is contacted.
"""

import logging
from typing import Optional

from ..ai.errors import AITranslationFormatError, AIValidationError
from ..ai.extraction import extract_json_object
from ..ai.gateway import AIGateway, GenerationOptions
from .schemas import Language, TranslatedArticle

logger = logging.getLogger(__name__)

FEATURE = "Translation service"

PROMPT_TEXT = """You are a professional translator specializing in {source} to {target} translation.

Your task is to translate the following text accurately while preserving:
- The original meaning and tone
- Cultural context and nuances
- HTML tags and formatting (if present)
- Proper names and technical terms

Source language: {source}
Target language: {target}

Text to translate:
{text}

IMPORTANT: Return ONLY the translated text without any explanations, notes, or additional commentary."""

PROMPT_ARTICLE = """You are a professional news translator specializing in {source} to {target} translation for a bilingual news website.

Translate ALL parts of the following news article accurately while preserving:
- Journalistic tone and style
- Cultural context and nuances
- HTML tags and formatting (if present)
- Proper names (people, places, organizations)
- Numbers, dates, and statistics

Source language: {source}
Target language: {target}

ARTICLE TO TRANSLATE:

Title: {title}
{excerpt_block}
Content: {content}

Return your translation as a JSON object with this EXACT structure:
{schema}

IMPORTANT: Return ONLY the JSON object, no additional text or explanations."""


def _validate_pair(source: Language, target: Language) -> None:
    if source == target:
        raise AIValidationError("Source and target languages must be different")


def build_text_prompt(text: str, source: Language, target: Language) -> str:
    return PROMPT_TEXT.format(source=source.display_name, target=target.display_name, text=text)


def build_article_prompt(
    title: str,
    content: str,
    excerpt: Optional[str],
    source: Language,
    target: Language,
) -> str:
    if excerpt:
        excerpt_block = f"\nExcerpt: {excerpt}\n"
        schema = '{\n  "title": "Translated title",\n  "excerpt": "Translated excerpt",\n  "content": "Translated content"\n}'
    else:
        excerpt_block = ""
        schema = '{\n  "title": "Translated title",\n  "content": "Translated content"\n}'
    return PROMPT_ARTICLE.format(
        source=source.display_name,
        target=target.display_name,
        title=title,
        excerpt_block=excerpt_block,
        content=content,
        schema=schema,
    )


class TranslationService:
    def __init__(self, gateway: AIGateway):
        self.gateway = gateway

    async def translate(self, text: str, source: Language, target: Language) -> str:
        _validate_pair(source, target)
        if not text or not text.strip():
            raise AIValidationError("Text is required for translation")
        self.gateway.ensure_configured(FEATURE)

        prompt = build_text_prompt(text, source, target)
        translated = await self.gateway.generate(prompt, GenerationOptions(temperature=0.3), feature=FEATURE)
        return translated.strip()

    async def translate_article(
        self,
        title: str,
        content: str,
        source: Language,
        target: Language,
        excerpt: Optional[str] = None,
    ) -> TranslatedArticle:
        _validate_pair(source, target)
        if not title or not title.strip() or not content or not content.strip():
            raise AIValidationError("Title and content are required for translation")
        self.gateway.ensure_configured(FEATURE)

        has_excerpt = bool(excerpt and excerpt.strip())
        logger.info(
            "Article translation %s -> %s (title=%d, content=%d, excerpt=%d chars)",
            source.value, target.value, len(title), len(content), len(excerpt or ""),
        )

        prompt = build_article_prompt(title, content, excerpt if has_excerpt else None, source, target)
        raw = await self.gateway.generate(prompt, GenerationOptions(temperature=0.3), feature=FEATURE)

        extraction = extract_json_object(raw)
        if not extraction.ok:
            logger.error(f"Failed to extract JSON from translation response ({extraction.error}): {raw[:300]!r}")
            raise AITranslationFormatError()

        data = extraction.data
        translated_title = data.get("title")
        translated_content = data.get("content")
        if not isinstance(translated_title, str) or not isinstance(translated_content, str) \
                or not translated_title.strip() or not translated_content.strip():
            logger.error(f"Translation JSON is missing title/content: keys={sorted(data.keys())}")
            raise AITranslationFormatError()

        translated_excerpt = None
        if has_excerpt:
            value = data.get("excerpt")
            translated_excerpt = value.strip() if isinstance(value, str) and value.strip() else None

        return TranslatedArticle(
            title=translated_title.strip(),
            content=translated_content.strip(),
            excerpt=translated_excerpt,
        )
