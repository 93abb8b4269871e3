# backend/aimak/articles/services/tagging.py
import logging
from typing import List, Sequence

from ...ai.errors import AIResponseFormatError
from ...ai.extraction import extract_json_array
from ...ai.gateway import AIGateway, GenerationOptions
from ...tags.schemas import TagOut
from ..schemas import TagSuggestion, TagSuggestionResult
from .prompt_builder import build_tagging_prompt

logger = logging.getLogger(__name__)

FEATURE = "AI tag generation"
MAX_SUGGESTIONS = 5

_KZ_KEYS = ("nameKz", "name_kz", "kz", "kk")
_RU_KEYS = ("nameRu", "name_ru", "ru")


def _pick(item: dict, keys) -> str:
    for key in keys:
        value = item.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def parse_tag_suggestions(reply: str) -> List[TagSuggestion]:
    """All-or-nothing: a single bad item rejects the whole reply."""
    extraction = extract_json_array(reply)
    if not extraction.ok:
        logger.error(f"Failed to parse tag suggestions ({extraction.error}): {(reply or '')[:300]!r}")
        raise AIResponseFormatError("AI returned tags in an unexpected format. Please try again.")

    suggestions = []
    for item in extraction.data[:MAX_SUGGESTIONS]:
        if not isinstance(item, dict):
            raise AIResponseFormatError("AI returned tags in an unexpected format. Please try again.")
        name_kz = _pick(item, _KZ_KEYS)
        if not name_kz:
            raise AIResponseFormatError("AI returned a tag without a Kazakh name. Please try again.")
        suggestions.append(TagSuggestion(name_kz=name_kz, name_ru=_pick(item, _RU_KEYS) or name_kz))
    return suggestions


def split_existing(suggestions: Sequence[TagSuggestion], existing_tags: Sequence) -> TagSuggestionResult:
    by_name = {}
    for tag in existing_tags:
        for name in (tag.name_kz, tag.name_ru):
            if name:
                by_name.setdefault(name.strip().casefold(), tag)

    result = TagSuggestionResult()
    seen_existing = set()
    seen_new = set()
    for suggestion in suggestions:
        match = by_name.get(suggestion.name_kz.casefold()) or by_name.get(suggestion.name_ru.casefold())
        if match is not None:
            if match.id not in seen_existing:
                seen_existing.add(match.id)
                result.existing.append(TagOut.model_validate(match))
            continue
        key = suggestion.name_kz.casefold()
        if key not in seen_new:
            seen_new.add(key)
            result.suggested.append(suggestion)
    return result


class TagSuggestionAdvisor:
    def __init__(self, gateway: AIGateway):
        self.gateway = gateway

    async def suggest_tags(self, article, existing_tags: Sequence) -> TagSuggestionResult:
        self.gateway.ensure_configured(FEATURE)

        prompt = build_tagging_prompt(article, [t.name_kz for t in existing_tags])
        reply = await self.gateway.generate(prompt, GenerationOptions(temperature=0.5), feature=FEATURE)

        suggestions = parse_tag_suggestions(reply)
        result = split_existing(suggestions, existing_tags)
        logger.info(f"Tag suggestions: {len(result.existing)} existing, {len(result.suggested)} new")
        return result
