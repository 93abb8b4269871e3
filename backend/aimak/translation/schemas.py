# backend/aimak/translation/schemas.py
from enum import Enum as PyEnum
from typing import Optional

from pydantic import Field

from ..models import CustomModel


class Language(str, PyEnum):
    KAZAKH = "kz"
    RUSSIAN = "ru"

    @property
    def display_name(self) -> str:
        return LANGUAGE_NAMES[self]


LANGUAGE_NAMES = {
    Language.KAZAKH: "Kazakh (Қазақ тілі)",
    Language.RUSSIAN: "Russian (Русский)",
}


class TranslateTextRequest(CustomModel):
    text: str = Field(..., min_length=1)
    source_language: Language
    target_language: Language


class TranslateTextResponse(CustomModel):
    translated_text: str


class TranslateArticleRequest(CustomModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    excerpt: Optional[str] = None
    source_language: Language = Language.KAZAKH
    target_language: Language = Language.RUSSIAN


class TranslatedArticle(CustomModel):
    title: str
    content: str
    excerpt: Optional[str] = None
