from fastapi import APIRouter, Depends

from ..auth.dependencies import require_editor
from .dependencies import TranslatorDep
from .schemas import (
    TranslateArticleRequest,
    TranslateTextRequest,
    TranslateTextResponse,
    TranslatedArticle,
)

router = APIRouter(prefix="/translation", tags=["translation"], dependencies=[Depends(require_editor)])


@router.post("/text", response_model=TranslateTextResponse)
async def translate_text(body: TranslateTextRequest, translator: TranslatorDep):
    translated = await translator.translate(body.text, body.source_language, body.target_language)
    return TranslateTextResponse(translated_text=translated)


@router.post("/article", response_model=TranslatedArticle)
async def translate_article(body: TranslateArticleRequest, translator: TranslatorDep):
    return await translator.translate_article(
        title=body.title,
        content=body.content,
        excerpt=body.excerpt,
        source=body.source_language,
        target=body.target_language,
    )
