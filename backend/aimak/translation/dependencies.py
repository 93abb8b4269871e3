from typing import Annotated

from fastapi import Depends

from ..ai.dependencies import GatewayDep
from .service import TranslationService


def get_translation_service(gateway: GatewayDep) -> TranslationService:
    return TranslationService(gateway)


TranslatorDep = Annotated[TranslationService, Depends(get_translation_service)]
