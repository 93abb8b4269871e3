from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from ..config import settings
from .gateway import AIClientConfig, AIGateway


@lru_cache
def get_ai_config() -> AIClientConfig:
    return AIClientConfig.from_settings(settings)


@lru_cache
def get_ai_gateway() -> AIGateway:
    """One gateway per process, built from the startup configuration."""
    return AIGateway.from_config(get_ai_config())


GatewayDep = Annotated[AIGateway, Depends(get_ai_gateway)]
