# backend/aimak/ai/gateway.py
"""
AI provider gateway.

All AI features (translation, categorization, tag suggestion, editorial
analysis) go through ``AIGateway.generate``. Providers are tried in order:

1. Gemini (primary, google-genai SDK). Never retried.
2. OpenRouter (secondary, OpenAI-compatible API via the openai SDK).
   HTTP 429 is retried up to ``rate_limit_retries`` more times with linear
   backoff (2s, 4s by default).

Each adapter returns a ``ProviderResult`` instead of raising, and owns the
normalization of its own response shape. The gateway only raises once every
adapter has failed, or up front when none is configured.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Protocol

import httpx
from google import genai
from google.genai import errors as genai_errors
from openai import (
    APIConnectionError,
    APIError,
    APIStatusError,
    AsyncOpenAI,
    RateLimitError,
)

from ..config import Config
from .errors import AIConfigurationError, AIProviderError

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    BLOCKED = "blocked"
    NO_CANDIDATES = "no_candidates"
    EMPTY = "empty"
    RATE_LIMITED = "rate_limited"
    HTTP_ERROR = "http_error"
    NETWORK = "network"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ProviderResult:
    provider: str
    text: Optional[str] = None
    kind: Optional[FailureKind] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.text is not None

    @classmethod
    def success(cls, provider: str, text: str) -> "ProviderResult":
        return cls(provider=provider, text=text)

    @classmethod
    def failure(cls, provider: str, kind: FailureKind, reason: str) -> "ProviderResult":
        return cls(provider=provider, kind=kind, reason=reason)


@dataclass(frozen=True)
class GenerationOptions:
    temperature: float = 0.3
    max_output_tokens: Optional[int] = None


@dataclass(frozen=True)
class AIClientConfig:
    """Provider credentials and tuning, read once from settings at startup."""

    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    openrouter_api_key: Optional[str] = None
    openrouter_model: str = "anthropic/claude-3.5-sonnet"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    referer: str = "http://localhost:3000"
    app_title: str = "AIMAK News"
    rate_limit_retries: int = 2
    rate_limit_backoff: float = 2.0
    request_timeout: Optional[float] = None

    @classmethod
    def from_settings(cls, settings: Config) -> "AIClientConfig":
        return cls(
            gemini_api_key=settings.GEMINI_API_KEY or None,
            gemini_model=settings.GEMINI_MODEL,
            openrouter_api_key=settings.openrouter_key or None,
            openrouter_model=settings.OPENROUTER_MODEL,
            openrouter_base_url=settings.OPENROUTER_BASE_URL,
            referer=settings.FRONTEND_URL,
            app_title=settings.OPENROUTER_APP_TITLE,
            rate_limit_retries=settings.AI_RATE_LIMIT_RETRIES,
            rate_limit_backoff=settings.AI_RATE_LIMIT_BACKOFF_SECONDS,
            request_timeout=settings.AI_REQUEST_TIMEOUT,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.gemini_api_key or self.openrouter_api_key)


class ProviderAdapter(Protocol):
    name: str

    async def attempt(self, prompt: str, options: GenerationOptions) -> ProviderResult: ...


class GeminiAdapter:
    name = "gemini"

    def __init__(self, api_key: str, model: str, *, timeout: Optional[float] = None, client=None):
        self.model = model
        if client is None:
            http_options = {"timeout": int(timeout * 1000)} if timeout else None
            client = genai.Client(api_key=api_key, http_options=http_options)
        self._client = client

    async def attempt(self, prompt: str, options: GenerationOptions) -> ProviderResult:
        config = {"temperature": options.temperature}
        if options.max_output_tokens:
            config["max_output_tokens"] = options.max_output_tokens

        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        except genai_errors.APIError as exc:
            return ProviderResult.failure(self.name, FailureKind.HTTP_ERROR, f"HTTP {exc.code}: {exc.message}")
        except httpx.HTTPError as exc:
            return ProviderResult.failure(self.name, FailureKind.NETWORK, str(exc) or type(exc).__name__)
        except ValueError as exc:
            # genai's UnknownApiResponseError (unparseable body) is a ValueError
            return ProviderResult.failure(self.name, FailureKind.MALFORMED, str(exc) or type(exc).__name__)

        return self._normalize(response)

    def _normalize(self, response) -> ProviderResult:
        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None) if feedback else None
        if block_reason:
            return ProviderResult.failure(self.name, FailureKind.BLOCKED, f"Content blocked: {block_reason}")

        if not getattr(response, "candidates", None):
            return ProviderResult.failure(self.name, FailureKind.NO_CANDIDATES, "No response candidates from Gemini")

        text = response.text or ""
        if not text.strip():
            return ProviderResult.failure(self.name, FailureKind.EMPTY, "Empty response from Gemini")
        return ProviderResult.success(self.name, text.strip())


class OpenRouterAdapter:
    name = "openrouter"

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        base_url: str = "https://openrouter.ai/api/v1",
        referer: str = "http://localhost:3000",
        app_title: str = "AIMAK News",
        rate_limit_retries: int = 2,
        rate_limit_backoff: float = 2.0,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.model = model
        self.rate_limit_retries = rate_limit_retries
        self.rate_limit_backoff = rate_limit_backoff
        self._sleep = sleep

        client_kwargs = {
            "api_key": api_key,
            "base_url": base_url,
            # 429 handling is ours; the SDK must not retry on its own
            "max_retries": 0,
            "default_headers": {"HTTP-Referer": referer, "X-Title": app_title},
        }
        if timeout:
            client_kwargs["timeout"] = timeout
        if http_client is not None:
            client_kwargs["http_client"] = http_client
        self._client = AsyncOpenAI(**client_kwargs)

    async def attempt(self, prompt: str, options: GenerationOptions) -> ProviderResult:
        params = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": options.temperature,
        }
        if options.max_output_tokens:
            params["max_tokens"] = options.max_output_tokens

        total_attempts = self.rate_limit_retries + 1
        for attempt in range(1, total_attempts + 1):
            try:
                completion = await self._client.chat.completions.create(**params)
            except RateLimitError as exc:
                if attempt < total_attempts:
                    delay = self.rate_limit_backoff * attempt
                    logger.warning(
                        f"OpenRouter rate limited (attempt {attempt}/{total_attempts}), retrying in {delay:.0f}s"
                    )
                    await self._sleep(delay)
                    continue
                return ProviderResult.failure(
                    self.name, FailureKind.RATE_LIMITED, f"Rate limited after {total_attempts} attempts: {exc.message}"
                )
            except APIStatusError as exc:
                return ProviderResult.failure(self.name, FailureKind.HTTP_ERROR, f"HTTP {exc.status_code}: {exc.message}")
            except APIConnectionError as exc:
                return ProviderResult.failure(self.name, FailureKind.NETWORK, exc.message)
            except APIError as exc:
                return ProviderResult.failure(self.name, FailureKind.MALFORMED, exc.message)
            return self._normalize(completion)

        # unreachable: the loop either returns or continues to a final attempt
        return ProviderResult.failure(self.name, FailureKind.RATE_LIMITED, "Rate limited")

    def _normalize(self, completion) -> ProviderResult:
        choices = getattr(completion, "choices", None)
        if not choices:
            return ProviderResult.failure(self.name, FailureKind.MALFORMED, "Invalid response from OpenRouter: no choices")

        message = getattr(choices[0], "message", None)
        # some reasoning models leave content empty and answer in "reasoning"
        content = getattr(message, "content", None) or getattr(message, "reasoning", None) or ""
        if not isinstance(content, str) or not content.strip():
            return ProviderResult.failure(self.name, FailureKind.EMPTY, "Empty response from OpenRouter")
        return ProviderResult.success(self.name, content.strip())


@dataclass
class AIGateway:
    adapters: List[ProviderAdapter] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: AIClientConfig) -> "AIGateway":
        adapters: List[ProviderAdapter] = []
        if config.gemini_api_key:
            adapters.append(GeminiAdapter(config.gemini_api_key, config.gemini_model, timeout=config.request_timeout))
        if config.openrouter_api_key:
            adapters.append(
                OpenRouterAdapter(
                    config.openrouter_api_key,
                    config.openrouter_model,
                    base_url=config.openrouter_base_url,
                    referer=config.referer,
                    app_title=config.app_title,
                    rate_limit_retries=config.rate_limit_retries,
                    rate_limit_backoff=config.rate_limit_backoff,
                    timeout=config.request_timeout,
                )
            )
        logger.info(f"AI gateway providers: {[a.name for a in adapters] or 'none'}")
        return cls(adapters=adapters)

    @property
    def is_configured(self) -> bool:
        return bool(self.adapters)

    def ensure_configured(self, feature: str = "AI service") -> None:
        if not self.is_configured:
            raise AIConfigurationError(
                f"{feature} is not configured. Please set GEMINI_API_KEY or OPENROUTER_API_KEY environment variable."
            )

    async def generate(
        self,
        prompt: str,
        options: Optional[GenerationOptions] = None,
        *,
        feature: str = "AI service",
    ) -> str:
        self.ensure_configured(feature)
        options = options or GenerationOptions()

        failures: List[ProviderResult] = []
        for adapter in self.adapters:
            result = await adapter.attempt(prompt, options)
            if result.ok:
                if failures:
                    logger.info(f"{feature}: {adapter.name} succeeded after fallback")
                return result.text
            logger.warning(f"{feature}: {result.provider} failed ({result.kind.value}): {result.reason}")
            failures.append(result)

        logger.error(f"{feature}: all AI providers failed: {[f.provider for f in failures]}")
        raise AIProviderError(f"{feature} failed: all AI providers are unavailable. Please try again later.", failures)

