import json
from typing import Annotated, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # FastAPI application
    ENVIRONMENT: str = "development"
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 4000
    APP_URL: str = "http://localhost:4000"
    FRONTEND_URL: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "Asia/Almaty"

    # Database
    POSTGRES_SSLMODE: str = "disable"
    DATABASE_URL: str = "postgresql+asyncpg://aimak:postgres@db:5432/aimak_db"

    # JWT
    JWT_SECRET_KEY: str = "your-secret-key"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # comma-separated or a JSON list; NoDecode hands the raw string to the validator
    CORS_ORIGINS: Annotated[List[str], NoDecode] = [
        "http://localhost:3000",
        "http://localhost",
    ]

    # Gemini (primary AI provider)
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.5-flash"

    # OpenRouter (secondary AI provider); OPENAI_API_KEY is accepted as a legacy alias
    OPENROUTER_API_KEY: str | None = None
    OPENAI_API_KEY: str | None = None
    OPENROUTER_MODEL: str = "anthropic/claude-3.5-sonnet"
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENROUTER_APP_TITLE: str = "AIMAK News"

    # Retry on HTTP 429 from the secondary provider: attempts after the first, linear backoff base
    AI_RATE_LIMIT_RETRIES: int = 2
    AI_RATE_LIMIT_BACKOFF_SECONDS: float = 2.0
    # None keeps the SDK default timeout
    AI_REQUEST_TIMEOUT: float | None = None

    # Pause between articles in bulk categorization
    AI_CATEGORIZE_ALL_DELAY_SECONDS: float = 1.0

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _normalise_cors(cls, value):
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            raw = value.strip()
            if raw.startswith("[") and raw.endswith("]"):
                try:
                    parsed = json.loads(raw)
                    if isinstance(parsed, list):
                        return parsed
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in raw.split(",") if item.strip()]
        raise ValueError("CORS_ORIGINS must be a string or list of strings")

    @property
    def openrouter_key(self) -> str | None:
        return self.OPENROUTER_API_KEY or self.OPENAI_API_KEY


settings = Config()
