import os
import time
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from .database import engine
from .db_models import *  # noqa: F401,F403
from .config import settings
from .ai.dependencies import get_ai_gateway
from .ai.errors import AIServiceError
from .auth.router import router as auth_router
from .users.router import router as users_router
from .articles.router import router as articles_router
from .categories.router import router as categories_router
from .tags.router import router as tags_router
from .magazine_issues.router import router as magazine_issues_router
from .translation.router import router as translation_router

# stdout only; the container collects it
log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

# SDK request logs are noisy at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("google_genai").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)
logger.info(f"Application starting with log level: {settings.LOG_LEVEL}")

@asynccontextmanager
async def lifespan(app: FastAPI):
    gateway = get_ai_gateway()
    if not gateway.is_configured:
        logger.warning("No AI provider configured; translation, categorization, tagging and analysis will return 503")
    yield
    await engine.dispose()

os.environ["TZ"] = settings.TIMEZONE
if hasattr(time, "tzset"):
    time.tzset()

app = FastAPI(title="AIMAK News API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AIServiceError)
async def ai_service_error_handler(request: Request, exc: AIServiceError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(articles_router)
app.include_router(categories_router)
app.include_router(tags_router)
app.include_router(magazine_issues_router)
app.include_router(translation_router)

@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok", "ai_configured": get_ai_gateway().is_configured}
