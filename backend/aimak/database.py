from typing import Annotated, AsyncGenerator

from fastapi import Depends

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings

Base = declarative_base()

_connect_args = {}
if settings.DATABASE_URL.startswith("postgresql+asyncpg"):
    # asyncpg only; aiosqlite rejects the ssl argument
    _connect_args["ssl"] = settings.POSTGRES_SSLMODE == "require"

engine = create_async_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    pool_recycle=1800,
    connect_args=_connect_args,
)

async_session_factory = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as sess:
        yield sess

# `db: SessionDep` injects a session into route handlers
SessionDep = Annotated[AsyncSession, Depends(get_db)]
