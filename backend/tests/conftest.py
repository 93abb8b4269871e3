import os
from types import SimpleNamespace
from typing import List, Union

import pytest
from google.genai.errors import UnknownApiResponseError

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

# test settings, applied before aimak is imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("POSTGRES_SSLMODE", "disable")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CORS_ORIGINS", "*")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
# never reach a real provider, whatever a local .env says
for _key in ("GEMINI_API_KEY", "OPENROUTER_API_KEY", "OPENAI_API_KEY"):
    os.environ[_key] = ""

from aimak.main import app
from aimak.database import Base
from aimak.database import get_db as real_get_db
from aimak.ai.dependencies import get_ai_gateway
from aimak.ai.gateway import AIGateway, FailureKind, GeminiAdapter, ProviderResult
from aimak.auth.service import create_access_token
from aimak.categories.models import Category
from aimak.tags.models import Tag
from aimak.users.models import User, UserRole


class FakeAdapter:
    """Scripted provider: each attempt pops the next reply (str = success, ProviderResult = as-is)."""

    def __init__(self, name: str = "fake", replies: List[Union[str, ProviderResult]] = None):
        self.name = name
        self.replies = list(replies or [])
        self.prompts: List[str] = []
        self.options = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def fail_with(self, kind: FailureKind, reason: str = "scripted failure") -> ProviderResult:
        return ProviderResult.failure(self.name, kind, reason)

    async def attempt(self, prompt, options):
        self.prompts.append(prompt)
        self.options.append(options)
        if not self.replies:
            return self.fail_with(FailureKind.NETWORK, "no scripted reply")
        reply = self.replies.pop(0)
        if isinstance(reply, str):
            return ProviderResult.success(self.name, reply)
        return reply


class UnparseableGeminiModels:
    async def generate_content(self, **kwargs):
        raise UnknownApiResponseError("Failed to parse response as JSON")


def unparseable_gemini() -> GeminiAdapter:
    """A real Gemini adapter whose SDK client cannot parse the provider body."""
    client = SimpleNamespace(aio=SimpleNamespace(models=UnparseableGeminiModels()))
    return GeminiAdapter("g-key", "gemini-2.5-flash", client=client)


@pytest.fixture()
async def test_engine():
    # fresh in-memory database per test; StaticPool keeps the single connection alive
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db(test_engine):
    async_session = sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture()
def fake_ai():
    return FakeAdapter()


@pytest.fixture()
def gateway(fake_ai):
    return AIGateway(adapters=[fake_ai])


@pytest.fixture(autouse=True)
async def override_deps(db, gateway):
    async def _get_db():
        yield db
    app.dependency_overrides[real_get_db] = _get_db
    app.dependency_overrides[get_ai_gateway] = lambda: gateway
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _make_user(db, email: str, role: UserRole, name: str) -> User:
    user = User(email=email, name=name, role=role.value)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture()
async def admin(db):
    return await _make_user(db, "admin@aimak.kz", UserRole.ADMIN, "Admin")


@pytest.fixture()
async def editor(db):
    return await _make_user(db, "editor@aimak.kz", UserRole.EDITOR, "Айгүл")


@pytest.fixture()
async def other_editor(db):
    return await _make_user(db, "second.editor@aimak.kz", UserRole.EDITOR, "Ерлан")


@pytest.fixture()
async def reader(db):
    return await _make_user(db, "reader@aimak.kz", UserRole.USER, "Reader")


async def _headers(user: User) -> dict:
    token = await create_access_token(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
async def admin_headers(admin):
    return await _headers(admin)


@pytest.fixture()
async def editor_headers(editor):
    return await _headers(editor)


@pytest.fixture()
async def other_editor_headers(other_editor):
    return await _headers(other_editor)


@pytest.fixture()
async def reader_headers(reader):
    return await _headers(reader)


@pytest.fixture()
async def categories(db):
    items = [
        Category(slug="zhanalyqtar", name_kz="ЖАҢАЛЫҚТАР", name_ru="НОВОСТИ",
                 description_ru="Последние новости", sort_order=1),
        Category(slug="sayasat", name_kz="САЯСАТ", name_ru="ПОЛИТИКА",
                 description_ru="Политические новости и аналитика", sort_order=2),
        Category(slug="madeniyet", name_kz="МӘДЕНИЕТ", name_ru="КУЛЬТУРА",
                 description_ru="Культурные события", sort_order=3),
    ]
    db.add_all(items)
    await db.commit()
    for item in items:
        await db.refresh(item)
    return items


@pytest.fixture()
async def tags(db):
    items = [
        Tag(slug="saylau", name_kz="Сайлау", name_ru="Выборы"),
        Tag(slug="ekonomika", name_kz="Экономика", name_ru="Экономика"),
    ]
    db.add_all(items)
    await db.commit()
    for item in items:
        await db.refresh(item)
    return items
