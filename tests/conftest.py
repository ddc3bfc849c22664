"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-rizzchat-tests")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DEBUG", "false")

from collections.abc import AsyncGenerator, Sequence  # noqa: E402
from datetime import UTC, datetime  # noqa: E402
from typing import Any  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import fakeredis.aioredis  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from langchain_core.language_models import BaseChatModel  # noqa: E402
from langchain_core.messages import AIMessage, BaseMessage, SystemMessage  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from rizzchat.core.database import Base  # noqa: E402
from rizzchat.core.rate_limit import limiter  # noqa: E402
from rizzchat.models.chat import Chat  # noqa: E402
from rizzchat.models.redeem_code import RedeemCode  # noqa: E402
from rizzchat.models.user import User  # noqa: E402
from rizzchat.services.completion_service import CompletionService  # noqa: E402
from rizzchat.services.title_service import TITLE_PROMPT, TitleService  # noqa: E402
from rizzchat.services.token_service import TokenService  # noqa: E402

DEFAULT_USER_ID = "user-1"
ASSISTANT_REPLY = "Be yourself and ask open questions."
GENERATED_TITLE = "First Date Tips"

# --- Test DB (SQLite in-memory) ---

test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool
)
test_session_factory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


@pytest.fixture(autouse=True)
async def setup_db() -> AsyncGenerator[None, None]:
    """Create all tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a test database session."""
    async with test_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@pytest.fixture(autouse=True)
def reset_rate_limits() -> None:
    """Rate limit counters live in process memory; start each test clean."""
    limiter.reset()


# --- Test Redis (fakeredis) ---


@pytest.fixture
def fake_redis() -> fakeredis.aioredis.FakeRedis:
    """Create a fresh fake Redis client."""
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


@pytest.fixture(autouse=True)
def patch_redis(
    fake_redis: fakeredis.aioredis.FakeRedis, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Patch the global redis_client used by the middleware and get_redis()."""
    monkeypatch.setattr("rizzchat.core.redis.redis_client", fake_redis)


# --- Token helpers ---


def make_auth_headers(
    fake_redis: fakeredis.aioredis.FakeRedis,
    user_id: str = DEFAULT_USER_ID,
    role: str = "user",
    **profile: str | None,
) -> dict[str, str]:
    """Generate Authorization headers with a valid access token."""
    ts = TokenService(fake_redis)
    token = ts.create_access_token(user_id=user_id, role=role, **profile)
    return {"Authorization": f"Bearer {token}"}


# --- Mock LLM ---


def make_llm(
    reply: str = ASSISTANT_REPLY,
    title: str = GENERATED_TITLE,
) -> MagicMock:
    """Mock chat model answering title prompts with ``title``, anything else with ``reply``."""
    mock = MagicMock(spec=BaseChatModel)

    async def _ainvoke(messages: Sequence[BaseMessage], *args: Any, **kwargs: Any) -> AIMessage:
        first = messages[0]
        if isinstance(first, SystemMessage) and first.content == TITLE_PROMPT:
            return AIMessage(content=title)
        return AIMessage(content=reply)

    mock.ainvoke = AsyncMock(side_effect=_ainvoke)
    return mock


@pytest.fixture
def mock_llm() -> MagicMock:
    """Create a mock LLM for testing."""
    return make_llm()


# --- App override & client fixtures ---


def _get_app(llm: MagicMock):  # type: ignore[no-untyped-def]
    """Import app lazily and apply overrides."""
    from rizzchat.core.database import get_async_session as original_dep
    from rizzchat.dependencies import get_completion_service, get_title_service
    from rizzchat.main import app

    app.dependency_overrides[original_dep] = override_get_async_session
    app.dependency_overrides[get_completion_service] = lambda: CompletionService(llm)
    app.dependency_overrides[get_title_service] = lambda: TitleService(llm)
    return app


@pytest.fixture
async def async_client(
    fake_redis: fakeredis.aioredis.FakeRedis,
    mock_llm: MagicMock,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client without auth headers."""
    application = _get_app(mock_llm)
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    application.dependency_overrides.clear()


@pytest.fixture
async def authed_client(
    fake_redis: fakeredis.aioredis.FakeRedis,
    mock_llm: MagicMock,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with auth headers for DEFAULT_USER_ID."""
    application = _get_app(mock_llm)
    headers = make_auth_headers(fake_redis)
    transport = ASGITransport(app=application)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=headers
    ) as ac:
        yield ac
    application.dependency_overrides.clear()


@pytest.fixture
async def admin_client(
    fake_redis: fakeredis.aioredis.FakeRedis,
    mock_llm: MagicMock,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with admin auth headers."""
    application = _get_app(mock_llm)
    headers = make_auth_headers(fake_redis, user_id="admin-1", role="admin")
    transport = ASGITransport(app=application)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=headers
    ) as ac:
        yield ac
    application.dependency_overrides.clear()


# --- DB session for tests ---


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a raw async session for repository tests."""
    async with test_session_factory() as session:
        yield session


# --- Seed helpers ---


def today_message(role: str, content: str) -> dict[str, str]:
    """A stored message timestamped now."""
    return {"role": role, "content": content, "timestamp": datetime.now(UTC).isoformat()}


def user_turns_today(count: int) -> list[dict[str, str]]:
    """``count`` round-trips sent today."""
    messages: list[dict[str, str]] = []
    for i in range(count):
        messages.append(today_message("user", f"question {i}"))
        messages.append(today_message("assistant", f"answer {i}"))
    return messages


async def seed_user(user_id: str = DEFAULT_USER_ID, is_pro: bool = False) -> str:
    """Insert a user row."""
    async with test_session_factory() as session:
        session.add(User(id=user_id, is_pro=is_pro))
        await session.commit()
    return user_id


async def seed_chat(
    user_id: str = DEFAULT_USER_ID,
    messages: list[dict[str, str]] | None = None,
    title: str | None = "New Chat",
    updated_at: datetime | None = None,
) -> int:
    """Insert a chat and return its id."""
    async with test_session_factory() as session:
        chat = Chat(user_id=user_id, title=title, messages=messages or [])
        if updated_at is not None:
            chat.updated_at = updated_at
        session.add(chat)
        await session.flush()
        chat_id = chat.id
        await session.commit()
    return chat_id


async def seed_code(code: str, used: bool = False) -> None:
    """Insert a redeem code (already normalized)."""
    async with test_session_factory() as session:
        session.add(RedeemCode(code=code, used=used))
        await session.commit()


async def load_user(user_id: str) -> User | None:
    async with test_session_factory() as session:
        return await session.get(User, user_id)


async def load_chat(chat_id: int) -> Chat | None:
    async with test_session_factory() as session:
        return await session.get(Chat, chat_id)


async def load_code(code: str) -> RedeemCode | None:
    from sqlalchemy import select

    async with test_session_factory() as session:
        result = await session.execute(select(RedeemCode).where(RedeemCode.code == code))
        return result.scalar_one_or_none()
