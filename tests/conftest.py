import os

# Settings are read at import time; tests never touch a real server.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.database import get_db
from core.security import hash_password, token_registry
from models.base import Base
from models.match import Match  # noqa: F401  registers the table
from models.message import Message  # noqa: F401
from models.user import User


@pytest.fixture(autouse=True)
def clear_token_registry():
    token_registry.clear()
    yield
    token_registry.clear()


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield factory
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    async def _make_user(nickname=None, location=None, password="secret123", **fields):
        counter["n"] += 1
        nickname = nickname or f"user{counter['n']}"
        user = User(
            username=fields.pop("username", nickname.lower()),
            password_hash=hash_password(password),
            nickname=nickname,
            birth_date=fields.pop("birth_date", date(1995, 5, 17)),
            gender=fields.pop("gender", "female"),
            location=location,
            **fields,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    return _make_user


@pytest_asyncio.fixture
async def client(session_factory):
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
