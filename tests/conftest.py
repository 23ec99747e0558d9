import os

# Настройки читаются при импорте core.config, поэтому окружение задаём до импортов приложения
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["AUTH0_ALGORITHM"] = "HS256"
os.environ["AUTH0_CLIENT_SECRET"] = "test-secret"
os.environ["DEFAULT_ADMIN_EMAIL"] = "admin@kiarutara.test"
os.environ.pop("AUTH0_DOMAIN", None)
os.environ.pop("AUTH0_AUDIENCE", None)

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.database import build_engine, get_db
from main import app
from models.base import Base
from models.event import Event
from models.event_like import EventLike
from models.user import User


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def make_token(sub: str, **claims) -> str:
    return jwt.encode({"sub": sub, **claims}, "test-secret", algorithm="HS256")


def auth_headers(sub: str, **claims) -> dict:
    return {"Authorization": f"Bearer {make_token(sub, **claims)}"}


async def create_user(factory, user_id: str, role: str = "user") -> str:
    async with factory() as session:
        session.add(User(id=user_id, role=role))
        await session.commit()
    return user_id


async def create_event(factory, likes: int = 0, title: str = "Mwanza Live") -> str:
    async with factory() as session:
        event = Event(title=title, date="2026-11-14", location="Mwanza", likes=likes)
        session.add(event)
        await session.commit()
        return event.id


async def likes_of(factory, event_id: str) -> int:
    async with factory() as session:
        res = await session.execute(select(Event.likes).where(Event.id == event_id))
        return res.scalar_one()


async def like_rows(factory, event_id: str, user_id: str = None) -> int:
    stmt = select(func.count(EventLike.id)).where(EventLike.event_id == event_id)
    if user_id is not None:
        stmt = stmt.where(EventLike.user_id == user_id)
    async with factory() as session:
        res = await session.execute(stmt)
        return res.scalar_one()
