"""Pytest conftest: test settings, a throwaway database and app overrides."""
import os
import sys
from pathlib import Path
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, List, Optional

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    # Insert at front so local package imports resolve
    sys.path.insert(0, str(REPO_ROOT))

# Settings are read once at import time
os.environ["TESTING"] = "true"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402

import eventhub.models  # noqa: E402,F401
from eventhub import crud  # noqa: E402
from eventhub.api import deps  # noqa: E402
from eventhub.celery_app import celery_app  # noqa: E402
from eventhub.database import Base  # noqa: E402
from eventhub.main import app  # noqa: E402
from eventhub.models.event import Event  # noqa: E402
from eventhub.schemas.user import AdminCreate  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "s3cret-pass"


class FakeRedis:
    """In-memory stand-in for the session store."""

    def __init__(self) -> None:
        self.store: Dict[str, Any] = {}

    async def get(self, key: str) -> Optional[Any]:
        return self.store.get(key)

    async def set(self, key: str, value: Any, ex: Any = None) -> bool:
        self.store[key] = value
        return True

    async def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self.store.pop(key, None) is not None)


@pytest.fixture  # type: ignore[misc]
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'eventhub.db'}", poolclass=NullPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture  # type: ignore[misc]
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture  # type: ignore[misc]
async def db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture  # type: ignore[misc]
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture(autouse=True)  # type: ignore[misc]
def sent_tasks(monkeypatch: pytest.MonkeyPatch) -> List[Dict[str, Any]]:
    """Record Celery publishes instead of talking to a broker."""
    calls: List[Dict[str, Any]] = []

    def fake_send_task(name: str, args: Any = None, kwargs: Any = None, **options: Any) -> None:
        calls.append({"name": name, "args": list(args or []), "kwargs": kwargs or {}})

    monkeypatch.setattr(celery_app, "send_task", fake_send_task)
    return calls


@pytest.fixture  # type: ignore[misc]
def event_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[Event]]:
    async def make_event(**overrides: Any) -> Event:
        values: Dict[str, Any] = {
            "title": "Spring Fest",
            "description": "Music and food on the main lawn",
            "event_type": "College Fest",
            "date": "2026-04-12",
            "time": "18:00",
            "location": "Main Campus",
            "price": "Free",
            "capacity": 100,
            "registered": 0,
        }
        values.update(overrides)
        async with session_factory() as session:
            return await crud.event.create_event(session, values)

    return make_event


@pytest.fixture  # type: ignore[misc]
async def client(
    session_factory: async_sessionmaker[AsyncSession], fake_redis: FakeRedis
) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_session_factory] = lambda: session_factory
    app.dependency_overrides[deps.get_redis_client] = lambda: fake_redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture  # type: ignore[misc]
async def admin_headers(
    client: AsyncClient, session_factory: async_sessionmaker[AsyncSession]
) -> Dict[str, str]:
    async with session_factory() as session:
        await crud.user.create(
            session, obj_in=AdminCreate(email=ADMIN_EMAIL, password=ADMIN_PASSWORD)
        )
    response = await client.post(
        "/api/v1/auth/login",
        data={"username": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
