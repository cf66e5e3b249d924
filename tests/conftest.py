"""
Shared test fixtures for the DocDesk test suite.

Stores run against a frozen clock; the SQL proxy runs against an in-memory
aiosqlite engine (StaticPool) standing in for MySQL.
"""

import os
from datetime import datetime, timedelta
from typing import AsyncGenerator

import pytest

# Override environment BEFORE importing application modules
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["SECRET_KEY"] = "test-secret-key-for-the-docdesk-suite"
os.environ["REMOTE_DB_ENABLED"] = "false"

import httpx
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from docdesk.api.v1.deps import get_current_active_user, get_engine_factory
from docdesk.core.config import settings
from docdesk.core.context import AppContext
from docdesk.db.session import create_schema
from docdesk.gateway.remote import RemoteGateway
from docdesk.main import app
from docdesk.schemas.gateway import DatabaseConfig
from docdesk.schemas.user import Role, User
from docdesk.stores.registry import Stores

DB_CONFIG = DatabaseConfig(
    host="db.test",
    port=3306,
    database="docdesk",
    username="docdesk",
    password="secret",
)


class FrozenClock:
    """Callable clock that only moves when a test says so."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def set(self, value: datetime) -> None:
        self.current = value

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def db_config() -> DatabaseConfig:
    return DB_CONFIG.model_copy()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 3, 10, 9, 0))


@pytest.fixture
def ctx(clock: FrozenClock) -> AppContext:
    return AppContext(settings=settings, clock=clock)


@pytest.fixture
def stores(ctx: AppContext) -> Stores:
    """Fresh local-mode stores, also installed on the app."""
    container = Stores(ctx)
    app.state.stores = container
    return container


@pytest.fixture
def admin() -> User:
    return _ADMIN


@pytest.fixture
async def async_client(stores: Stores) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ── Proxy database ──────────────────────────────────────────────────
@pytest.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def proxy_engine(sqlite_engine: AsyncEngine):
    """Route every proxy request to the sqlite engine."""
    app.dependency_overrides[get_engine_factory] = lambda: (lambda _config: sqlite_engine)
    yield sqlite_engine
    app.dependency_overrides.pop(get_engine_factory, None)


@pytest.fixture
async def remote_stores(proxy_engine, clock: FrozenClock) -> AsyncGenerator[Stores, None]:
    """Remote-mode stores whose gateway talks to the in-process proxy."""
    client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    gateway = RemoteGateway("http://test/api", DB_CONFIG, client=client)
    assert await gateway.test_connection()
    container = Stores(AppContext(settings=settings, gateway=gateway, clock=clock))
    app.state.stores = container
    yield container
    await client.aclose()


@pytest.fixture
async def php_stores(proxy_engine, clock: FrozenClock) -> AsyncGenerator[Stores, None]:
    """Remote-mode stores behind a proxy that never reports ``insertId``."""
    inner = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    async def forward(request: httpx.Request) -> httpx.Response:
        reply = await inner.post(
            request.url.path,
            content=request.content,
            headers={"content-type": "application/json"},
        )
        body = reply.json()
        body.pop("insertId", None)
        return httpx.Response(reply.status_code, json=body)

    client = AsyncClient(transport=httpx.MockTransport(forward))
    gateway = RemoteGateway("http://proxy.test/api", DB_CONFIG, client=client)
    assert await gateway.test_connection()
    container = Stores(AppContext(settings=settings, gateway=gateway, clock=clock))
    app.state.stores = container
    yield container
    await client.aclose()
    await inner.aclose()


# ── Auth Overrides ──────────────────────────────────────────────────
_ADMIN = User(id="USR900", email="admin@example.com", name="Test Admin", role=Role.MAIN_ADMIN)


async def _override_get_current_active_user() -> User:
    return _ADMIN


app.dependency_overrides[get_current_active_user] = _override_get_current_active_user
