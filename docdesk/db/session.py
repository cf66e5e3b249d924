"""
Async SQLAlchemy engine registry for the query proxy (aiomysql driver).

One engine per distinct connection config, created on first use.  The cache
is bounded; the least recently used engine is disposed when it overflows.
"""

from __future__ import annotations

import asyncio
import logging
import ssl
from collections import OrderedDict
from typing import Any

from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from docdesk.core.config import settings
from docdesk.db.base import Base
from docdesk.schemas.gateway import DatabaseConfig

logger = logging.getLogger(__name__)

_engines: OrderedDict[tuple, AsyncEngine] = OrderedDict()
_disposals: set[asyncio.Task] = set()


def database_url(config: DatabaseConfig, driver: str | None = None) -> URL:
    drivername = driver or settings.DB_DRIVER
    query = {"charset": "utf8mb4"} if drivername.startswith("mysql") else {}
    return URL.create(
        drivername,
        username=config.username,
        password=config.password or None,
        host=config.host,
        port=config.port,
        database=config.database,
        query=query,
    )


def connect_args(config: DatabaseConfig) -> dict[str, Any]:
    """``ssl: required`` encrypts without verifying the server certificate."""
    if config.ssl != "required":
        return {}
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return {"ssl": context}


def _retire(engine: AsyncEngine) -> None:
    task = asyncio.get_running_loop().create_task(engine.dispose())
    _disposals.add(task)
    task.add_done_callback(_disposals.discard)


def get_engine(config: DatabaseConfig) -> AsyncEngine:
    """Return the cached engine for *config*, creating it on first use."""
    key = (config.host, config.port, config.database, config.username, config.password, config.ssl)
    engine = _engines.get(key)
    if engine is not None:
        _engines.move_to_end(key)
        return engine
    engine_args: dict[str, Any] = {"echo": False, "pool_pre_ping": True}
    if settings.DB_DRIVER.startswith("mysql"):
        engine_args.update({"pool_size": 5, "max_overflow": 10, "pool_recycle": 300})
    engine = create_async_engine(
        database_url(config), connect_args=connect_args(config), **engine_args
    )
    _engines[key] = engine
    logger.info("Engine created for %s@%s:%s", config.database, config.host, config.port)
    while len(_engines) > settings.DB_ENGINE_CACHE_SIZE:
        (host, port, database, *_), evicted = _engines.popitem(last=False)
        logger.info("Engine for %s@%s:%s evicted", database, host, port)
        _retire(evicted)
    return engine


async def create_schema(engine: AsyncEngine) -> None:
    # Ensure all models are imported so metadata.create_all can see them
    from docdesk.models import attendance, document, finance, salary, task, user  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")


async def dispose_engines() -> None:
    engines = list(_engines.values())
    _engines.clear()
    for engine in engines:
        await engine.dispose()
    if _disposals:
        await asyncio.gather(*_disposals)
