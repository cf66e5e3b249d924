"""
DocDesk application entry point.

This is the **only** file that assembles the app.  Business logic lives in
the `stores/`, `services/` and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docdesk.api.v1.api import api_router
from docdesk.api.v1.endpoints import proxy
from docdesk.core.config import (Settings, load_persisted_settings,
                                 resolve_database_config, settings)
from docdesk.core.context import AppContext
from docdesk.core.exceptions import DocDeskError, register_exception_handlers
from docdesk.db.session import dispose_engines
from docdesk.gateway.remote import RemoteGateway
from docdesk.stores.registry import Stores, build_stores

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


async def build_context(conf: Settings, client: httpx.AsyncClient | None = None) -> AppContext:
    """Read settings once; connect the gateway when credentials exist."""
    persisted = load_persisted_settings(conf.SETTINGS_FILE)
    db_config = resolve_database_config(conf, persisted)
    if db_config is None:
        return AppContext(settings=conf)
    gateway = RemoteGateway(
        conf.QUERY_PROXY_URL, db_config, client=client, timeout=conf.QUERY_TIMEOUT_SECONDS
    )
    if not await gateway.test_connection():
        logger.warning("Remote database unavailable, falling back to local mode")
    return AppContext(settings=conf, gateway=gateway)


async def start_stores(ctx: AppContext) -> Stores:
    """Build the stores, load them and make sure an admin exists.  Never raises
    for remote trouble: an unreachable or broken database leaves local mode."""
    stores = build_stores(ctx)
    await stores.load_all()
    try:
        await stores.users.seed_admin(ctx.settings)
    except DocDeskError as e:
        logger.error("Could not create the default admin: %s", e.message)
    return stores


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    ctx = await build_context(settings)
    app.state.stores = await start_stores(ctx)
    logger.info("🚀 %s v%s started in %s mode", settings.PROJECT_NAME, settings.VERSION, ctx.mode)
    yield
    if ctx.gateway is not None:
        await ctx.gateway.aclose()
    await dispose_engines()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Document registration back office",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    application.include_router(api_router, prefix=settings.API_V1_PREFIX)
    # SQL query proxy used by remote-mode gateways
    application.include_router(proxy.router, prefix=settings.PROXY_PREFIX)

    return application


app = create_app()
