"""
Generic SQL query proxy, the HTTP side of the remote store.

The endpoints carry no auth; expose them only on the network the database
lives on.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from docdesk.api.v1.deps import get_engine_factory
from docdesk.db.proxy import run_query
from docdesk.db.session import create_schema
from docdesk.schemas.gateway import (ConnectionTestResult, DatabaseConfig,
                                     QueryRequest, QueryResult)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["proxy"])

EngineFactory = Callable[[DatabaseConfig], AsyncEngine]


@router.post("/db-query", response_model=QueryResult, response_model_by_alias=True)
async def db_query(
    body: QueryRequest,
    engines: EngineFactory = Depends(get_engine_factory),
) -> QueryResult:
    if body.config is None or not body.sql.strip():
        return QueryResult(success=False, error="Missing required parameters")
    if not body.config.is_complete:
        return QueryResult(success=False, error="Missing required database parameters")
    return await run_query(engines(body.config), body.sql, body.params)


@router.post("/test-db-connection", response_model=ConnectionTestResult)
async def test_db_connection(
    config: DatabaseConfig,
    engines: EngineFactory = Depends(get_engine_factory),
) -> ConnectionTestResult:
    if not config.is_complete:
        return ConnectionTestResult(success=False, error="Missing required database parameters")
    result = await run_query(engines(config), "SELECT 1 AS test")
    if not result.success:
        return ConnectionTestResult(success=False, error=result.error)
    return ConnectionTestResult(
        success=True,
        message="Connection successful",
        server_info=f"{config.host}:{config.port}/{config.database}",
    )


@router.post("/db-init", response_model=ConnectionTestResult)
async def db_init(
    config: DatabaseConfig,
    engines: EngineFactory = Depends(get_engine_factory),
) -> ConnectionTestResult:
    """Create every table that does not exist yet."""
    if not config.is_complete:
        return ConnectionTestResult(success=False, error="Missing required database parameters")
    try:
        await create_schema(engines(config))
    except SQLAlchemyError as e:
        logger.warning("Schema creation failed: %s", e)
        return ConnectionTestResult(success=False, error=f"Query failed: {getattr(e, 'orig', e)}")
    return ConnectionTestResult(success=True, message="Database tables initialised")
