"""
Execution core of the generic SQL query proxy.

Statements arrive with positional ``?`` placeholders and a flat parameter
list; they are rewritten to SQLAlchemy named binds and run on the engine
resolved for the caller's connection config.
"""

from __future__ import annotations

import logging
import re
from decimal import Decimal
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from docdesk.schemas.gateway import QueryResult

logger = logging.getLogger(__name__)

_WORD = re.compile(r"\w")


def bind_placeholders(sql: str) -> tuple[str, int]:
    """
    Rewrite ``?`` outside quoted literals to ``:p0``, ``:p1``...

    Colons that would otherwise be read as named binds (inside literals or
    before an identifier) are escaped.  Returns the new SQL and the number
    of placeholders found.
    """
    out: list[str] = []
    quote: str | None = None
    count = 0
    i = 0
    while i < len(sql):
        ch = sql[i]
        if quote:
            if ch == quote:
                # doubled quote stays inside the literal
                if i + 1 < len(sql) and sql[i + 1] == quote:
                    out.append(ch * 2)
                    i += 2
                    continue
                quote = None
            elif ch == "\\" and i + 1 < len(sql):
                out.append(sql[i : i + 2])
                i += 2
                continue
            out.append("\\:" if ch == ":" else ch)
        elif ch in ("'", '"', "`"):
            quote = ch
            out.append(ch)
        elif ch == "?":
            out.append(f":p{count}")
            count += 1
        elif ch == ":" and i + 1 < len(sql) and _WORD.match(sql[i + 1]):
            out.append("\\:")
        else:
            out.append(ch)
        i += 1
    return "".join(out), count


def split_statements(sql: str) -> list[str]:
    """Split on ``;`` outside quoted literals, dropping empty statements."""
    parts: list[str] = []
    current: list[str] = []
    quote: str | None = None
    for ch in sql:
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == ";":
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


async def run_query(engine: AsyncEngine, sql: str, params: list[Any] | None = None) -> QueryResult:
    """Execute *sql* inside one transaction and shape the proxy response."""
    params = params or []
    statements = [sql] if params else split_statements(sql)
    if not statements:
        return QueryResult(success=False, error="Missing required parameters")

    data: list[dict[str, Any]] = []
    affected = 0
    insert_id: int | None = None
    try:
        async with engine.begin() as conn:
            for statement in statements:
                bound_sql, expected = bind_placeholders(statement)
                if expected != len(params):
                    return QueryResult(
                        success=False,
                        error=f"Query failed: expected {expected} parameters, got {len(params)}",
                    )
                result = await conn.execute(
                    text(bound_sql), {f"p{i}": value for i, value in enumerate(params)}
                )
                if result.returns_rows:
                    data = [dict(row) for row in result.mappings().all()]
                    affected = len(data)
                else:
                    data = []
                    affected = result.rowcount
                    if result.lastrowid:
                        insert_id = result.lastrowid
    except SQLAlchemyError as e:
        cause = getattr(e, "orig", None) or e
        logger.warning("Proxy query failed: %s", cause)
        return QueryResult(success=False, error=f"Query failed: {cause}")

    return QueryResult(
        success=True,
        data=jsonable_encoder(data, custom_encoder={Decimal: str}),
        affected_rows=affected,
        insert_id=insert_id,
    )
