"""Tests for the SQL query proxy: placeholder binding and the HTTP endpoints."""

import ssl

import pytest

from docdesk.core.config import settings
from docdesk.db import session
from docdesk.db.proxy import bind_placeholders, run_query, split_statements
from docdesk.schemas.gateway import DatabaseConfig


def _query(config, sql, params=None):
    return {"config": config.model_dump(), "sql": sql, "params": params or []}


def test_bind_placeholders():
    sql, count = bind_placeholders("SELECT * FROM users WHERE email = ? AND role = ?")
    assert sql == "SELECT * FROM users WHERE email = :p0 AND role = :p1"
    assert count == 2


def test_placeholders_inside_literals_are_kept():
    sql, count = bind_placeholders("SELECT '?', 'it''s ?' FROM t WHERE a = ?")
    assert sql == "SELECT '?', 'it''s ?' FROM t WHERE a = :p0"
    assert count == 1


def test_colons_are_escaped():
    sql, count = bind_placeholders("SELECT '09:30' AS t, x::text FROM y")
    assert sql == "SELECT '09\\:30' AS t, x:\\:text FROM y"
    assert count == 0


def test_split_statements():
    assert split_statements("SELECT 1; SELECT ';' ;  ;") == ["SELECT 1", "SELECT ';'"]


@pytest.mark.asyncio
async def test_run_query_reports_insert_and_rows(sqlite_engine):
    result = await run_query(
        sqlite_engine,
        "INSERT INTO builders (name, contact_person, phone, address) VALUES (?, ?, ?, ?)",
        ["B", "", "", ""],
    )
    assert result.success
    assert result.insert_id == 1
    assert result.affected_rows == 1

    result = await run_query(sqlite_engine, "SELECT id, name FROM builders WHERE name = ?", ["B"])
    assert result.data == [{"id": 1, "name": "B"}]


@pytest.mark.asyncio
async def test_run_query_parameter_mismatch(sqlite_engine):
    result = await run_query(sqlite_engine, "SELECT * FROM builders WHERE id = ? AND name = ?", [1])
    assert not result.success
    assert "expected 2 parameters, got 1" in result.error


@pytest.mark.asyncio
async def test_run_query_multi_statement(sqlite_engine):
    result = await run_query(
        sqlite_engine,
        "INSERT INTO builders (name, contact_person, phone, address) VALUES ('X', '', '', '');"
        "SELECT COUNT(*) AS n FROM builders",
    )
    assert result.success
    assert result.data == [{"n": 1}]


# ── HTTP ────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_db_query_endpoint(async_client, proxy_engine, db_config):
    resp = await async_client.post("/api/db-query", json=_query(db_config, "SELECT 1 AS one"))
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert resp.json()["data"] == [{"one": 1}]

    resp = await async_client.post(
        "/api/db-query",
        json=_query(db_config, "INSERT INTO customers (name, phone, address) VALUES (?, ?, ?)", ["A", "123", ""]),
    )
    body = resp.json()
    assert body["insertId"] == 1
    assert body["affectedRows"] == 1


@pytest.mark.asyncio
async def test_db_query_errors(async_client, proxy_engine, db_config):
    resp = await async_client.post("/api/db-query", json={"sql": "SELECT 1"})
    assert resp.json() == {
        "success": False,
        "data": None,
        "error": "Missing required parameters",
        "affectedRows": None,
        "insertId": None,
    }

    config = db_config.model_dump()
    config["username"] = ""
    resp = await async_client.post("/api/db-query", json={"config": config, "sql": "SELECT 1"})
    assert resp.json()["error"] == "Missing required database parameters"

    resp = await async_client.post("/api/db-query", json=_query(db_config, "SELECT * FROM missing_table"))
    assert resp.status_code == 200
    assert resp.json()["success"] is False
    assert resp.json()["error"].startswith("Query failed:")


@pytest.mark.asyncio
async def test_connection_and_init_endpoints(async_client, proxy_engine, db_config):
    resp = await async_client.post("/api/test-db-connection", json=db_config.model_dump())
    assert resp.json()["success"] is True
    assert resp.json()["server_info"] == "db.test:3306/docdesk"

    resp = await async_client.post("/api/test-db-connection", json={"host": "db.test"})
    assert resp.json()["success"] is False

    resp = await async_client.post("/api/db-init", json=db_config.model_dump())
    assert resp.json()["success"] is True


def test_connect_args_follow_ssl_mode(db_config):
    assert session.connect_args(db_config) == {}
    args = session.connect_args(db_config.model_copy(update={"ssl": "required"}))
    assert args["ssl"].verify_mode == ssl.CERT_NONE
    assert args["ssl"].check_hostname is False


@pytest.mark.asyncio
async def test_engine_cache_is_bounded(monkeypatch):
    monkeypatch.setattr(settings, "DB_ENGINE_CACHE_SIZE", 2)
    configs = [
        DatabaseConfig(host=f"db{i}.test", database="docdesk", username="docdesk")
        for i in range(3)
    ]
    try:
        first = session.get_engine(configs[0])
        assert session.get_engine(configs[0]) is first
        session.get_engine(configs[1])
        # first is now the most recently used
        session.get_engine(configs[0])
        session.get_engine(configs[2])
        hosts = [key[0] for key in session._engines]
        assert hosts == ["db0.test", "db2.test"]
        assert session.get_engine(configs[0]) is first

        secure = session.get_engine(configs[0].model_copy(update={"ssl": "required"}))
        assert secure is not first
        assert len(session._engines) == 2
    finally:
        await session.dispose_engines()
    assert not session._engines
