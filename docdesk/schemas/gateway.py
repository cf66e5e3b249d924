"""Pydantic schemas for the generic SQL query proxy wire format."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    host: str = ""
    port: int = 3306
    database: str = ""
    username: str = ""
    password: str = ""
    ssl: str = "preferred"

    @property
    def is_complete(self) -> bool:
        return bool(self.host and self.database and self.username)


class QueryRequest(BaseModel):
    config: DatabaseConfig | None = None
    sql: str = ""
    params: list[Any] = Field(default_factory=list)


class QueryResult(BaseModel):
    success: bool
    data: list[dict[str, Any]] | None = None
    error: str | None = None
    affected_rows: int | None = Field(default=None, alias="affectedRows")
    insert_id: int | None = Field(default=None, alias="insertId")

    model_config = {"populate_by_name": True}


class ConnectionTestResult(BaseModel):
    success: bool
    message: str | None = None
    error: str | None = None
    server_info: str | None = None
