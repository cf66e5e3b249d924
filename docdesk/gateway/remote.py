"""
HTTP client for the generic SQL query proxy.

One POST per statement, no retry.  ``execute`` raises the typed errors the
stores rely on; ``query`` keeps the wire contract and never raises.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from docdesk.core.exceptions import DocDeskError, QueryFailedError, UnavailableError
from docdesk.schemas.gateway import (ConnectionTestResult, DatabaseConfig,
                                     QueryResult)

logger = logging.getLogger(__name__)


class RemoteGateway:
    def __init__(
        self,
        base_url: str,
        config: DatabaseConfig,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.config = config
        self.connected = False
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    async def test_connection(self) -> bool:
        """Ask the proxy to connect; ``connected`` is set only when it answers success."""
        self.connected = False
        if not self.config.is_complete:
            logger.warning("Remote database config is incomplete, staying local")
            return False
        try:
            response = await self._client.post(
                self._url("test-db-connection"),
                json=self.config.model_dump(),
            )
        except httpx.HTTPError as e:
            logger.warning("Connection test to %s failed: %s", self.base_url, e)
            return False
        if response.is_error:
            logger.warning("Connection test returned HTTP %s", response.status_code)
            return False
        try:
            body = ConnectionTestResult.model_validate(response.json())
        except (ValueError, ValidationError):
            logger.warning("Connection test got an unreadable reply: %.200s", response.text)
            return False
        self.connected = body.success
        if self.connected:
            logger.info("Connected to %s@%s", self.config.database, self.config.host)
        return self.connected

    async def execute(self, sql: str, params: list[Any] | None = None) -> QueryResult:
        """Run one statement through the proxy or raise a typed error."""
        if not self.connected:
            raise UnavailableError("Database not connected")
        try:
            response = await self._client.post(
                self._url("db-query"),
                json={
                    "config": self.config.model_dump(),
                    "sql": sql,
                    "params": params or [],
                },
            )
        except httpx.HTTPError as e:
            raise UnavailableError(f"Query proxy unreachable: {e}") from e
        if response.is_error:
            raise UnavailableError(f"Query failed: {response.text}")
        try:
            result = QueryResult.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise UnavailableError(f"Unreadable reply from query proxy: {response.text[:200]}") from e
        if not result.success:
            raise QueryFailedError(result.error or "Unknown database error")
        return result

    async def query(self, sql: str, params: list[Any] | None = None) -> QueryResult:
        try:
            return await self.execute(sql, params)
        except DocDeskError as e:
            return QueryResult(success=False, error=e.message)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
