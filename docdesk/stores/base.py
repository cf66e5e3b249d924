"""
Generic keyed entity store.

Every entity collection (documents, tasks, salary records...) is an
``EntityStore`` subclass that declares its table mapping.  In local mode the
dictionary is the source of truth; in remote mode each write goes through the
query gateway and the single affected row is read back into the cache.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from docdesk.core.context import AppContext
from docdesk.core.exceptions import NotFoundError, UnavailableError, ValidationFailedError
from docdesk.schemas.gateway import QueryResult

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def db_key(value: Any) -> Any:
    """Remote ids are auto-increment integers carried around as strings."""
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return value


def intersect(items: list[ModelT], subset: list[ModelT]) -> list[ModelT]:
    """Entries of *items* whose id also appears in *subset*, order kept."""
    keep = {s.id for s in subset}  # type: ignore[attr-defined]
    return [i for i in items if i.id in keep]  # type: ignore[attr-defined]


class EntityStore(Generic[ModelT]):
    model: type[ModelT]
    name: str = "Entity"
    table: str = ""
    id_prefix: str = ""
    # Writable columns, ``id`` excluded
    columns: tuple[str, ...] = ()
    json_columns: frozenset[str] = frozenset()
    bool_columns: frozenset[str] = frozenset()
    # Columns holding another entity's id
    ref_columns: frozenset[str] = frozenset()
    # Columns that find a freshly inserted row when the proxy reports no id
    natural_key: tuple[str, ...] = ()

    def __init__(self, ctx: AppContext) -> None:
        self.ctx = ctx
        self._items: dict[str, ModelT] = {}
        self._seq = 0
        self._in_flight = 0

    # ── Reads ───────────────────────────────────────────────────────
    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    @property
    def state(self) -> str:
        return "loading" if self.loading else "idle"

    def __len__(self) -> int:
        return len(self._items)

    def list(self) -> list[ModelT]:
        return list(self._items.values())

    def get(self, id: str) -> ModelT | None:
        return self._items.get(id)

    def require(self, id: str) -> ModelT:
        item = self._items.get(id)
        if item is None:
            raise NotFoundError(f"{self.name} {id} not found")
        return item

    # ── Hooks ───────────────────────────────────────────────────────
    def build(self, partial: dict[str, Any]) -> ModelT:
        """Turn a partial payload into a full record; subclasses fill defaults."""
        return self.model.model_validate(partial)

    def check(self, item: ModelT, existing_id: str | None = None) -> None:
        """Uniqueness rules; raise ``ConflictError``.  Called before every write."""

    def on_update(self, current: ModelT, merged: ModelT) -> ModelT:
        """Enforce transitions and stamp derived fields on update."""
        return merged

    # ── Row mapping ─────────────────────────────────────────────────
    def to_row(self, item: ModelT) -> dict[str, Any]:
        data = item.model_dump(mode="json")
        row: dict[str, Any] = {}
        for col in self.columns:
            value = data.get(col)
            if col in self.json_columns:
                value = None if value is None else json.dumps(value)
            elif col in self.bool_columns:
                value = 1 if value else 0
            elif col in self.ref_columns:
                value = db_key(value)
            row[col] = value
        return row

    def from_row(self, row: dict[str, Any]) -> ModelT:
        data = dict(row)
        data["id"] = str(data["id"])
        for col in self.json_columns:
            value = data.get(col)
            if isinstance(value, str):
                value = json.loads(value) if value else None
            if value is None:
                # fall back to the model default
                data.pop(col, None)
            else:
                data[col] = value
        for col in self.ref_columns:
            if data.get(col) is not None:
                data[col] = str(data[col])
        return self.model.model_validate(data)

    # ── Gateway plumbing ────────────────────────────────────────────
    async def _run(self, sql: str, params: list[Any] | None = None) -> QueryResult:
        if self.ctx.gateway is None:
            raise UnavailableError("Remote store is not configured")
        self._in_flight += 1
        try:
            return await self.ctx.gateway.execute(sql, params or [])
        finally:
            self._in_flight -= 1

    async def _fetch(self, id: str) -> ModelT:
        result = await self._run(f"SELECT * FROM {self.table} WHERE id = ?", [db_key(id)])
        if not result.data:
            raise NotFoundError(f"{self.name} {id} not found")
        item = self.from_row(result.data[0])
        self._items[item.id] = item
        return item

    async def _fetch_inserted(self, row: dict[str, Any]) -> ModelT:
        """Read back the newest row matching the natural key of an insert."""
        if not self.natural_key:
            raise UnavailableError(f"Insert into {self.table} returned no id")
        clauses: list[str] = []
        params: list[Any] = []
        for col in self.natural_key:
            if row[col] is None:
                clauses.append(f"{col} IS NULL")
            else:
                clauses.append(f"{col} = ?")
                params.append(row[col])
        result = await self._run(
            f"SELECT * FROM {self.table} WHERE {' AND '.join(clauses)} ORDER BY id DESC LIMIT 1",
            params,
        )
        if not result.data:
            raise UnavailableError(f"Inserted {self.name.lower()} could not be read back")
        item = self.from_row(result.data[0])
        self._items[item.id] = item
        return item

    def _next_id(self) -> str:
        while True:
            self._seq += 1
            candidate = f"{self.id_prefix}{self._seq:03d}"
            if candidate not in self._items:
                return candidate

    def _stamp(self, data: dict[str, Any], *fields: str) -> None:
        now = self.ctx.now()
        for field in fields:
            if field in self.model.model_fields:
                data.setdefault(field, now)

    # ── Lifecycle ───────────────────────────────────────────────────
    async def fetch_all(self) -> dict[str, ModelT]:
        """Read the whole remote table without touching the cache."""
        result = await self._run(f"SELECT * FROM {self.table} ORDER BY id")
        items: dict[str, ModelT] = {}
        for row in result.data or []:
            try:
                item = self.from_row(row)
            except (ValueError, ValidationError) as e:
                raise UnavailableError(f"Unreadable row in {self.table}: {e}") from e
            items[item.id] = item
        return items

    def replace(self, items: dict[str, ModelT]) -> None:
        self._items = dict(items)
        logger.info("Loaded %d %s rows", len(self._items), self.table)

    async def load(self) -> list[ModelT]:
        """Replace the cache with the remote table; a no-op in local mode."""
        if self.ctx.remote:
            self.replace(await self.fetch_all())
        return self.list()

    async def create(self, partial: dict[str, Any]) -> ModelT:
        data = dict(partial)
        self._stamp(data, "created_at", "updated_at")
        try:
            item = self.build(data)
        except ValidationError as e:
            raise ValidationFailedError(validation_message(e)) from e
        self.check(item)

        if self.ctx.remote:
            row = self.to_row(item)
            cols = list(row)
            sql = (
                f"INSERT INTO {self.table} ({', '.join(cols)}) "
                f"VALUES ({', '.join('?' for _ in cols)})"
            )
            result = await self._run(sql, [row[c] for c in cols])
            if result.insert_id:
                item = await self._fetch(str(result.insert_id))
            else:
                item = await self._fetch_inserted(row)
        else:
            item = item.model_copy(update={"id": self._next_id()})
            self._items[item.id] = item
        logger.info("%s %s created", self.name, item.id)
        return item

    async def update(self, id: str, partial: dict[str, Any]) -> ModelT:
        current = self.require(id)
        changes = dict(partial)
        if "updated_at" in self.model.model_fields:
            changes["updated_at"] = self.ctx.now()
        try:
            merged = self.model.model_validate({**current.model_dump(), **changes, "id": id})
        except ValidationError as e:
            raise ValidationFailedError(validation_message(e)) from e
        merged = self.on_update(current, merged)
        self.check(merged, existing_id=id)

        if self.ctx.remote:
            old, new = self.to_row(current), self.to_row(merged)
            changed = [c for c in self.columns if new[c] != old[c]]
            if changed:
                sql = (
                    f"UPDATE {self.table} SET {', '.join(f'{c} = ?' for c in changed)} "
                    "WHERE id = ?"
                )
                await self._run(sql, [new[c] for c in changed] + [db_key(id)])
                merged = await self._fetch(id)
        else:
            self._items[id] = merged
        return merged

    async def delete(self, id: str) -> None:
        self.require(id)
        if self.ctx.remote:
            result = await self._run(f"DELETE FROM {self.table} WHERE id = ?", [db_key(id)])
            if not result.affected_rows:
                self._items.pop(id, None)
                raise NotFoundError(f"{self.name} {id} not found")
        self._items.pop(id, None)
        logger.info("%s %s deleted", self.name, id)
