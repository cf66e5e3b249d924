"""Builders, matched for linking by normalised name."""

from __future__ import annotations

from docdesk.schemas.document import Builder, BuilderCreate, BuilderUpdate
from docdesk.stores.base import EntityStore


def normalise_name(name: str) -> str:
    return " ".join(name.split()).casefold()


class BuilderStore(EntityStore[Builder]):
    model = Builder
    name = "Builder"
    table = "builders"
    id_prefix = "BLD"
    columns = (
        "name",
        "contact_person",
        "phone",
        "email",
        "address",
        "registration_number",
        "documents",
        "created_at",
    )
    json_columns = frozenset({"documents"})
    natural_key = ("name",)

    def by_name(self, name: str) -> Builder | None:
        """Exact match ignoring case and repeated whitespace."""
        key = normalise_name(name)
        return next((b for b in self._items.values() if normalise_name(b.name) == key), None)

    def search(self, text: str) -> list[Builder]:
        needle = text.strip().casefold()
        return [b for b in self._items.values() if needle in b.name.casefold()]

    async def create_builder(self, data: BuilderCreate) -> Builder:
        return await self.create(data.model_dump())

    async def update_builder(self, id: str, data: BuilderUpdate) -> Builder:
        return await self.update(id, data.model_dump(exclude_unset=True))

    async def add_document(self, id: str, document_id: str) -> Builder:
        builder = self.require(id)
        if document_id in builder.documents:
            return builder
        return await self.update(id, {"documents": [*builder.documents, document_id]})
