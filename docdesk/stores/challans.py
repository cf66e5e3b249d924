"""Challans: unique numbers and the draft/submitted/approved/rejected flow."""

from __future__ import annotations

from docdesk.core.exceptions import ConflictError, ValidationFailedError
from docdesk.core.status import CHALLAN_TRANSITIONS, ChallanStatus, ensure_transition
from docdesk.schemas.finance import Challan, ChallanCreate, ChallanUpdate
from docdesk.schemas.user import User
from docdesk.stores.base import EntityStore


class ChallanStore(EntityStore[Challan]):
    model = Challan
    name = "Challan"
    table = "challans"
    id_prefix = "CHL"
    columns = (
        "document_id",
        "challan_number",
        "amount",
        "filled_by",
        "filled_at",
        "status",
        "notes",
        "created_at",
        "updated_at",
    )
    ref_columns = frozenset({"document_id"})
    natural_key = ("challan_number",)

    def check(self, item: Challan, existing_id: str | None = None) -> None:
        for other in self._items.values():
            if other.challan_number == item.challan_number and other.id != existing_id:
                raise ConflictError(f"Challan number {item.challan_number} already exists")

    def on_update(self, current: Challan, merged: Challan) -> Challan:
        ensure_transition("Challan", CHALLAN_TRANSITIONS, current.status, merged.status)
        return merged

    def by_document(self, document_id: str) -> list[Challan]:
        return [c for c in self._items.values() if c.document_id == document_id]

    async def create_challan(self, data: ChallanCreate, actor: User) -> Challan:
        payload = data.model_dump()
        payload.update(filled_by=actor.id, filled_at=self.ctx.now(), status=ChallanStatus.DRAFT)
        return await self.create(payload)

    async def update_challan(self, id: str, data: ChallanUpdate) -> Challan:
        return await self.update(id, data.model_dump(exclude_unset=True))

    async def update_status(self, id: str, status: ChallanStatus | str) -> Challan:
        try:
            target = ChallanStatus(status)
        except ValueError:
            raise ValidationFailedError(f"Unknown challan status '{status}'") from None
        return await self.update(id, {"status": target})
