"""Customers, keyed for linking by exact phone number."""

from __future__ import annotations

from docdesk.core.exceptions import ConflictError
from docdesk.schemas.document import Customer, CustomerCreate, CustomerUpdate
from docdesk.stores.base import EntityStore


class CustomerStore(EntityStore[Customer]):
    model = Customer
    name = "Customer"
    table = "customers"
    id_prefix = "CUST"
    columns = ("name", "phone", "email", "address", "documents", "created_at")
    json_columns = frozenset({"documents"})
    natural_key = ("phone",)

    def check(self, item: Customer, existing_id: str | None = None) -> None:
        other = self.by_phone(item.phone)
        if other is not None and other.id != existing_id:
            raise ConflictError(f"A customer with phone {item.phone} already exists")

    def by_phone(self, phone: str) -> Customer | None:
        return next((c for c in self._items.values() if c.phone == phone), None)

    def by_email(self, email: str) -> Customer | None:
        email = email.strip().lower()
        return next(
            (c for c in self._items.values() if c.email and c.email.lower() == email), None
        )

    async def create_customer(self, data: CustomerCreate) -> Customer:
        return await self.create(data.model_dump())

    async def update_customer(self, id: str, data: CustomerUpdate) -> Customer:
        return await self.update(id, data.model_dump(exclude_unset=True))

    async def add_document(self, id: str, document_id: str) -> Customer:
        customer = self.require(id)
        if document_id in customer.documents:
            return customer
        return await self.update(id, {"documents": [*customer.documents, document_id]})
