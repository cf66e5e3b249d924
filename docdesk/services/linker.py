"""
Links a newly created document to its customer and builder, creating either
party when it does not exist yet.

The writes are independent and sequential: if the builder write fails the
customer link already made is kept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from docdesk.schemas.document import Builder, Customer, Document
from docdesk.stores.builders import BuilderStore
from docdesk.stores.customers import CustomerStore

logger = logging.getLogger(__name__)

BUILDER_PLACEHOLDERS = {
    "contact_person": "Contact Person",
    "phone": "+91 0000000000",
    "address": "Address not provided",
}


@dataclass
class LinkResult:
    customer: Customer | None = None
    builder: Builder | None = None
    customer_created: bool = False
    builder_created: bool = False


class PartyLinker:
    def __init__(self, customers: CustomerStore, builders: BuilderStore) -> None:
        self.customers = customers
        self.builders = builders

    async def link_customer(self, document: Document) -> tuple[Customer | None, bool]:
        if not (document.customer_name.strip() and document.customer_phone.strip()):
            return None, False
        customer = self.customers.by_phone(document.customer_phone)
        if customer is not None:
            return await self.customers.add_document(customer.id, document.id), False
        customer = await self.customers.create(
            {
                "name": document.customer_name,
                "phone": document.customer_phone,
                "email": document.customer_email,
                "address": document.property_details,
                "documents": [document.id],
            }
        )
        logger.info("Customer %s created from document %s", customer.id, document.id)
        return customer, True

    async def link_builder(self, document: Document) -> tuple[Builder | None, bool]:
        if not document.builder_name.strip():
            return None, False
        builder = self.builders.by_name(document.builder_name)
        if builder is not None:
            return await self.builders.add_document(builder.id, document.id), False
        builder = await self.builders.create(
            {
                "name": " ".join(document.builder_name.split()),
                **BUILDER_PLACEHOLDERS,
                "documents": [document.id],
            }
        )
        logger.info("Builder %s created from document %s", builder.id, document.id)
        return builder, True

    async def link(self, document: Document) -> LinkResult:
        customer, customer_created = await self.link_customer(document)
        builder, builder_created = await self.link_builder(document)
        return LinkResult(customer, builder, customer_created, builder_created)
