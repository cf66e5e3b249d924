"""
Payments per document.  ``pending_amount`` and ``payment_status`` are always
derived from the total and paid amounts; ``refunded`` is only set explicitly.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from docdesk.core.exceptions import ValidationFailedError
from docdesk.schemas.finance import (InstallmentCreate, Payment, PaymentCreate,
                                     PaymentStatus, PaymentUpdate)
from docdesk.stores.base import EntityStore

logger = logging.getLogger(__name__)


def derive_amounts(payment: Payment) -> Payment:
    if payment.paid_amount > payment.total_amount:
        raise ValidationFailedError("Paid amount cannot exceed the total amount")
    pending = payment.total_amount - payment.paid_amount
    if payment.payment_status == PaymentStatus.REFUNDED:
        status = PaymentStatus.REFUNDED
    elif payment.paid_amount == 0:
        status = PaymentStatus.PENDING
    elif pending > 0:
        status = PaymentStatus.PARTIAL
    else:
        status = PaymentStatus.COMPLETED
    return payment.model_copy(update={"pending_amount": pending, "payment_status": status})


class PaymentStore(EntityStore[Payment]):
    model = Payment
    name = "Payment"
    table = "payments"
    id_prefix = "PAY"
    columns = (
        "document_id",
        "agreement_value",
        "consideration_amount",
        "dhc_amount",
        "total_amount",
        "paid_amount",
        "pending_amount",
        "payment_status",
        "payment_method",
        "payment_date",
        "challan_number",
        "created_at",
        "updated_at",
    )
    ref_columns = frozenset({"document_id"})
    natural_key = ("document_id",)

    def build(self, partial: dict[str, Any]) -> Payment:
        return derive_amounts(super().build(partial))

    def on_update(self, current: Payment, merged: Payment) -> Payment:
        return derive_amounts(merged)

    def by_document(self, document_id: str) -> list[Payment]:
        return [p for p in self._items.values() if p.document_id == document_id]

    async def create_payment(self, data: PaymentCreate) -> Payment:
        return await self.create(data.model_dump())

    async def update_payment(self, id: str, data: PaymentUpdate) -> Payment:
        return await self.update(id, data.model_dump(exclude_unset=True))

    async def record_payment(self, id: str, data: InstallmentCreate) -> Payment:
        """Add an installment to the paid amount."""
        payment = self.require(id)
        changes: dict[str, Any] = {"paid_amount": payment.paid_amount + Decimal(data.amount)}
        if data.payment_method is not None:
            changes["payment_method"] = data.payment_method
        changes["payment_date"] = data.payment_date or self.ctx.now().date()
        payment = await self.update(id, changes)
        logger.info("Recorded %s against payment %s", data.amount, id)
        return payment
