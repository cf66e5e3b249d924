"""
Payment and challan endpoints.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from docdesk.api.v1.deps import get_stores, require_permission
from docdesk.schemas.common import DeleteResponse
from docdesk.schemas.document import StatusChange
from docdesk.schemas.finance import (Challan, ChallanCreate, ChallanUpdate,
                                     InstallmentCreate, Payment, PaymentCreate,
                                     PaymentUpdate)
from docdesk.schemas.user import User
from docdesk.stores.registry import Stores

router = APIRouter(tags=["finance"])


# ── Payments ────────────────────────────────────────────────────────
@router.get("/payments", response_model=list[Payment])
async def list_payments(
    document_id: Optional[str] = Query(None),
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("payments", "read")),
) -> list[Payment]:
    if document_id is not None:
        return stores.payments.by_document(document_id)
    return stores.payments.list()


@router.post("/payments", response_model=Payment, status_code=201)
async def create_payment(
    body: PaymentCreate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("payments", "create")),
) -> Payment:
    stores.documents.require(body.document_id)
    return await stores.payments.create_payment(body)


@router.put("/payments/{payment_id}", response_model=Payment)
async def update_payment(
    payment_id: str,
    body: PaymentUpdate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("payments", "update")),
) -> Payment:
    return await stores.payments.update_payment(payment_id, body)


@router.post("/payments/{payment_id}/installments", response_model=Payment)
async def record_installment(
    payment_id: str,
    body: InstallmentCreate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("payments", "update")),
) -> Payment:
    return await stores.payments.record_payment(payment_id, body)


@router.delete("/payments/{payment_id}", response_model=DeleteResponse)
async def delete_payment(
    payment_id: str,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("payments", "delete")),
) -> DeleteResponse:
    await stores.payments.delete(payment_id)
    return DeleteResponse(success=True, message=f"Payment {payment_id} deleted")


# ── Challans ────────────────────────────────────────────────────────
@router.get("/challans", response_model=list[Challan])
async def list_challans(
    document_id: Optional[str] = Query(None),
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("challans", "read")),
) -> list[Challan]:
    if document_id is not None:
        return stores.challans.by_document(document_id)
    return stores.challans.list()


@router.post("/challans", response_model=Challan, status_code=201)
async def create_challan(
    body: ChallanCreate,
    stores: Stores = Depends(get_stores),
    actor: User = Depends(require_permission("challans", "create")),
) -> Challan:
    stores.documents.require(body.document_id)
    return await stores.challans.create_challan(body, actor)


@router.put("/challans/{challan_id}", response_model=Challan)
async def update_challan(
    challan_id: str,
    body: ChallanUpdate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("challans", "update")),
) -> Challan:
    return await stores.challans.update_challan(challan_id, body)


@router.patch("/challans/{challan_id}/status", response_model=Challan)
async def change_challan_status(
    challan_id: str,
    body: StatusChange,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("challans", "update")),
) -> Challan:
    return await stores.challans.update_status(challan_id, body.status)


@router.delete("/challans/{challan_id}", response_model=DeleteResponse)
async def delete_challan(
    challan_id: str,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("challans", "delete")),
) -> DeleteResponse:
    await stores.challans.delete(challan_id)
    return DeleteResponse(success=True, message=f"Challan {challan_id} deleted")
