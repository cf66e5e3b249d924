"""
Document, customer and builder endpoints.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from docdesk.api.v1.deps import get_stores, require_permission
from docdesk.core.status import DocumentStatus
from docdesk.schemas.common import DeleteResponse
from docdesk.schemas.document import (Builder, BuilderCreate, BuilderUpdate,
                                      Customer, CustomerCreate, CustomerUpdate,
                                      Document, DocumentCreate, DocumentType,
                                      DocumentUpdate, FileRefCreate,
                                      NoteCreate, StatusChange)
from docdesk.schemas.user import User
from docdesk.stores.base import intersect
from docdesk.stores.registry import Stores

router = APIRouter(tags=["documents"])


# ── Documents ───────────────────────────────────────────────────────
@router.get("/documents", response_model=list[Document])
async def list_documents(
    status: Optional[DocumentStatus] = Query(None),
    assigned_to: Optional[str] = Query(None),
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("documents", "read")),
) -> list[Document]:
    documents = stores.documents.by_status(status) if status is not None else stores.documents.list()
    if assigned_to is not None:
        documents = intersect(documents, stores.documents.by_assignee(assigned_to))
    return documents


@router.get("/documents/next-number")
async def next_document_number(
    document_type: DocumentType,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("documents", "read")),
) -> dict:
    return {"document_number": stores.documents.generate_document_number(document_type)}


@router.post("/documents", response_model=Document, status_code=201)
async def create_document(
    body: DocumentCreate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("documents", "create")),
) -> Document:
    """Create a document and link (or create) its customer and builder."""
    return await stores.create_document(body)


@router.get("/documents/{document_id}", response_model=Document)
async def get_document(
    document_id: str,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("documents", "read")),
) -> Document:
    return stores.documents.require(document_id)


@router.put("/documents/{document_id}", response_model=Document)
async def update_document(
    document_id: str,
    body: DocumentUpdate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("documents", "update")),
) -> Document:
    return await stores.documents.update_document(document_id, body)


@router.patch("/documents/{document_id}/status", response_model=Document)
async def change_document_status(
    document_id: str,
    body: StatusChange,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("documents", "update")),
) -> Document:
    return await stores.documents.update_status(document_id, body.status)


@router.post("/documents/{document_id}/notes", response_model=Document)
async def add_document_note(
    document_id: str,
    body: NoteCreate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("documents", "update")),
) -> Document:
    return await stores.documents.add_note(document_id, body.note)


@router.post("/documents/{document_id}/files", response_model=Document)
async def add_document_file(
    document_id: str,
    body: FileRefCreate,
    stores: Stores = Depends(get_stores),
    actor: User = Depends(require_permission("documents", "update")),
) -> Document:
    return await stores.documents.add_file(document_id, body, actor)


@router.delete("/documents/{document_id}", response_model=DeleteResponse)
async def delete_document(
    document_id: str,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("documents", "delete")),
) -> DeleteResponse:
    await stores.documents.delete(document_id)
    return DeleteResponse(success=True, message=f"Document {document_id} deleted")


# ── Customers ───────────────────────────────────────────────────────
@router.get("/customers", response_model=list[Customer])
async def list_customers(
    phone: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("customers", "read")),
) -> list[Customer]:
    if phone is not None:
        found = stores.customers.by_phone(phone)
        return [found] if found else []
    if email is not None:
        found = stores.customers.by_email(email)
        return [found] if found else []
    return stores.customers.list()


@router.post("/customers", response_model=Customer, status_code=201)
async def create_customer(
    body: CustomerCreate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("customers", "create")),
) -> Customer:
    return await stores.customers.create_customer(body)


@router.get("/customers/{customer_id}", response_model=Customer)
async def get_customer(
    customer_id: str,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("customers", "read")),
) -> Customer:
    return stores.customers.require(customer_id)


@router.put("/customers/{customer_id}", response_model=Customer)
async def update_customer(
    customer_id: str,
    body: CustomerUpdate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("customers", "update")),
) -> Customer:
    return await stores.customers.update_customer(customer_id, body)


@router.delete("/customers/{customer_id}", response_model=DeleteResponse)
async def delete_customer(
    customer_id: str,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("customers", "delete")),
) -> DeleteResponse:
    await stores.customers.delete(customer_id)
    return DeleteResponse(success=True, message=f"Customer {customer_id} deleted")


# ── Builders ────────────────────────────────────────────────────────
@router.get("/builders", response_model=list[Builder])
async def list_builders(
    q: Optional[str] = Query(None, description="Case-insensitive name search"),
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("builders", "read")),
) -> list[Builder]:
    if q:
        return stores.builders.search(q)
    return stores.builders.list()


@router.post("/builders", response_model=Builder, status_code=201)
async def create_builder(
    body: BuilderCreate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("builders", "create")),
) -> Builder:
    return await stores.builders.create_builder(body)


@router.get("/builders/{builder_id}", response_model=Builder)
async def get_builder(
    builder_id: str,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("builders", "read")),
) -> Builder:
    return stores.builders.require(builder_id)


@router.put("/builders/{builder_id}", response_model=Builder)
async def update_builder(
    builder_id: str,
    body: BuilderUpdate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("builders", "update")),
) -> Builder:
    return await stores.builders.update_builder(builder_id, body)


@router.delete("/builders/{builder_id}", response_model=DeleteResponse)
async def delete_builder(
    builder_id: str,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("builders", "delete")),
) -> DeleteResponse:
    await stores.builders.delete(builder_id)
    return DeleteResponse(success=True, message=f"Builder {builder_id} deleted")
