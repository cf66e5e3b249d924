"""Tests for documents, customers, builders and party linking."""

from datetime import datetime

import pytest

from docdesk.core.exceptions import ConflictError, InvalidTransitionError, NotFoundError
from docdesk.core.status import DocumentStatus
from docdesk.schemas.document import (CustomerCreate, DocumentCreate, DocumentType,
                                      FileRefCreate, FileType)


def _agreement(**overrides) -> DocumentCreate:
    data = {
        "document_type": DocumentType.AGREEMENT,
        "customer_name": "A",
        "customer_phone": "123",
        "builder_name": "B",
        "property_details": "Flat 4B",
    }
    data.update(overrides)
    return DocumentCreate(**data)


# ── Numbering ───────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_document_numbers_are_per_type_and_year(stores):
    first = await stores.documents.create_document(_agreement())
    second = await stores.documents.create_document(_agreement())
    lease = await stores.documents.create_document(
        _agreement(document_type=DocumentType.LEASE_DEED)
    )
    assert first.document_number == "AGREEMENT/2026/001"
    assert second.document_number == "AGREEMENT/2026/002"
    assert lease.document_number == "LEASEDEED/2026/001"
    assert first.id == "DOC001"
    assert first.status == DocumentStatus.PENDING_COLLECTION


@pytest.mark.asyncio
async def test_numbering_skips_taken_numbers(stores):
    await stores.documents.create_document(_agreement(document_number="AGREEMENT/2026/002"))
    # one agreement exists, so the candidate is 002, which is taken
    assert stores.documents.generate_document_number("agreement") == "AGREEMENT/2026/003"


@pytest.mark.asyncio
async def test_duplicate_document_number_conflicts(stores):
    await stores.documents.create_document(_agreement(document_number="X/1"))
    with pytest.raises(ConflictError):
        await stores.documents.create_document(_agreement(document_number="X/1"))
    assert len(stores.documents) == 1


# ── Status flow ─────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_status_moves_forward_and_stamps_milestones(stores, clock):
    doc = await stores.documents.create_document(_agreement())
    clock.set(datetime(2026, 3, 11, 14, 30))
    doc = await stores.documents.update_status(doc.id, "collected")
    assert doc.status == DocumentStatus.COLLECTED
    assert doc.collection_date == datetime(2026, 3, 11, 14, 30)
    assert doc.updated_at == datetime(2026, 3, 11, 14, 30)

    doc = await stores.documents.update_status(doc.id, DocumentStatus.DATA_ENTRY_PENDING)
    doc = await stores.documents.update_status(doc.id, DocumentStatus.DATA_ENTRY_COMPLETED)
    assert doc.data_entry_date is not None
    assert doc.registration_date is None


@pytest.mark.asyncio
async def test_status_cannot_skip_or_go_back(stores):
    doc = await stores.documents.create_document(_agreement())
    with pytest.raises(InvalidTransitionError):
        await stores.documents.update_status(doc.id, DocumentStatus.REGISTERED)
    await stores.documents.update_status(doc.id, DocumentStatus.COLLECTED)
    with pytest.raises(InvalidTransitionError):
        await stores.documents.update_status(doc.id, DocumentStatus.PENDING_COLLECTION)
    assert stores.documents.require(doc.id).status == DocumentStatus.COLLECTED


@pytest.mark.asyncio
async def test_same_status_is_a_noop(stores):
    doc = await stores.documents.create_document(_agreement())
    doc = await stores.documents.update_status(doc.id, DocumentStatus.PENDING_COLLECTION)
    assert doc.collection_date is None


@pytest.mark.asyncio
async def test_notes_and_files(stores, admin):
    doc = await stores.documents.create_document(_agreement())
    doc = await stores.documents.add_note(doc.id, "Customer prefers morning visits")
    doc = await stores.documents.add_file(
        doc.id, FileRefCreate(name="front.JPG", url="https://files.example/front.jpg"), admin
    )
    doc = await stores.documents.add_file(
        doc.id, FileRefCreate(name="deed.pdf", url="https://files.example/deed.pdf"), admin
    )
    assert doc.notes == ["Customer prefers morning visits"]
    assert [f.id for f in doc.files] == ["FILE001", "FILE002"]
    assert doc.files[0].type == FileType.PHOTO
    assert doc.files[1].type == FileType.DOCUMENT
    assert doc.files[0].uploaded_by == admin.id


@pytest.mark.asyncio
async def test_unknown_document_raises_not_found(stores):
    with pytest.raises(NotFoundError):
        await stores.documents.update_status("DOC404", DocumentStatus.COLLECTED)
    with pytest.raises(NotFoundError):
        await stores.documents.delete("DOC404")


# ── Linking ─────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_create_document_links_new_parties(stores):
    doc = await stores.create_document(_agreement())
    customers = stores.customers.list()
    builders = stores.builders.list()
    assert len(customers) == 1 and len(builders) == 1
    assert customers[0].name == "A"
    assert customers[0].phone == "123"
    assert customers[0].address == "Flat 4B"
    assert customers[0].documents == [doc.id]
    assert builders[0].name == "B"
    assert builders[0].contact_person == "Contact Person"
    assert builders[0].documents == [doc.id]


@pytest.mark.asyncio
async def test_existing_parties_are_reused(stores):
    first = await stores.create_document(_agreement())
    second = await stores.create_document(_agreement(builder_name="  b  "))
    assert len(stores.customers) == 1
    assert len(stores.builders) == 1
    assert stores.customers.list()[0].documents == [first.id, second.id]
    assert stores.builders.list()[0].documents == [first.id, second.id]


@pytest.mark.asyncio
async def test_linker_skips_incomplete_parties(stores):
    doc = await stores.documents.create_document(
        _agreement(customer_phone="", builder_name="   ")
    )
    result = await stores.linker.link(doc)
    assert result.customer is None and result.builder is None
    assert len(stores.customers) == 0 and len(stores.builders) == 0


@pytest.mark.asyncio
async def test_linking_is_idempotent(stores):
    doc = await stores.create_document(_agreement())
    result = await stores.linker.link(doc)
    assert not result.customer_created and not result.builder_created
    assert result.customer.documents == [doc.id]


@pytest.mark.asyncio
async def test_duplicate_customer_phone_conflicts(stores):
    await stores.customers.create_customer(CustomerCreate(name="A", phone="123"))
    with pytest.raises(ConflictError):
        await stores.customers.create_customer(CustomerCreate(name="Other", phone="123"))


# ── HTTP ────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_document_endpoints(async_client, stores):
    resp = await async_client.post(
        "/api/v1/documents",
        json={
            "document_type": "agreement",
            "customer_name": "A",
            "customer_phone": "123",
            "builder_name": "B",
        },
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["document_number"] == "AGREEMENT/2026/001"
    doc_id = body["id"]

    resp = await async_client.get("/api/v1/documents/next-number", params={"document_type": "agreement"})
    assert resp.json()["document_number"] == "AGREEMENT/2026/002"

    resp = await async_client.patch(f"/api/v1/documents/{doc_id}/status", json={"status": "registered"})
    assert resp.status_code == 422
    assert resp.json()["kind"] == "invalid_transition"

    resp = await async_client.patch(f"/api/v1/documents/{doc_id}/status", json={"status": "collected"})
    assert resp.status_code == 200
    assert resp.json()["collection_date"] is not None

    resp = await async_client.get("/api/v1/documents", params={"status": "collected"})
    assert [d["id"] for d in resp.json()] == [doc_id]
    await stores.documents.update(doc_id, {"assigned_to": "USR010"})
    resp = await async_client.get("/api/v1/documents", params={"status": "collected", "assigned_to": "USR010"})
    assert [d["id"] for d in resp.json()] == [doc_id]
    resp = await async_client.get("/api/v1/documents", params={"assigned_to": "USR011"})
    assert resp.json() == []

    resp = await async_client.get("/api/v1/customers", params={"phone": "123"})
    assert resp.json()[0]["documents"] == [doc_id]

    resp = await async_client.get("/api/v1/builders", params={"q": "b"})
    assert len(resp.json()) == 1

    resp = await async_client.delete(f"/api/v1/documents/{doc_id}")
    assert resp.json()["success"] is True
    resp = await async_client.get(f"/api/v1/documents/{doc_id}")
    assert resp.status_code == 404
    assert resp.json()["kind"] == "not_found"


@pytest.mark.asyncio
async def test_create_customer_rejects_bad_phone(async_client):
    resp = await async_client.post("/api/v1/customers", json={"name": "A", "phone": "abc"})
    assert resp.status_code == 422
