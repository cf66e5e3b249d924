"""
Documents store: numbering, lifecycle status, notes and file references.
"""

from __future__ import annotations

import logging
from typing import Any

from docdesk.core.exceptions import ConflictError, ValidationFailedError
from docdesk.core.status import (DOCUMENT_MILESTONES, DOCUMENT_TRANSITIONS,
                                 DocumentStatus, ensure_transition)
from docdesk.schemas.document import (Document, DocumentCreate, DocumentType,
                                      DocumentUpdate, FileRef, FileRefCreate,
                                      FileType)
from docdesk.schemas.user import User
from docdesk.stores.base import EntityStore

logger = logging.getLogger(__name__)

_PHOTO_EXTENSIONS = (".jpg", ".jpeg", ".png", ".heic", ".webp")


class DocumentStore(EntityStore[Document]):
    model = Document
    name = "Document"
    table = "documents"
    id_prefix = "DOC"
    columns = (
        "document_number",
        "customer_name",
        "customer_phone",
        "customer_email",
        "builder_name",
        "property_details",
        "document_type",
        "status",
        "assigned_to",
        "collection_date",
        "data_entry_date",
        "registration_date",
        "delivery_date",
        "notes",
        "files",
        "created_at",
        "updated_at",
    )
    json_columns = frozenset({"notes", "files"})
    natural_key = ("document_number",)

    # ── Numbering ───────────────────────────────────────────────────
    def by_number(self, number: str) -> Document | None:
        return next((d for d in self._items.values() if d.document_number == number), None)

    def generate_document_number(self, document_type: DocumentType | str) -> str:
        """``AGREEMENT/2026/001``: per type, per calendar year, skipping taken numbers."""
        doc_type = DocumentType(document_type)
        year = self.ctx.now().year
        prefix = doc_type.value.upper().replace("_", "")
        count = sum(
            1
            for d in self._items.values()
            if d.document_type == doc_type and d.created_at and d.created_at.year == year
        )
        seq = count + 1
        while self.by_number(f"{prefix}/{year}/{seq:03d}") is not None:
            seq += 1
        return f"{prefix}/{year}/{seq:03d}"

    # ── Hooks ───────────────────────────────────────────────────────
    def check(self, item: Document, existing_id: str | None = None) -> None:
        other = self.by_number(item.document_number)
        if other is not None and other.id != existing_id:
            raise ConflictError(f"Document number {item.document_number} already exists")

    def on_update(self, current: Document, merged: Document) -> Document:
        if merged.status == current.status:
            return merged
        ensure_transition("Document", DOCUMENT_TRANSITIONS, current.status, merged.status)
        milestone = DOCUMENT_MILESTONES.get(merged.status)
        if milestone and getattr(merged, milestone) is None:
            merged = merged.model_copy(update={milestone: self.ctx.now()})
        return merged

    # ── Operations ──────────────────────────────────────────────────
    async def create_document(self, data: DocumentCreate) -> Document:
        payload: dict[str, Any] = data.model_dump()
        if not payload.get("document_number"):
            payload["document_number"] = self.generate_document_number(data.document_type)
        payload["status"] = DocumentStatus.PENDING_COLLECTION
        return await self.create(payload)

    async def update_document(self, id: str, data: DocumentUpdate) -> Document:
        return await self.update(id, data.model_dump(exclude_unset=True))

    async def update_status(self, id: str, status: DocumentStatus | str) -> Document:
        try:
            target = DocumentStatus(status)
        except ValueError:
            raise ValidationFailedError(f"Unknown document status '{status}'") from None
        document = await self.update(id, {"status": target})
        logger.info("Document %s moved to %s", id, target.value)
        return document

    async def add_note(self, id: str, note: str) -> Document:
        document = self.require(id)
        return await self.update(id, {"notes": [*document.notes, note]})

    async def add_file(self, id: str, data: FileRefCreate, actor: User) -> Document:
        """Attach file reference metadata; the blob itself is stored elsewhere."""
        document = self.require(id)
        file_type = data.type
        if file_type is None:
            file_type = (
                FileType.PHOTO if data.name.lower().endswith(_PHOTO_EXTENSIONS) else FileType.DOCUMENT
            )
        ref = FileRef(
            id=f"FILE{len(document.files) + 1:03d}",
            name=data.name,
            type=file_type,
            url=data.url,
            uploaded_by=actor.id,
            uploaded_at=self.ctx.now(),
        )
        return await self.update(id, {"files": [*document.files, ref]})

    # ── Filters ─────────────────────────────────────────────────────
    def by_status(self, status: DocumentStatus) -> list[Document]:
        return [d for d in self._items.values() if d.status == status]

    def by_assignee(self, user_id: str) -> list[Document]:
        return [d for d in self._items.values() if d.assigned_to == user_id]
