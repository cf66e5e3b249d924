"""Pydantic schemas for documents and the parties linked to them."""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from docdesk.core.status import DocumentStatus

_PHONE_RE = re.compile(r"^\+?[0-9 ()-]{3,20}$")


class DocumentType(str, Enum):
    AGREEMENT = "agreement"
    LEASE_DEED = "lease_deed"
    SALE_DEED = "sale_deed"
    MUTATION = "mutation"
    PARTITION_DEED = "partition_deed"
    GIFT_DEED = "gift_deed"


class FileType(str, Enum):
    SCAN = "scan"
    PHOTO = "photo"
    DOCUMENT = "document"


class FileRef(BaseModel):
    id: str
    name: str
    type: FileType = FileType.DOCUMENT
    url: str
    uploaded_by: str
    uploaded_at: datetime


# ── Document ────────────────────────────────────────────────────────
class Document(BaseModel):
    id: str = ""
    document_number: str
    customer_name: str = ""
    customer_phone: str = ""
    customer_email: str | None = None
    builder_name: str = ""
    property_details: str = ""
    document_type: DocumentType
    status: DocumentStatus = DocumentStatus.PENDING_COLLECTION
    assigned_to: str | None = None
    collection_date: datetime | None = None
    data_entry_date: datetime | None = None
    registration_date: datetime | None = None
    delivery_date: datetime | None = None
    notes: list[str] = Field(default_factory=list)
    files: list[FileRef] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"extra": "ignore"}


class DocumentCreate(BaseModel):
    document_type: DocumentType
    customer_name: str = ""
    customer_phone: str = ""
    customer_email: str | None = None
    builder_name: str = ""
    property_details: str = ""
    assigned_to: str | None = None
    document_number: str | None = None

    @field_validator("customer_phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        v = v.strip()
        if v and not _PHONE_RE.match(v):
            raise ValueError("Phone must be 3-20 digits (spaces, dashes, brackets allowed)")
        return v


class DocumentUpdate(BaseModel):
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_email: str | None = None
    builder_name: str | None = None
    property_details: str | None = None
    assigned_to: str | None = None
    status: DocumentStatus | None = None


class StatusChange(BaseModel):
    status: str


class NoteCreate(BaseModel):
    note: str

    @field_validator("note")
    @classmethod
    def _note(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Note must not be empty")
        return v


class FileRefCreate(BaseModel):
    name: str
    url: str
    type: FileType | None = None


# ── Customer ────────────────────────────────────────────────────────
class Customer(BaseModel):
    id: str = ""
    name: str
    phone: str
    email: str | None = None
    address: str = ""
    documents: list[str] = Field(default_factory=list)
    created_at: datetime | None = None

    model_config = {"extra": "ignore"}


class CustomerCreate(BaseModel):
    name: str
    phone: str
    email: str | None = None
    address: str = ""

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        v = v.strip()
        if not _PHONE_RE.match(v):
            raise ValueError("Phone must be 3-20 digits (spaces, dashes, brackets allowed)")
        return v


class CustomerUpdate(BaseModel):
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None


# ── Builder ─────────────────────────────────────────────────────────
class Builder(BaseModel):
    id: str = ""
    name: str
    contact_person: str = ""
    phone: str = ""
    email: str | None = None
    address: str = ""
    registration_number: str | None = None
    documents: list[str] = Field(default_factory=list)
    created_at: datetime | None = None

    model_config = {"extra": "ignore"}


class BuilderCreate(BaseModel):
    name: str
    contact_person: str = ""
    phone: str = ""
    email: str | None = None
    address: str = ""
    registration_number: str | None = None


class BuilderUpdate(BaseModel):
    name: str | None = None
    contact_person: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    registration_number: str | None = None
