"""
Documents and the parties (customers, builders) linked to them.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from docdesk.db.base import Base


class Document(Base):
    __tablename__ = "documents"

    id: int = Column(Integer, primary_key=True, autoincrement=True)  # type: ignore[assignment]
    document_number: str = Column(String(100), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    customer_name: str = Column(String(255), nullable=False, default="")  # type: ignore[assignment]
    customer_phone: str = Column(String(20), nullable=False, default="", index=True)  # type: ignore[assignment]
    customer_email: str | None = Column(String(255), nullable=True)  # type: ignore[assignment]
    builder_name: str = Column(String(255), nullable=False, default="")  # type: ignore[assignment]
    property_details: str = Column(Text, nullable=False, default="")  # type: ignore[assignment]
    document_type: str = Column(String(50), nullable=False, index=True)  # type: ignore[assignment]
    status: str = Column(String(50), nullable=False, default="pending_collection", index=True)  # type: ignore[assignment]
    assigned_to: str | None = Column(String(255), nullable=True, index=True)  # type: ignore[assignment]
    collection_date: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    data_entry_date: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    registration_date: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    delivery_date: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
    notes: list | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    # File reference metadata only, blobs live elsewhere
    files: list | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    created_at: datetime | None = Column(DateTime, nullable=True, index=True)  # type: ignore[assignment]
    updated_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]


class Customer(Base):
    __tablename__ = "customers"

    id: int = Column(Integer, primary_key=True, autoincrement=True)  # type: ignore[assignment]
    name: str = Column(String(255), nullable=False, index=True)  # type: ignore[assignment]
    phone: str = Column(String(20), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    email: str | None = Column(String(255), nullable=True, index=True)  # type: ignore[assignment]
    address: str = Column(Text, nullable=False, default="")  # type: ignore[assignment]
    documents: list | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    created_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]


class Builder(Base):
    __tablename__ = "builders"

    id: int = Column(Integer, primary_key=True, autoincrement=True)  # type: ignore[assignment]
    name: str = Column(String(255), nullable=False, index=True)  # type: ignore[assignment]
    contact_person: str = Column(String(255), nullable=False, default="")  # type: ignore[assignment]
    phone: str = Column(String(20), nullable=False, default="", index=True)  # type: ignore[assignment]
    email: str | None = Column(String(255), nullable=True)  # type: ignore[assignment]
    address: str = Column(Text, nullable=False, default="")  # type: ignore[assignment]
    registration_number: str | None = Column(String(100), nullable=True, index=True)  # type: ignore[assignment]
    documents: list | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    created_at: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
