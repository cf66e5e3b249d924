"""Pydantic schemas for users, roles and permissions."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class Role(str, Enum):
    MAIN_ADMIN = "main_admin"
    STAFF_ADMIN = "staff_admin"
    CHALLAN_STAFF = "challan_staff"
    FIELD_COLLECTION_STAFF = "field_collection_staff"
    DATA_ENTRY_STAFF = "data_entry_staff"
    DOCUMENT_DELIVERY_STAFF = "document_delivery_staff"


class Permission(BaseModel):
    module: str
    action: str
    granted: bool = True


class User(BaseModel):
    id: str = ""
    email: str
    name: str
    role: Role = Role.DATA_ENTRY_STAFF
    password_hash: str = ""
    permissions: list[Permission] = Field(default_factory=list)
    is_active: bool = True
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"extra": "ignore"}


class UserCreate(BaseModel):
    email: str
    password: str
    name: str
    role: Role = Role.DATA_ENTRY_STAFF
    permissions: list[Permission] | None = None

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        return v


class UserUpdate(BaseModel):
    name: str | None = None
    role: Role | None = None
    is_active: bool | None = None
    password: str | None = None
    permissions: list[Permission] | None = None


class UserRead(BaseModel):
    id: str
    email: str
    name: str
    role: Role
    permissions: list[Permission]
    is_active: bool
    last_login: datetime | None
    created_at: datetime | None

    model_config = {"from_attributes": True}
