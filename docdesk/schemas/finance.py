"""Pydantic schemas for payments and challans."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from docdesk.core.status import ChallanStatus


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CHEQUE = "cheque"
    ONLINE = "online"
    DD = "dd"


# ── Payment ─────────────────────────────────────────────────────────
class Payment(BaseModel):
    id: str = ""
    document_id: str
    agreement_value: Decimal = Decimal("0")
    consideration_amount: Decimal = Decimal("0")
    dhc_amount: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")
    pending_amount: Decimal = Decimal("0")
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod | None = None
    payment_date: date | None = None
    challan_number: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"extra": "ignore"}


class PaymentCreate(BaseModel):
    document_id: str
    agreement_value: Decimal = Field(default=Decimal("0"), ge=0)
    consideration_amount: Decimal = Field(default=Decimal("0"), ge=0)
    dhc_amount: Decimal = Field(default=Decimal("0"), ge=0)
    total_amount: Decimal = Field(ge=0)
    paid_amount: Decimal = Field(default=Decimal("0"), ge=0)
    payment_method: PaymentMethod | None = None
    payment_date: date | None = None
    challan_number: str | None = None


class PaymentUpdate(BaseModel):
    agreement_value: Decimal | None = Field(default=None, ge=0)
    consideration_amount: Decimal | None = Field(default=None, ge=0)
    dhc_amount: Decimal | None = Field(default=None, ge=0)
    total_amount: Decimal | None = Field(default=None, ge=0)
    paid_amount: Decimal | None = Field(default=None, ge=0)
    payment_status: PaymentStatus | None = None
    payment_method: PaymentMethod | None = None
    payment_date: date | None = None
    challan_number: str | None = None


class InstallmentCreate(BaseModel):
    amount: Decimal = Field(gt=0)
    payment_method: PaymentMethod | None = None
    payment_date: date | None = None


# ── Challan ─────────────────────────────────────────────────────────
class Challan(BaseModel):
    id: str = ""
    document_id: str
    challan_number: str
    amount: Decimal
    filled_by: str
    filled_at: datetime | None = None
    status: ChallanStatus = ChallanStatus.DRAFT
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"extra": "ignore"}


class ChallanCreate(BaseModel):
    document_id: str
    challan_number: str
    amount: Decimal = Field(ge=0)
    notes: str | None = None


class ChallanUpdate(BaseModel):
    amount: Decimal | None = Field(default=None, ge=0)
    notes: str | None = None
    status: ChallanStatus | None = None
