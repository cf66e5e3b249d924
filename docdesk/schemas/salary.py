"""Pydantic schemas for staff salary configurations, salary records and payroll."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from docdesk.core.status import SalaryStatus


class SalaryPaymentMethod(str, Enum):
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    CHEQUE = "cheque"
    UPI = "upi"


class SalaryComponent(BaseModel):
    """One allowance or deduction line (house_rent, transport, tax, provident_fund...)."""

    type: str
    amount: Decimal = Field(ge=0)
    description: str | None = None


class OvertimeEntry(BaseModel):
    date: date
    hours: float = Field(ge=0)
    rate: Decimal
    amount: Decimal
    description: str | None = None


class BankDetails(BaseModel):
    account_number: str
    bank_name: str
    ifsc_code: str
    account_holder_name: str


# ── Staff salary configuration ──────────────────────────────────────
class StaffSalaryConfig(BaseModel):
    id: str = ""
    user_id: str
    base_salary: Decimal = Decimal("0")
    allowances: list[SalaryComponent] = Field(default_factory=list)
    deductions: list[SalaryComponent] = Field(default_factory=list)
    overtime_rate: Decimal = Decimal("0")
    payment_method: SalaryPaymentMethod = SalaryPaymentMethod.BANK_TRANSFER
    bank_details: BankDetails | None = None
    is_active: bool = True
    effective_from: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"extra": "ignore"}


class StaffSalaryConfigCreate(BaseModel):
    user_id: str
    base_salary: Decimal = Field(ge=0)
    allowances: list[SalaryComponent] = Field(default_factory=list)
    deductions: list[SalaryComponent] = Field(default_factory=list)
    overtime_rate: Decimal = Field(default=Decimal("0"), ge=0)
    payment_method: SalaryPaymentMethod = SalaryPaymentMethod.BANK_TRANSFER
    bank_details: BankDetails | None = None
    effective_from: date | None = None


class StaffSalaryConfigUpdate(BaseModel):
    base_salary: Decimal | None = Field(default=None, ge=0)
    allowances: list[SalaryComponent] | None = None
    deductions: list[SalaryComponent] | None = None
    overtime_rate: Decimal | None = Field(default=None, ge=0)
    payment_method: SalaryPaymentMethod | None = None
    bank_details: BankDetails | None = None
    is_active: bool | None = None


# ── Salary record ───────────────────────────────────────────────────
class SalaryRecord(BaseModel):
    id: str = ""
    user_id: str
    user_name: str = ""
    user_role: str = ""
    base_salary: Decimal
    allowances: list[SalaryComponent] = Field(default_factory=list)
    deductions: list[SalaryComponent] = Field(default_factory=list)
    overtime: list[OvertimeEntry] = Field(default_factory=list)
    bonus: Decimal = Decimal("0")
    gross_salary: Decimal
    net_salary: Decimal
    pay_period_month: int = Field(ge=1, le=12)
    pay_period_year: int
    pay_date: date
    status: SalaryStatus = SalaryStatus.DRAFT
    payment_method: SalaryPaymentMethod = SalaryPaymentMethod.BANK_TRANSFER
    bank_details: BankDetails | None = None
    notes: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"extra": "ignore"}


class SalaryRecordCreate(BaseModel):
    user_id: str
    pay_period_month: int = Field(ge=1, le=12)
    pay_period_year: int = Field(ge=2000)
    overtime_hours: float = Field(default=0.0, ge=0)
    bonus: Decimal = Field(default=Decimal("0"), ge=0)
    pay_date: date | None = None
    notes: str | None = None


class SalaryRecordUpdate(BaseModel):
    bonus: Decimal | None = Field(default=None, ge=0)
    notes: str | None = None
    pay_date: date | None = None
    status: SalaryStatus | None = None


class PayrollRequest(BaseModel):
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000)


class PayrollSummary(BaseModel):
    month: int
    year: int
    total_staff: int
    total_gross_salary: Decimal
    total_net_salary: Decimal
    total_allowances: Decimal
    total_deductions: Decimal
    total_overtime: Decimal
    paid_count: int
    pending_count: int
    skipped_users: list[str] = Field(default_factory=list)
    status: str = "draft"


class SalaryStats(BaseModel):
    total_staff: int
    total_monthly_salary: Decimal
    total_paid_this_month: Decimal
    total_pending_payments: Decimal
    average_salary: Decimal
    highest_salary: Decimal
    lowest_salary: Decimal
    total_overtime: Decimal
    total_allowances: Decimal
    total_deductions: Decimal
