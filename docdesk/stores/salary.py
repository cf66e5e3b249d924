"""
Staff salary configurations and salary records.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from docdesk.core.exceptions import ConflictError, ValidationFailedError
from docdesk.core.status import SALARY_TRANSITIONS, SalaryStatus, ensure_transition
from docdesk.schemas.salary import (OvertimeEntry, SalaryRecord,
                                    SalaryRecordCreate, SalaryRecordUpdate,
                                    SalaryStats, StaffSalaryConfig,
                                    StaffSalaryConfigCreate,
                                    StaffSalaryConfigUpdate)
from docdesk.schemas.user import User
from docdesk.services.payroll import (calculate_salary, month_bounds,
                                      overtime_entries, pay_date_for, to_money)
from docdesk.stores.base import EntityStore
from docdesk.stores.users import UserStore

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


class StaffSalaryConfigStore(EntityStore[StaffSalaryConfig]):
    model = StaffSalaryConfig
    name = "Salary config"
    table = "staff_salary_configs"
    id_prefix = "CFG"
    columns = (
        "user_id",
        "base_salary",
        "allowances",
        "deductions",
        "overtime_rate",
        "payment_method",
        "bank_details",
        "is_active",
        "effective_from",
        "created_at",
        "updated_at",
    )
    json_columns = frozenset({"allowances", "deductions", "bank_details"})
    bool_columns = frozenset({"is_active"})
    ref_columns = frozenset({"user_id"})
    natural_key = ("user_id",)

    def check(self, item: StaffSalaryConfig, existing_id: str | None = None) -> None:
        if not item.is_active:
            return
        other = self.active_for(item.user_id)
        if other is not None and other.id != existing_id:
            raise ConflictError(f"User {item.user_id} already has an active salary config")

    def active_for(self, user_id: str) -> StaffSalaryConfig | None:
        return next(
            (c for c in self._items.values() if c.user_id == user_id and c.is_active), None
        )

    async def create_config(self, data: StaffSalaryConfigCreate) -> StaffSalaryConfig:
        payload = data.model_dump()
        payload["effective_from"] = data.effective_from or self.ctx.now().date()
        return await self.create(payload)

    async def update_config(self, id: str, data: StaffSalaryConfigUpdate) -> StaffSalaryConfig:
        return await self.update(id, data.model_dump(exclude_unset=True))


def recalculate(record: SalaryRecord) -> SalaryRecord:
    """Re-derive gross and net from the record's own components."""
    gross = to_money(
        record.base_salary
        + sum((a.amount for a in record.allowances), _ZERO)
        + sum((o.amount for o in record.overtime), _ZERO)
        + record.bonus
    )
    net = to_money(gross - sum((d.amount for d in record.deductions), _ZERO))
    return record.model_copy(update={"gross_salary": gross, "net_salary": net})


class SalaryRecordStore(EntityStore[SalaryRecord]):
    model = SalaryRecord
    name = "Salary record"
    table = "salary_records"
    id_prefix = "SAL"
    columns = (
        "user_id",
        "user_name",
        "user_role",
        "base_salary",
        "allowances",
        "deductions",
        "overtime",
        "bonus",
        "gross_salary",
        "net_salary",
        "pay_period_month",
        "pay_period_year",
        "pay_date",
        "status",
        "payment_method",
        "bank_details",
        "notes",
        "approved_by",
        "approved_at",
        "created_at",
        "updated_at",
    )
    json_columns = frozenset({"allowances", "deductions", "overtime", "bank_details"})
    ref_columns = frozenset({"user_id"})
    natural_key = ("user_id", "pay_period_month", "pay_period_year")

    def on_update(self, current: SalaryRecord, merged: SalaryRecord) -> SalaryRecord:
        ensure_transition("Salary record", SALARY_TRANSITIONS, current.status, merged.status)
        if current.status == SalaryStatus.PAID:
            stamp = {"updated_at"}
            if merged.model_dump(exclude=stamp) != current.model_dump(exclude=stamp):
                raise ValidationFailedError("A paid salary record cannot be changed")
        return recalculate(merged)

    # ── Reads ───────────────────────────────────────────────────────
    def by_user(self, user_id: str) -> list[SalaryRecord]:
        return [r for r in self._items.values() if r.user_id == user_id]

    def by_period(self, month: int, year: int) -> list[SalaryRecord]:
        return [
            r
            for r in self._items.values()
            if r.pay_period_month == month and r.pay_period_year == year
        ]

    def for_period(self, user_id: str, month: int, year: int) -> SalaryRecord | None:
        """The user's non-cancelled record for the period, if any."""
        return next(
            (
                r
                for r in self.by_period(month, year)
                if r.user_id == user_id and r.status != SalaryStatus.CANCELLED
            ),
            None,
        )

    def stats(self, configs: StaffSalaryConfigStore, today: date | None = None) -> SalaryStats:
        today = today or self.ctx.now().date()
        active = [c.base_salary for c in configs.list() if c.is_active]
        current = self.by_period(today.month, today.year)
        total_base = sum(active, _ZERO)
        return SalaryStats(
            total_staff=len(active),
            total_monthly_salary=to_money(total_base),
            total_paid_this_month=to_money(
                sum((r.net_salary for r in current if r.status == SalaryStatus.PAID), _ZERO)
            ),
            total_pending_payments=to_money(
                sum(
                    (
                        r.net_salary
                        for r in current
                        if r.status not in (SalaryStatus.PAID, SalaryStatus.CANCELLED)
                    ),
                    _ZERO,
                )
            ),
            average_salary=to_money(total_base / len(active)) if active else to_money(0),
            highest_salary=to_money(max(active, default=_ZERO)),
            lowest_salary=to_money(min(active, default=_ZERO)),
            total_overtime=to_money(sum((o.amount for r in current for o in r.overtime), _ZERO)),
            total_allowances=to_money(sum((a.amount for r in current for a in r.allowances), _ZERO)),
            total_deductions=to_money(sum((d.amount for r in current for d in r.deductions), _ZERO)),
        )

    # ── Writes ──────────────────────────────────────────────────────
    async def create_from_config(
        self,
        user: User,
        config: StaffSalaryConfig,
        *,
        month: int,
        year: int,
        overtime: list[OvertimeEntry] | None = None,
        bonus: Decimal = _ZERO,
        pay_date: date | None = None,
        notes: str | None = None,
    ) -> SalaryRecord:
        overtime = overtime or []
        hours = sum(o.hours for o in overtime)
        breakdown = calculate_salary(config, hours, bonus)
        return await self.create(
            {
                "user_id": user.id,
                "user_name": user.name,
                "user_role": user.role.value,
                "base_salary": to_money(config.base_salary),
                "allowances": config.allowances,
                "deductions": config.deductions,
                "overtime": overtime,
                "bonus": to_money(bonus),
                "gross_salary": breakdown.gross,
                "net_salary": breakdown.net,
                "pay_period_month": month,
                "pay_period_year": year,
                "pay_date": pay_date or pay_date_for(month, year, self.ctx.settings.PAY_DAY),
                "status": SalaryStatus.DRAFT,
                "payment_method": config.payment_method,
                "bank_details": config.bank_details,
                "notes": notes,
            }
        )

    async def create_salary_record(
        self, data: SalaryRecordCreate, users: UserStore, configs: StaffSalaryConfigStore
    ) -> SalaryRecord:
        user = users.require(data.user_id)
        config = configs.active_for(user.id)
        if config is None:
            raise ValidationFailedError(f"No active salary config for user {user.id}")
        if self.for_period(user.id, data.pay_period_month, data.pay_period_year) is not None:
            raise ConflictError(
                f"User {user.id} already has a salary record for "
                f"{data.pay_period_month:02d}/{data.pay_period_year}"
            )
        _, period_end = month_bounds(data.pay_period_month, data.pay_period_year)
        return await self.create_from_config(
            user,
            config,
            month=data.pay_period_month,
            year=data.pay_period_year,
            overtime=overtime_entries(config, data.overtime_hours, period_end),
            bonus=data.bonus,
            pay_date=data.pay_date,
            notes=data.notes,
        )

    async def update_salary_record(self, id: str, data: SalaryRecordUpdate) -> SalaryRecord:
        return await self.update(id, data.model_dump(exclude_unset=True))

    async def approve(self, id: str, approver: User) -> SalaryRecord:
        record = await self.update(
            id,
            {
                "status": SalaryStatus.APPROVED,
                "approved_by": approver.name,
                "approved_at": self.ctx.now(),
            },
        )
        logger.info("Salary record %s approved by %s", id, approver.email)
        return record

    async def pay(self, id: str) -> SalaryRecord:
        record = await self.update(id, {"status": SalaryStatus.PAID})
        logger.info("Salary record %s paid", id)
        return record
