"""
Salary arithmetic and monthly payroll generation.

All money is ``Decimal`` quantised to cents with ROUND_HALF_UP.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from docdesk.core.status import SalaryStatus
from docdesk.schemas.salary import OvertimeEntry, PayrollSummary, StaffSalaryConfig

if TYPE_CHECKING:
    from docdesk.stores.attendance import AttendanceStore
    from docdesk.stores.salary import SalaryRecordStore, StaffSalaryConfigStore
    from docdesk.stores.users import UserStore

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_money(value: Decimal | float | int | str) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class SalaryBreakdown:
    total_allowances: Decimal
    total_deductions: Decimal
    overtime_amount: Decimal
    gross: Decimal
    net: Decimal


def calculate_salary(
    config: StaffSalaryConfig,
    overtime_hours: float | Decimal = 0,
    bonus: Decimal | float | int = 0,
) -> SalaryBreakdown:
    """gross = base + allowances + overtime hours x rate + bonus; net = gross - deductions."""
    allowances = to_money(sum((a.amount for a in config.allowances), Decimal("0")))
    deductions = to_money(sum((d.amount for d in config.deductions), Decimal("0")))
    overtime = to_money(Decimal(str(overtime_hours)) * config.overtime_rate)
    gross = to_money(to_money(config.base_salary) + allowances + overtime + to_money(bonus))
    return SalaryBreakdown(
        total_allowances=allowances,
        total_deductions=deductions,
        overtime_amount=overtime,
        gross=gross,
        net=to_money(gross - deductions),
    )


def month_bounds(month: int, year: int) -> tuple[date, date]:
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def pay_date_for(month: int, year: int, pay_day: int) -> date:
    """The configured day of the month following the pay period."""
    if month == 12:
        year, month = year + 1, 1
    else:
        month += 1
    return date(year, month, min(pay_day, calendar.monthrange(year, month)[1]))


def overtime_entries(config: StaffSalaryConfig, hours: float, on: date) -> list[OvertimeEntry]:
    if hours <= 0:
        return []
    return [
        OvertimeEntry(
            date=on,
            hours=hours,
            rate=config.overtime_rate,
            amount=to_money(Decimal(str(hours)) * config.overtime_rate),
            description="Monthly overtime",
        )
    ]


async def generate_payroll(
    month: int,
    year: int,
    *,
    users: UserStore,
    attendance: AttendanceStore,
    configs: StaffSalaryConfigStore,
    records: SalaryRecordStore,
) -> PayrollSummary:
    """Create one draft salary record per active user with an active config."""
    start, end = month_bounds(month, year)
    created = []
    skipped: list[str] = []
    for user in users.list():
        if not user.is_active:
            continue
        config = configs.active_for(user.id)
        if config is None:
            continue
        if records.for_period(user.id, month, year) is not None:
            logger.warning("Payroll %02d/%d: %s already has a salary record, skipped", month, year, user.id)
            skipped.append(user.id)
            continue
        hours = attendance.stats(user.id, start, end).overtime_hours
        record = await records.create_from_config(
            user,
            config,
            month=month,
            year=year,
            overtime=overtime_entries(config, hours, end),
        )
        created.append(record)

    logger.info("Payroll %02d/%d generated: %d records", month, year, len(created))
    zero = Decimal("0")
    return PayrollSummary(
        month=month,
        year=year,
        total_staff=len(created),
        total_gross_salary=to_money(sum((r.gross_salary for r in created), zero)),
        total_net_salary=to_money(sum((r.net_salary for r in created), zero)),
        total_allowances=to_money(sum((a.amount for r in created for a in r.allowances), zero)),
        total_deductions=to_money(sum((d.amount for r in created for d in r.deductions), zero)),
        total_overtime=to_money(sum((o.amount for r in created for o in r.overtime), zero)),
        paid_count=sum(1 for r in created if r.status == SalaryStatus.PAID),
        pending_count=sum(1 for r in created if r.status != SalaryStatus.PAID),
        skipped_users=skipped,
        status="draft",
    )
