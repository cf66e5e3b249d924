"""Tests for salary arithmetic, salary records and payroll generation."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from docdesk.core.exceptions import ConflictError, InvalidTransitionError, ValidationFailedError
from docdesk.core.status import SalaryStatus
from docdesk.schemas.salary import (SalaryComponent, SalaryRecordCreate,
                                    StaffSalaryConfig, StaffSalaryConfigCreate)
from docdesk.schemas.user import Role, UserCreate
from docdesk.services.payroll import (calculate_salary, generate_payroll,
                                      month_bounds, pay_date_for, to_money)


def _config(**overrides) -> StaffSalaryConfig:
    data = {
        "user_id": "USR001",
        "base_salary": Decimal("25000"),
        "allowances": [
            SalaryComponent(type="house_rent", amount=Decimal("5000")),
            SalaryComponent(type="transport", amount=Decimal("2000")),
        ],
        "deductions": [
            SalaryComponent(type="provident_fund", amount=Decimal("3000")),
            SalaryComponent(type="tax", amount=Decimal("1500")),
        ],
        "overtime_rate": Decimal("200"),
    }
    data.update(overrides)
    return StaffSalaryConfig(**data)


def test_calculate_salary_breakdown():
    b = calculate_salary(_config(), overtime_hours=10, bonus=Decimal("1000"))
    assert b.total_allowances == Decimal("7000.00")
    assert b.total_deductions == Decimal("4500.00")
    assert b.overtime_amount == Decimal("2000.00")
    assert b.gross == Decimal("35000.00")
    assert b.net == Decimal("30500.00")


def test_calculate_salary_without_extras():
    b = calculate_salary(_config(allowances=[], deductions=[]))
    assert b.gross == b.net == Decimal("25000.00")


def test_calculate_salary_rounds_half_up_to_cents():
    b = calculate_salary(_config(allowances=[], deductions=[], overtime_rate=Decimal("33.335")), 1)
    assert b.overtime_amount == Decimal("33.34")


def test_fractional_overtime_uses_decimal_arithmetic():
    b = calculate_salary(_config(allowances=[], deductions=[], overtime_rate=Decimal("0.1")), 3)
    assert b.overtime_amount == Decimal("0.30")


def test_to_money_and_period_helpers():
    assert to_money(2.675) == Decimal("2.68")
    assert month_bounds(2, 2028) == (date(2028, 2, 1), date(2028, 2, 29))
    assert pay_date_for(12, 2026, 5) == date(2027, 1, 5)
    assert pay_date_for(1, 2026, 31) == date(2026, 2, 28)


async def _staff(stores, email="ravi@example.com", name="Ravi"):
    return await stores.users.create_user(
        UserCreate(email=email, password="secret123", name=name, role=Role.DATA_ENTRY_STAFF)
    )


@pytest.mark.asyncio
async def test_second_active_config_conflicts(stores):
    user = await _staff(stores)
    await stores.salary_configs.create_config(
        StaffSalaryConfigCreate(user_id=user.id, base_salary=Decimal("20000"))
    )
    with pytest.raises(ConflictError):
        await stores.salary_configs.create_config(
            StaffSalaryConfigCreate(user_id=user.id, base_salary=Decimal("21000"))
        )


@pytest.mark.asyncio
async def test_salary_record_requires_active_config(stores):
    user = await _staff(stores)
    with pytest.raises(ValidationFailedError):
        await stores.salary_records.create_salary_record(
            SalaryRecordCreate(user_id=user.id, pay_period_month=3, pay_period_year=2026),
            stores.users,
            stores.salary_configs,
        )


@pytest.mark.asyncio
async def test_salary_record_lifecycle(stores, admin):
    user = await _staff(stores)
    await stores.salary_configs.create_config(
        StaffSalaryConfigCreate(
            user_id=user.id,
            base_salary=Decimal("25000"),
            allowances=[SalaryComponent(type="transport", amount=Decimal("1500"))],
            deductions=[SalaryComponent(type="tax", amount=Decimal("500"))],
            overtime_rate=Decimal("150"),
        )
    )
    record = await stores.salary_records.create_salary_record(
        SalaryRecordCreate(
            user_id=user.id, pay_period_month=3, pay_period_year=2026, overtime_hours=4
        ),
        stores.users,
        stores.salary_configs,
    )
    assert record.status == SalaryStatus.DRAFT
    assert record.gross_salary == Decimal("27100.00")
    assert record.net_salary == Decimal("26600.00")
    assert record.pay_date == date(2026, 4, 5)
    assert record.overtime[0].amount == Decimal("600.00")

    # bonus re-derives gross and net
    record = await stores.salary_records.update(record.id, {"bonus": Decimal("400")})
    assert record.net_salary == Decimal("27000.00")

    with pytest.raises(InvalidTransitionError):
        await stores.salary_records.pay(record.id)

    record = await stores.salary_records.approve(record.id, admin)
    assert record.approved_by == admin.name
    assert record.approved_at is not None
    record = await stores.salary_records.pay(record.id)
    assert record.status == SalaryStatus.PAID

    with pytest.raises(InvalidTransitionError):
        await stores.salary_records.update(record.id, {"status": SalaryStatus.CANCELLED})
    for change in ({"notes": "late fee"}, {"pay_date": date(2026, 4, 6)}, {"bonus": Decimal("1")}):
        with pytest.raises(ValidationFailedError, match="paid salary record"):
            await stores.salary_records.update(record.id, change)
    assert stores.salary_records.require(record.id).notes is None


@pytest.mark.asyncio
async def test_generate_payroll(stores, clock):
    ravi = await _staff(stores)
    meena = await _staff(stores, "meena@example.com", "Meena")
    unpaid = await _staff(stores, "noconfig@example.com", "No Config")
    inactive = await _staff(stores, "gone@example.com", "Gone")
    await stores.users.update(inactive.id, {"is_active": False})

    for user, base in ((ravi, "30000"), (meena, "20000"), (inactive, "10000")):
        await stores.salary_configs.create_config(
            StaffSalaryConfigCreate(
                user_id=user.id,
                base_salary=Decimal(base),
                deductions=[SalaryComponent(type="tax", amount=Decimal("1000"))],
                overtime_rate=Decimal("100"),
            )
        )

    # Ravi works a ten hour day in the payroll month: 1 h break, 1 h overtime
    clock.set(datetime(2026, 2, 12, 9, 0))
    await stores.attendance.clock_in(ravi)
    clock.set(datetime(2026, 2, 12, 19, 0))
    await stores.attendance.clock_out(ravi)

    summary = await generate_payroll(
        2,
        2026,
        users=stores.users,
        attendance=stores.attendance,
        configs=stores.salary_configs,
        records=stores.salary_records,
    )
    assert summary.total_staff == 2
    assert summary.total_gross_salary == Decimal("50100.00")
    assert summary.total_net_salary == Decimal("48100.00")
    assert summary.total_deductions == Decimal("2000.00")
    assert summary.total_overtime == Decimal("100.00")
    assert summary.pending_count == 2
    assert summary.paid_count == 0
    assert summary.status == "draft"

    records = stores.salary_records.by_period(2, 2026)
    assert {r.user_id for r in records} == {ravi.id, meena.id}
    assert unpaid.id not in {r.user_id for r in records}
    assert all(r.pay_date == date(2026, 3, 5) for r in records)

    # Running it again does not duplicate
    again = await generate_payroll(
        2,
        2026,
        users=stores.users,
        attendance=stores.attendance,
        configs=stores.salary_configs,
        records=stores.salary_records,
    )
    assert again.total_staff == 0
    assert set(again.skipped_users) == {ravi.id, meena.id}
    assert len(stores.salary_records.by_period(2, 2026)) == 2


@pytest.mark.asyncio
async def test_salary_stats(stores, clock):
    user = await _staff(stores)
    other = await _staff(stores, "meena@example.com", "Meena")
    await stores.salary_configs.create_config(
        StaffSalaryConfigCreate(user_id=user.id, base_salary=Decimal("30000"))
    )
    await stores.salary_configs.create_config(
        StaffSalaryConfigCreate(user_id=other.id, base_salary=Decimal("20000"))
    )
    stats = stores.salary_records.stats(stores.salary_configs, date(2026, 3, 15))
    assert stats.total_staff == 2
    assert stats.total_monthly_salary == Decimal("50000.00")
    assert stats.average_salary == Decimal("25000.00")
    assert stats.highest_salary == Decimal("30000.00")
    assert stats.lowest_salary == Decimal("20000.00")
