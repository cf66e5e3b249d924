"""
Salary endpoints for staff configs, salary records and payroll generation.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from docdesk.api.v1.deps import get_stores, require_permission
from docdesk.schemas.common import DeleteResponse
from docdesk.schemas.salary import (PayrollRequest, PayrollSummary,
                                    SalaryRecord, SalaryRecordCreate,
                                    SalaryRecordUpdate, SalaryStats,
                                    StaffSalaryConfig, StaffSalaryConfigCreate,
                                    StaffSalaryConfigUpdate)
from docdesk.schemas.user import User
from docdesk.services.payroll import generate_payroll
from docdesk.stores.base import intersect
from docdesk.stores.registry import Stores

router = APIRouter(prefix="/salary", tags=["salary"])


# ── Configs ─────────────────────────────────────────────────────────
@router.get("/configs", response_model=list[StaffSalaryConfig])
async def list_configs(
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("salary", "read")),
) -> list[StaffSalaryConfig]:
    return stores.salary_configs.list()


@router.post("/configs", response_model=StaffSalaryConfig, status_code=201)
async def create_config(
    body: StaffSalaryConfigCreate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("salary", "manage")),
) -> StaffSalaryConfig:
    stores.users.require(body.user_id)
    return await stores.salary_configs.create_config(body)


@router.put("/configs/{config_id}", response_model=StaffSalaryConfig)
async def update_config(
    config_id: str,
    body: StaffSalaryConfigUpdate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("salary", "manage")),
) -> StaffSalaryConfig:
    return await stores.salary_configs.update_config(config_id, body)


@router.delete("/configs/{config_id}", response_model=DeleteResponse)
async def delete_config(
    config_id: str,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("salary", "manage")),
) -> DeleteResponse:
    await stores.salary_configs.delete(config_id)
    return DeleteResponse(success=True, message=f"Salary config {config_id} deleted")


# ── Records ─────────────────────────────────────────────────────────
@router.get("/records", response_model=list[SalaryRecord])
async def list_records(
    user_id: Optional[str] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("salary", "read")),
) -> list[SalaryRecord]:
    records = stores.salary_records.list()
    if month is not None and year is not None:
        records = stores.salary_records.by_period(month, year)
    if user_id is not None:
        records = intersect(records, stores.salary_records.by_user(user_id))
    return records


@router.get("/stats", response_model=SalaryStats)
async def salary_stats(
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("salary", "read")),
) -> SalaryStats:
    return stores.salary_records.stats(stores.salary_configs)


@router.post("/records", response_model=SalaryRecord, status_code=201)
async def create_record(
    body: SalaryRecordCreate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("salary", "manage")),
) -> SalaryRecord:
    return await stores.salary_records.create_salary_record(
        body, stores.users, stores.salary_configs
    )


@router.put("/records/{record_id}", response_model=SalaryRecord)
async def update_record(
    record_id: str,
    body: SalaryRecordUpdate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("salary", "manage")),
) -> SalaryRecord:
    return await stores.salary_records.update_salary_record(record_id, body)


@router.post("/records/{record_id}/approve", response_model=SalaryRecord)
async def approve_record(
    record_id: str,
    stores: Stores = Depends(get_stores),
    actor: User = Depends(require_permission("salary", "manage")),
) -> SalaryRecord:
    return await stores.salary_records.approve(record_id, actor)


@router.post("/records/{record_id}/pay", response_model=SalaryRecord)
async def pay_record(
    record_id: str,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("salary", "manage")),
) -> SalaryRecord:
    return await stores.salary_records.pay(record_id)


@router.delete("/records/{record_id}", response_model=DeleteResponse)
async def delete_record(
    record_id: str,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("salary", "manage")),
) -> DeleteResponse:
    await stores.salary_records.delete(record_id)
    return DeleteResponse(success=True, message=f"Salary record {record_id} deleted")


# ── Payroll ─────────────────────────────────────────────────────────
@router.post("/payroll", response_model=PayrollSummary)
async def run_payroll(
    body: PayrollRequest,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("salary", "manage")),
) -> PayrollSummary:
    """Generate draft salary records for every configured active user."""
    return await generate_payroll(
        body.month,
        body.year,
        users=stores.users,
        attendance=stores.attendance,
        configs=stores.salary_configs,
        records=stores.salary_records,
    )
