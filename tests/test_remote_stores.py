"""
Stores in remote mode: every write goes through the gateway to the in-process
query proxy, backed by sqlite.
"""

import asyncio
from datetime import date, datetime
from decimal import Decimal

import httpx
import pytest

from docdesk.core.config import settings
from docdesk.core.context import AppContext
from docdesk.core.exceptions import (ConflictError, NotFoundError, QueryFailedError,
                                     UnavailableError)
from docdesk.core.status import (AttendanceStatus, DocumentStatus, LeaveStatus,
                                 SalaryStatus, TaskStatus)
from docdesk.gateway.remote import RemoteGateway
from docdesk.schemas.attendance import LeaveRequestCreate, LeaveType
from docdesk.schemas.document import CustomerCreate, DocumentCreate, DocumentType
from docdesk.schemas.finance import InstallmentCreate, PaymentCreate, PaymentStatus
from docdesk.schemas.salary import (BankDetails, SalaryComponent,
                                    SalaryRecordCreate, StaffSalaryConfigCreate)
from docdesk.schemas.task import (CommentCreate, TaskActions, TaskCreate,
                                  TaskPermissionSet, TaskRestrictions, TaskType)
from docdesk.schemas.user import Role, UserCreate
from docdesk.stores.registry import Stores


@pytest.mark.asyncio
async def test_create_update_and_reload(remote_stores, clock):
    assert remote_stores.ctx.mode == "remote"
    doc = await remote_stores.create_document(
        DocumentCreate(
            document_type=DocumentType.AGREEMENT,
            customer_name="A",
            customer_phone="123",
            builder_name="B",
        )
    )
    assert doc.id == "1"
    assert doc.document_number == "AGREEMENT/2026/001"
    assert doc.created_at == datetime(2026, 3, 10, 9, 0)

    clock.set(datetime(2026, 3, 12, 11, 0))
    doc = await remote_stores.documents.update_status(doc.id, DocumentStatus.COLLECTED)
    assert doc.collection_date == datetime(2026, 3, 12, 11, 0)

    fresh = Stores(remote_stores.ctx)
    await fresh.load_all()
    reloaded = fresh.documents.require("1")
    assert reloaded.status == DocumentStatus.COLLECTED
    assert reloaded.collection_date == datetime(2026, 3, 12, 11, 0)
    assert reloaded.notes == []
    assert [c.documents for c in fresh.customers.list()] == [["1"]]
    assert fresh.builders.by_name("b").contact_person == "Contact Person"


@pytest.mark.asyncio
async def test_add_document_is_idempotent(remote_stores):
    customer = await remote_stores.customers.create_customer(CustomerCreate(name="A", phone="123"))
    again = await remote_stores.customers.add_document(customer.id, "DOC-X")
    same = await remote_stores.customers.add_document(customer.id, "DOC-X")
    assert again.documents == same.documents == ["DOC-X"]


@pytest.mark.asyncio
async def test_payment_amounts_survive_round_trip(remote_stores):
    doc = await remote_stores.documents.create_document(
        DocumentCreate(document_type=DocumentType.SALE_DEED)
    )
    payment = await remote_stores.payments.create_payment(
        PaymentCreate(document_id=doc.id, total_amount=Decimal("2500.50"))
    )
    payment = await remote_stores.payments.record_payment(payment.id, InstallmentCreate(amount=Decimal("500.50")))
    assert payment.document_id == doc.id
    assert payment.payment_status == PaymentStatus.PARTIAL
    assert payment.pending_amount == Decimal("2000")


@pytest.mark.asyncio
async def test_conflicts_are_checked_before_writing(remote_stores):
    await remote_stores.customers.create_customer(CustomerCreate(name="A", phone="123"))
    with pytest.raises(ConflictError):
        await remote_stores.customers.create_customer(CustomerCreate(name="B", phone="123"))
    result = await remote_stores.ctx.gateway.execute("SELECT COUNT(*) AS n FROM customers")
    assert result.data == [{"n": 1}]


@pytest.mark.asyncio
async def test_delete_of_vanished_row(remote_stores):
    first = await remote_stores.customers.create_customer(CustomerCreate(name="A", phone="123"))
    second = await remote_stores.customers.create_customer(CustomerCreate(name="B", phone="456"))

    await remote_stores.customers.delete(first.id)
    assert remote_stores.customers.get(first.id) is None

    # removed behind the store's back
    await remote_stores.ctx.gateway.execute("DELETE FROM customers WHERE id = ?", [int(second.id)])
    with pytest.raises(NotFoundError):
        await remote_stores.customers.delete(second.id)
    assert remote_stores.customers.get(second.id) is None


@pytest.mark.asyncio
async def test_query_errors_are_typed(remote_stores):
    with pytest.raises(QueryFailedError, match="Query failed"):
        await remote_stores.ctx.gateway.execute("SELECT * FROM no_such_table")
    result = await remote_stores.ctx.gateway.query("SELECT * FROM no_such_table")
    assert result.success is False


async def _staff(stores: Stores):
    return await stores.users.create_user(
        UserCreate(email="staff@example.com", password="staff-pass-1", name="Staff One")
    )


# ── Proxy replies without insertId ──────────────────────────────────
@pytest.mark.asyncio
async def test_writes_without_insert_id(php_stores, admin, clock):
    doc = await php_stores.create_document(
        DocumentCreate(
            document_type=DocumentType.AGREEMENT,
            customer_name="A",
            customer_phone="123",
            builder_name="B",
            property_details="Flat 4B",
        )
    )
    assert doc.id == "1"
    assert doc.document_number == "AGREEMENT/2026/001"
    customer = php_stores.customers.by_phone("123")
    assert customer.documents == ["1"]
    assert customer.address == "Flat 4B"
    assert php_stores.builders.by_name("B").documents == ["1"]

    payment = await php_stores.payments.create_payment(
        PaymentCreate(document_id=doc.id, total_amount=Decimal("900"))
    )
    assert payment.id == "1"

    user = await _staff(php_stores)
    assert user.id == "1"
    assert php_stores.users.by_email("staff@example.com").id == "1"

    record = await php_stores.attendance.clock_in(user)
    assert record.id == "1"
    assert record.date == date(2026, 3, 10)

    leave = await php_stores.leave_requests.submit(
        LeaveRequestCreate(
            leave_type=LeaveType.CASUAL_LEAVE,
            start_date=date(2026, 3, 20),
            end_date=date(2026, 3, 21),
            reason="Family",
        ),
        user,
    )
    assert leave.total_days == 2

    config = await php_stores.salary_configs.create_config(
        StaffSalaryConfigCreate(user_id=user.id, base_salary=Decimal("30000"))
    )
    assert config.user_id == "1"
    salary = await php_stores.salary_records.create_salary_record(
        SalaryRecordCreate(user_id=user.id, pay_period_month=2, pay_period_year=2026),
        php_stores.users,
        php_stores.salary_configs,
    )
    assert salary.id == "1"
    assert salary.net_salary == Decimal("30000")

    task = await php_stores.tasks.create_task(TaskCreate(title="Collect deed", assigned_to=user.id), admin)
    assert task.id == "1"
    assert task.status == TaskStatus.PENDING

    entries = await php_stores.task_permissions.replace_for_user(
        user.id, [TaskPermissionSet(task_type=TaskType.DATA_ENTRY, permissions=TaskActions(can_view=True))]
    )
    assert [e.id for e in entries] == ["1"]
    assert php_stores.task_permissions.has_task_permission(user, TaskType.DATA_ENTRY, "can_view")


@pytest.mark.asyncio
async def test_insert_without_natural_key_is_unavailable(php_stores):
    php_stores.customers.natural_key = ()
    with pytest.raises(UnavailableError, match="returned no id"):
        await php_stores.customers.create_customer(CustomerCreate(name="A", phone="123"))


# ── Round trips through a fresh load ────────────────────────────────
@pytest.mark.asyncio
async def test_people_round_trip(remote_stores, admin, clock):
    user = await _staff(remote_stores)
    await remote_stores.attendance.clock_in(user, location="Office")
    clock.set(datetime(2026, 3, 10, 18, 0))
    await remote_stores.attendance.clock_out(user)
    await remote_stores.attendance.mark_attendance(
        user.id, date(2026, 3, 11), AttendanceStatus.ABSENT, user_name=user.name
    )
    leave = await remote_stores.leave_requests.submit(
        LeaveRequestCreate(
            leave_type=LeaveType.SICK_LEAVE,
            start_date=date(2026, 3, 12),
            end_date=date(2026, 3, 12),
            reason="Flu",
        ),
        user,
    )
    await remote_stores.leave_requests.approve(leave.id, admin, "Get well")
    await remote_stores.task_permissions.replace_for_user(
        user.id,
        [
            TaskPermissionSet(
                task_type=TaskType.DOCUMENT_DELIVERY,
                permissions=TaskActions(can_view=True, can_change_status=True),
                restrictions=TaskRestrictions(
                    max_tasks_per_day=5, allowed_statuses=[TaskStatus.IN_PROGRESS]
                ),
            )
        ],
    )

    fresh = Stores(remote_stores.ctx)
    assert await fresh.load_all()

    staff = fresh.users.authenticate("staff@example.com", "staff-pass-1")
    assert staff is not None
    assert staff.id == user.id
    assert staff.is_active is True
    assert staff.role == Role.DATA_ENTRY_STAFF
    assert staff.permissions == user.permissions

    day = fresh.attendance.for_day(user.id, date(2026, 3, 10))
    assert day.clock_in_time == datetime(2026, 3, 10, 9, 0)
    assert day.clock_out_time == datetime(2026, 3, 10, 18, 0)
    assert day.total_hours == 8.0
    assert day.location == "Office"
    assert fresh.attendance.for_day(user.id, date(2026, 3, 11)).status == AttendanceStatus.ABSENT

    [request] = fresh.leave_requests.by_user(user.id)
    assert request.status == LeaveStatus.APPROVED
    assert request.reviewed_by == admin.name
    assert request.review_comments == "Get well"

    [entry] = fresh.task_permissions.for_user(user.id)
    assert entry.restrictions.max_tasks_per_day == 5
    assert entry.restrictions.allowed_statuses == [TaskStatus.IN_PROGRESS]
    assert fresh.task_permissions.has_task_permission(staff, TaskType.DOCUMENT_DELIVERY, "can_change_status")
    assert not fresh.task_permissions.has_task_permission(staff, TaskType.DOCUMENT_DELIVERY, "can_delete")
    assert not fresh.task_permissions.has_task_permission(staff, TaskType.DATA_ENTRY, "can_view")


@pytest.mark.asyncio
async def test_salary_round_trip(remote_stores, admin):
    user = await _staff(remote_stores)
    config = await remote_stores.salary_configs.create_config(
        StaffSalaryConfigCreate(
            user_id=user.id,
            base_salary=Decimal("30000.00"),
            allowances=[SalaryComponent(type="transport", amount=Decimal("1500.50"))],
            deductions=[SalaryComponent(type="pf", amount=Decimal("1800"))],
            overtime_rate=Decimal("200"),
            bank_details=BankDetails(
                account_number="0011223344",
                bank_name="State Bank",
                ifsc_code="SBIN0000001",
                account_holder_name="Staff One",
            ),
        )
    )
    record = await remote_stores.salary_records.create_salary_record(
        SalaryRecordCreate(
            user_id=user.id,
            pay_period_month=2,
            pay_period_year=2026,
            overtime_hours=2.5,
            bonus=Decimal("1000"),
        ),
        remote_stores.users,
        remote_stores.salary_configs,
    )
    await remote_stores.salary_records.approve(record.id, admin)
    await remote_stores.salary_records.pay(record.id)

    fresh = Stores(remote_stores.ctx)
    assert await fresh.load_all()

    loaded_config = fresh.salary_configs.active_for(user.id)
    assert loaded_config.id == config.id
    assert loaded_config.is_active is True
    assert loaded_config.base_salary == Decimal("30000")
    assert loaded_config.allowances[0].amount == Decimal("1500.50")
    assert loaded_config.bank_details.ifsc_code == "SBIN0000001"

    loaded = fresh.salary_records.for_period(user.id, 2, 2026)
    assert loaded.status == SalaryStatus.PAID
    assert loaded.approved_by == admin.name
    assert loaded.bonus == Decimal("1000")
    assert loaded.overtime[0].hours == 2.5
    assert loaded.gross_salary == record.gross_salary
    assert loaded.net_salary == record.net_salary


@pytest.mark.asyncio
async def test_task_round_trip(remote_stores, admin, clock):
    doc = await remote_stores.documents.create_document(
        DocumentCreate(document_type=DocumentType.SALE_DEED)
    )
    task = await remote_stores.tasks.create_task(
        TaskCreate(
            title="Deliver deed",
            type=TaskType.DOCUMENT_DELIVERY,
            document_id=doc.id,
            due_date=datetime(2026, 3, 12, 17, 0),
            tags=["urgent", "east"],
        ),
        admin,
    )
    clock.advance(hours=1)
    await remote_stores.tasks.add_comment(task.id, CommentCreate(content="Customer called"), admin)
    await remote_stores.tasks.update_task_status(task.id, TaskStatus.IN_PROGRESS)

    fresh = Stores(remote_stores.ctx)
    assert await fresh.load_all()
    loaded = fresh.tasks.require(task.id)
    assert loaded.status == TaskStatus.IN_PROGRESS
    assert loaded.document_id == doc.id
    assert loaded.assigned_to == admin.id
    assert loaded.tags == ["urgent", "east"]
    assert [c.content for c in loaded.comments] == ["Customer called"]
    assert loaded.comments[0].created_at == datetime(2026, 3, 10, 10, 0)
    assert loaded.due_date == datetime(2026, 3, 12, 17, 0)
    assert fresh.tasks.by_type(TaskType.DOCUMENT_DELIVERY) == [loaded]


# ── Loading flag ────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_loading_tracks_overlapping_requests(db_config, clock):
    gates = [asyncio.Event(), asyncio.Event()]
    arrived: list[asyncio.Event] = []

    async def handler(request):
        if request.url.path.endswith("test-db-connection"):
            return httpx.Response(200, json={"success": True})
        gate = gates[len(arrived)]
        arrived.append(gate)
        await gate.wait()
        return httpx.Response(200, json={"success": True, "data": []})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    gateway = RemoteGateway("http://proxy.test/api", db_config, client=client)
    assert await gateway.test_connection()
    store = Stores(AppContext(settings=settings, gateway=gateway, clock=clock)).customers

    first = asyncio.create_task(store.fetch_all())
    second = asyncio.create_task(store.fetch_all())
    while len(arrived) < 2:
        await asyncio.sleep(0)
    assert store.state == "loading"

    gates[0].set()
    await first
    assert store.loading

    gates[1].set()
    await second
    assert not store.loading
    assert store.state == "idle"
    await client.aclose()
