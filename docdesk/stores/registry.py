"""
Container for every entity store sharing one ``AppContext``.
"""

from __future__ import annotations

import logging

from docdesk.core.context import AppContext
from docdesk.core.exceptions import DocDeskError
from docdesk.schemas.document import Document, DocumentCreate
from docdesk.services.linker import PartyLinker
from docdesk.stores.attendance import AttendanceStore, LeaveRequestStore
from docdesk.stores.base import EntityStore
from docdesk.stores.builders import BuilderStore
from docdesk.stores.challans import ChallanStore
from docdesk.stores.customers import CustomerStore
from docdesk.stores.documents import DocumentStore
from docdesk.stores.payments import PaymentStore
from docdesk.stores.salary import SalaryRecordStore, StaffSalaryConfigStore
from docdesk.stores.tasks import TaskPermissionStore, TaskStore
from docdesk.stores.users import UserStore

logger = logging.getLogger(__name__)


class Stores:
    def __init__(self, ctx: AppContext) -> None:
        self.ctx = ctx
        self.users = UserStore(ctx)
        self.documents = DocumentStore(ctx)
        self.customers = CustomerStore(ctx)
        self.builders = BuilderStore(ctx)
        self.payments = PaymentStore(ctx)
        self.challans = ChallanStore(ctx)
        self.tasks = TaskStore(ctx)
        self.task_permissions = TaskPermissionStore(ctx)
        self.attendance = AttendanceStore(ctx)
        self.leave_requests = LeaveRequestStore(ctx)
        self.salary_configs = StaffSalaryConfigStore(ctx)
        self.salary_records = SalaryRecordStore(ctx)
        self.linker = PartyLinker(self.customers, self.builders)

    def all(self) -> list[EntityStore]:
        return [
            self.users,
            self.documents,
            self.customers,
            self.builders,
            self.payments,
            self.challans,
            self.tasks,
            self.task_permissions,
            self.attendance,
            self.leave_requests,
            self.salary_configs,
            self.salary_records,
        ]

    async def load_all(self) -> bool:
        """
        Fill every cache from the remote database.

        All tables are read before any cache is replaced.  If one of them
        fails the gateway is marked disconnected, so the app carries on in
        local mode with the caches it already had.  Returns whether the
        remote data was loaded.
        """
        if not self.ctx.remote:
            logger.info("Running in local mode, nothing to load")
            return False
        stores = self.all()
        try:
            fetched = [await store.fetch_all() for store in stores]
        except DocDeskError as e:
            logger.warning("Remote load failed (%s), falling back to local mode", e.message)
            self.ctx.gateway.connected = False  # type: ignore[union-attr]
            return False
        for store, items in zip(stores, fetched):
            store.replace(items)
        return True

    async def reconnect(self) -> bool:
        """Test the gateway again and, when it answers, reload every cache."""
        gateway = self.ctx.gateway
        if gateway is None:
            logger.info("No remote database configured")
            return False
        if not await gateway.test_connection():
            return False
        return await self.load_all()

    async def create_document(self, data: DocumentCreate) -> Document:
        """Create a document, then link its customer and builder."""
        document = await self.documents.create_document(data)
        await self.linker.link(document)
        return document


def build_stores(ctx: AppContext) -> Stores:
    return Stores(ctx)
