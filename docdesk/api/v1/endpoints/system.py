"""
Service status: storage mode, gateway connectivity and store state.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from docdesk.api.v1.deps import get_stores, require_permission
from docdesk.schemas.common import StatusResponse
from docdesk.schemas.user import User
from docdesk.stores.registry import Stores

router = APIRouter(tags=["system"])


def _status(stores: Stores) -> StatusResponse:
    return StatusResponse(
        mode=stores.ctx.mode,
        connected=stores.ctx.remote,
        documents=len(stores.documents),
        customers=len(stores.customers),
        builders=len(stores.builders),
        tasks=len(stores.tasks),
        loading=[s.table for s in stores.all() if s.loading],
    )


@router.get("/status", response_model=StatusResponse)
async def service_status(stores: Stores = Depends(get_stores)) -> StatusResponse:
    return _status(stores)


@router.post("/status/reconnect", response_model=StatusResponse)
async def reconnect(
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("settings", "update")),
) -> StatusResponse:
    """Retry the remote database; on success every cache is reloaded from it."""
    await stores.reconnect()
    return _status(stores)
