"""Small response schemas shared by several routers."""

from __future__ import annotations

from pydantic import BaseModel


class DeleteResponse(BaseModel):
    success: bool
    message: str


class LogoutResponse(BaseModel):
    message: str


class StatusResponse(BaseModel):
    mode: str  # local | remote
    connected: bool
    documents: int
    customers: int
    builders: int
    tasks: int
    loading: list[str]
