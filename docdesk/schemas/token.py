"""Pydantic schemas for JWT tokens."""

from __future__ import annotations

from pydantic import BaseModel

from docdesk.schemas.user import UserRead


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserRead | None = None


class RefreshRequest(BaseModel):
    refresh_token: str
