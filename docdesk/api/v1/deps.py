"""
FastAPI dependencies: store access, auth guards and proxy engine lookup.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncEngine

from docdesk.core.permissions import has_permission
from docdesk.core.security import decode_access_token
from docdesk.db.session import get_engine
from docdesk.schemas.gateway import DatabaseConfig
from docdesk.schemas.user import User
from docdesk.stores.registry import Stores


# ── Stores ──────────────────────────────────────────────────────────
def get_stores(request: Request) -> Stores:
    return request.app.state.stores


# ── Proxy engines ───────────────────────────────────────────────────
def get_engine_factory() -> Callable[[DatabaseConfig], AsyncEngine]:
    return get_engine


# ── Auth ────────────────────────────────────────────────────────────
bearer = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def _bearer_or_cookie(header_token: str | None, cookie_value: str | None) -> str | None:
    if header_token:
        return header_token
    if cookie_value:
        return cookie_value.removeprefix("Bearer ")
    return None


async def get_current_user(
    header_token: Optional[str] = Depends(bearer),
    access_token: Optional[str] = Cookie(default=None),
    stores: Stores = Depends(get_stores),
) -> User:
    """The user named by the access token in the Authorization header,
    falling back to the ``access_token`` cookie set at login."""
    raw = _bearer_or_cookie(header_token, access_token)
    claims = decode_access_token(raw) if raw else None
    user = stores.users.get(claims["sub"]) if claims and claims.get("sub") else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_active_user(user: User = Depends(get_current_user)) -> User:
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")
    return user


def require_permission(module: str, action: str) -> Callable:
    """Dependency factory: the actor must hold ``(module, action)``."""

    async def _guard(actor: User = Depends(get_current_active_user)) -> User:
        if not has_permission(actor, module, action):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission {module}:{action}",
            )
        return actor

    return _guard
