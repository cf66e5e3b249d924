"""
Sign-in, token rotation and user administration.

Tokens are returned in the body and mirrored into HttpOnly cookies so the
admin SPA and scripted clients can both authenticate.
"""

from __future__ import annotations

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from docdesk.api.v1.deps import (get_current_active_user, get_stores,
                                 require_permission)
from docdesk.core.config import settings
from docdesk.core.exceptions import ValidationFailedError
from docdesk.core.security import (create_access_token, create_refresh_token,
                                   decode_refresh_token)
from docdesk.schemas.common import DeleteResponse, LogoutResponse
from docdesk.schemas.token import RefreshRequest, Token
from docdesk.schemas.user import User, UserCreate, UserRead, UserUpdate
from docdesk.stores.registry import Stores
from docdesk.stores.session import SessionStore

router = APIRouter(prefix="/auth", tags=["auth"])

_AUTH_COOKIES = ("access_token", "refresh_token")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _cookie(response: Response, name: str, value: str, lifetime_s: int) -> None:
    response.set_cookie(
        name, value,
        max_age=lifetime_s,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )


def _token_pair(response: Response, user: User) -> Token:
    pair = Token(
        access_token=create_access_token(user.id),
        refresh_token=create_refresh_token(user.id),
        user=UserRead.model_validate(user),
    )
    _cookie(response, "access_token", f"Bearer {pair.access_token}",
            settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60)
    _cookie(response, "refresh_token", pair.refresh_token,
            settings.REFRESH_TOKEN_EXPIRE_DAYS * 86400)
    return pair


@router.post("/login", response_model=Token)
async def login(
    response: Response,
    form: OAuth2PasswordRequestForm = Depends(),
    stores: Stores = Depends(get_stores),
) -> Token:
    try:
        user = await SessionStore(stores.users).login(form.username, form.password)
    except ValidationFailedError:
        raise _unauthorized("Incorrect email or password") from None
    return _token_pair(response, user)


@router.post("/refresh", response_model=Token)
async def refresh(
    response: Response,
    body: RefreshRequest | None = None,
    cookie_token: str | None = Cookie(None, alias="refresh_token"),
    stores: Stores = Depends(get_stores),
) -> Token:
    """Swap a refresh token (JSON body first, then cookie) for a new pair."""
    raw = (body.refresh_token if body else None) or cookie_token
    if not raw:
        raise _unauthorized("No refresh token supplied")

    claims = decode_refresh_token(raw)
    if claims is None:
        raise _unauthorized("Invalid or expired refresh token")

    user = stores.users.get(claims.get("sub", ""))
    if user is None or not user.is_active:
        raise _unauthorized("Account unavailable")
    return _token_pair(response, user)


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response) -> LogoutResponse:
    for name in _AUTH_COOKIES:
        response.delete_cookie(name)
    return LogoutResponse(message="Logged out")


@router.get("/me", response_model=UserRead)
async def me(user: User = Depends(get_current_active_user)) -> User:
    return user


# ── User management ─────────────────────────────────────────────────
@router.get("/users", response_model=list[UserRead])
async def list_users(
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("users", "read")),
) -> list[User]:
    return stores.users.list()


@router.post("/users", response_model=UserRead, status_code=201)
async def create_user(
    body: UserCreate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("users", "create")),
) -> User:
    """Create a new user account; role defaults fill missing permissions."""
    return await stores.users.create_user(body)


@router.put("/users/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    body: UserUpdate,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("users", "update")),
) -> User:
    return await stores.users.update_user(user_id, body)


@router.delete("/users/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: str,
    stores: Stores = Depends(get_stores),
    _actor: User = Depends(require_permission("users", "delete")),
) -> DeleteResponse:
    await stores.users.delete(user_id)
    return DeleteResponse(success=True, message=f"User {user_id} deleted")
