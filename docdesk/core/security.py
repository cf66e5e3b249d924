"""
Password hashing (bcrypt) and the signed access/refresh tokens handed out
at login.  Both token kinds carry the user id in ``sub`` and their kind in
``type`` so one can never stand in for the other.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Literal

from jose import JWTError, jwt
from passlib.context import CryptContext

from docdesk.core.config import settings

TokenKind = Literal["access", "refresh"]

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


def _lifetime(kind: TokenKind) -> timedelta:
    if kind == "access":
        return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)


def issue_token(subject: Any, kind: TokenKind, lifetime: timedelta | None = None) -> str:
    claims = {
        "sub": str(subject),
        "type": kind,
        "exp": datetime.now(timezone.utc) + (lifetime or _lifetime(kind)),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def read_token(token: str, kind: TokenKind) -> dict | None:
    """Claims of a valid, unexpired token of the given kind, else ``None``."""
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    return claims if claims.get("type") == kind else None


def create_access_token(subject: Any, expires_delta: timedelta | None = None) -> str:
    return issue_token(subject, "access", expires_delta)


def create_refresh_token(subject: Any) -> str:
    return issue_token(subject, "refresh")


def decode_access_token(token: str) -> dict | None:
    return read_token(token, "access")


def decode_refresh_token(token: str) -> dict | None:
    return read_token(token, "refresh")
