"""Declarative base shared by every table model."""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    # Models use classic Column() attributes with plain annotations
    __allow_unmapped__ = True
