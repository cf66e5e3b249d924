"""Tests for role defaults, the permission check and the session store."""

import pytest

from docdesk.core.exceptions import ValidationFailedError
from docdesk.core.permissions import default_permissions, has_permission
from docdesk.schemas.user import Permission, Role, User, UserCreate
from docdesk.stores.session import SessionStore


def _user(role: Role, permissions=None) -> User:
    return User(email="u@example.com", name="U", role=role, permissions=permissions or [])


def test_main_admin_passes_everything():
    admin = _user(Role.MAIN_ADMIN)
    assert has_permission(admin, "salary", "manage")
    assert has_permission(admin, "anything", "at_all")


def test_explicit_grants_only():
    clerk = _user(Role.DATA_ENTRY_STAFF, default_permissions(Role.DATA_ENTRY_STAFF))
    assert has_permission(clerk, "documents", "create")
    assert not has_permission(clerk, "documents", "delete")
    assert not has_permission(clerk, "salary", "read")


def test_revoked_grant_is_denied():
    user = _user(
        Role.CHALLAN_STAFF,
        [Permission(module="challans", action="create", granted=False)],
    )
    assert not has_permission(user, "challans", "create")
    assert not has_permission(None, "documents", "read")


def test_role_defaults():
    assert default_permissions(Role.MAIN_ADMIN) == []
    staff_admin = {(p.module, p.action) for p in default_permissions(Role.STAFF_ADMIN)}
    assert ("salary", "manage") in staff_admin
    assert ("users", "delete") not in staff_admin


@pytest.mark.asyncio
async def test_new_users_get_role_defaults(stores):
    user = await stores.users.create_user(
        UserCreate(email="d@example.com", password="pass-1234", name="D", role=Role.DOCUMENT_DELIVERY_STAFF)
    )
    assert {(p.module, p.action) for p in user.permissions} == {
        ("documents", "read"),
        ("documents", "update"),
        ("customers", "read"),
        ("tasks", "read"),
        ("tasks", "update"),
    }
    custom = await stores.users.create_user(
        UserCreate(
            email="e@example.com",
            password="pass-1234",
            name="E",
            permissions=[Permission(module="payments", action="read")],
        )
    )
    assert [(p.module, p.action) for p in custom.permissions] == [("payments", "read")]


@pytest.mark.asyncio
async def test_session_login_and_logout(stores):
    await stores.users.create_user(
        UserCreate(email="f@example.com", password="pass-1234", name="F", role=Role.CHALLAN_STAFF)
    )
    session = SessionStore(stores.users)
    assert not session.is_authenticated
    assert not session.has_permission("challans", "create")

    with pytest.raises(ValidationFailedError):
        await session.login("f@example.com", "nope")

    user = await session.login("F@example.com", "pass-1234")
    assert session.is_authenticated
    assert user.last_login is not None
    assert session.has_permission("challans", "create")
    assert not session.has_permission("salary", "read")

    session.logout()
    assert session.actor is None


@pytest.mark.asyncio
async def test_seed_admin_only_when_empty(stores, ctx):
    admin = await stores.users.seed_admin(ctx.settings)
    assert admin.role == Role.MAIN_ADMIN
    assert await stores.users.seed_admin(ctx.settings) is None
    assert len(stores.users) == 1
