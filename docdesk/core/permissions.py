"""
Role-based permission matrix and the single permission check used by the
session store and the API guards.
"""

from __future__ import annotations

from docdesk.schemas.user import Permission, Role, User

CRUD = ("create", "read", "update", "delete")

# Default (module, action) grants handed to new users of each role.
# main_admin needs no entries: it passes every check.
ROLE_PERMISSIONS: dict[Role, list[tuple[str, str]]] = {
    Role.MAIN_ADMIN: [],
    Role.STAFF_ADMIN: [
        *[("documents", a) for a in CRUD],
        *[("customers", a) for a in CRUD],
        *[("builders", a) for a in CRUD],
        ("payments", "create"),
        ("payments", "read"),
        ("payments", "update"),
        ("challans", "read"),
        ("challans", "update"),
        *[("tasks", a) for a in CRUD],
        ("attendance", "read"),
        ("attendance", "manage"),
        ("leave", "read"),
        ("leave", "manage"),
        ("users", "create"),
        ("users", "read"),
        ("users", "update"),
        ("salary", "read"),
        ("salary", "manage"),
    ],
    Role.CHALLAN_STAFF: [
        ("documents", "read"),
        ("challans", "create"),
        ("challans", "read"),
        ("challans", "update"),
        ("payments", "read"),
        ("tasks", "read"),
        ("tasks", "update"),
    ],
    Role.FIELD_COLLECTION_STAFF: [
        ("documents", "read"),
        ("documents", "update"),
        ("customers", "read"),
        ("builders", "read"),
        ("tasks", "read"),
        ("tasks", "update"),
    ],
    Role.DATA_ENTRY_STAFF: [
        ("documents", "create"),
        ("documents", "read"),
        ("documents", "update"),
        ("customers", "create"),
        ("customers", "read"),
        ("customers", "update"),
        ("builders", "create"),
        ("builders", "read"),
        ("builders", "update"),
        ("tasks", "read"),
        ("tasks", "update"),
    ],
    Role.DOCUMENT_DELIVERY_STAFF: [
        ("documents", "read"),
        ("documents", "update"),
        ("customers", "read"),
        ("tasks", "read"),
        ("tasks", "update"),
    ],
}


def default_permissions(role: Role) -> list[Permission]:
    return [
        Permission(module=module, action=action)
        for module, action in ROLE_PERMISSIONS.get(role, [])
    ]


def has_permission(user: User | None, module: str, action: str) -> bool:
    """
    ``main_admin`` passes unconditionally; anyone else needs an explicit
    granted entry for that exact (module, action) pair.
    """
    if user is None:
        return False
    if user.role == Role.MAIN_ADMIN:
        return True
    return any(
        p.module == module and p.action == action and p.granted
        for p in user.permissions
    )
