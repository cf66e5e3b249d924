"""User accounts: CRUD, lookup by email and password authentication."""

from __future__ import annotations

import logging
from typing import Any

from docdesk.core.config import Settings
from docdesk.core.exceptions import ConflictError
from docdesk.core.permissions import default_permissions
from docdesk.core.security import get_password_hash, verify_password
from docdesk.schemas.user import Role, User, UserCreate, UserUpdate
from docdesk.stores.base import EntityStore

logger = logging.getLogger(__name__)


class UserStore(EntityStore[User]):
    model = User
    name = "User"
    table = "users"
    id_prefix = "USR"
    columns = (
        "email",
        "name",
        "role",
        "password_hash",
        "permissions",
        "is_active",
        "last_login",
        "created_at",
        "updated_at",
    )
    json_columns = frozenset({"permissions"})
    bool_columns = frozenset({"is_active"})
    natural_key = ("email",)

    def build(self, partial: dict[str, Any]) -> User:
        if partial.get("permissions") is None:
            partial["permissions"] = default_permissions(Role(partial.get("role", Role.DATA_ENTRY_STAFF)))
        return super().build(partial)

    def check(self, item: User, existing_id: str | None = None) -> None:
        other = self.by_email(item.email)
        if other is not None and other.id != existing_id:
            raise ConflictError("Email already registered")

    def by_email(self, email: str) -> User | None:
        email = email.strip().lower()
        return next((u for u in self._items.values() if u.email.lower() == email), None)

    def authenticate(self, email: str, password: str) -> User | None:
        """Return the active user matching the credentials, else ``None``."""
        user = self.by_email(email)
        if user is None or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    async def create_user(self, data: UserCreate) -> User:
        payload = data.model_dump(exclude={"password"})
        payload["password_hash"] = get_password_hash(data.password)
        return await self.create(payload)

    async def update_user(self, id: str, data: UserUpdate) -> User:
        changes = data.model_dump(exclude_unset=True, exclude={"password"})
        if data.password:
            changes["password_hash"] = get_password_hash(data.password)
        return await self.update(id, changes)

    async def seed_admin(self, conf: Settings) -> User | None:
        """Create the first main_admin when there are no users at all."""
        if self._items:
            return None
        admin = await self.create_user(
            UserCreate(
                email=conf.FIRST_ADMIN_EMAIL,
                password=conf.FIRST_ADMIN_PASSWORD,
                name=conf.FIRST_ADMIN_NAME,
                role=Role.MAIN_ADMIN,
            )
        )
        logger.info("Default admin created: %s (password: <redacted>)", admin.email)
        return admin
