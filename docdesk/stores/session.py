"""The signed-in actor and the permission check applied to it."""

from __future__ import annotations

import logging

from docdesk.core.exceptions import ValidationFailedError
from docdesk.core.permissions import has_permission
from docdesk.schemas.user import User
from docdesk.stores.users import UserStore

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(self, users: UserStore, actor: User | None = None) -> None:
        self.users = users
        self.actor = actor

    @property
    def is_authenticated(self) -> bool:
        return self.actor is not None

    async def login(self, email: str, password: str) -> User:
        user = self.users.authenticate(email, password)
        if user is None:
            raise ValidationFailedError("Incorrect email or password")
        self.actor = await self.users.update(user.id, {"last_login": self.users.ctx.now()})
        logger.info("User %s logged in", self.actor.email)
        return self.actor

    def logout(self) -> None:
        self.actor = None

    def has_permission(self, module: str, action: str) -> bool:
        return has_permission(self.actor, module, action)
