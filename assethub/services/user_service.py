from __future__ import annotations

import uuid

from assethub.db.models import User
from assethub.services.protocols import UserRepositoryProtocol


class UserService:
    """Thin read-only facade over the user repository."""

    def __init__(self, repository: UserRepositoryProtocol) -> None:
        self._repository = repository

    async def get(self, user_id: uuid.UUID) -> User:
        return await self._repository.get(user_id)

    async def exists(self, user_id: uuid.UUID) -> bool:
        return await self._repository.exists(user_id)


__all__ = ["UserService"]
