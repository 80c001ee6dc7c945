"""User lookups backing the existence checks of the favourites workflow."""

from __future__ import annotations

import uuid

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from assethub.db.models import User
from assethub.errors import UserNotFoundError


class UserRepository:
    """Read-only access to users."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: uuid.UUID) -> User:
        """Return the user or raise :class:`UserNotFoundError`."""

        user = await self._session.get(User, user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    async def exists(self, user_id: uuid.UUID) -> bool:
        query = select(exists().where(User.id == user_id))
        return bool(await self._session.scalar(query))
