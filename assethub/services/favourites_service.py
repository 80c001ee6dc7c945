"""Business logic powering the favourites API endpoints.

:class:`FavouritesService` enforces the rules that span more than one
repository:

* ``add`` – the user and asset must exist and the pair must not already be
  favourited.  The pre-check only yields a friendlier error; the store's unique
  constraint is what actually prevents duplicates.
* ``remove`` – deletion is keyed by ``(user_id, asset_id)`` and is not
  idempotent.  Removing a pair twice fails the second time.
* ``list_keyset`` / ``list_offset`` – confirm the user exists, then delegate
  to the store's listing modes.
"""

from __future__ import annotations

import logging
import uuid

from assethub.db.models import Asset, Favourite, utcnow
from assethub.db.repositories.types import FavouritePage
from assethub.errors import FavouriteAlreadyExistsError, UserNotFoundError
from assethub.services.protocols import (
    AssetRepositoryProtocol,
    FavouriteRepositoryProtocol,
    UserRepositoryProtocol,
)

logger = logging.getLogger(__name__)


class FavouritesService:
    """Coordinates users, assets, and favourites for a single request."""

    def __init__(
        self,
        *,
        users: UserRepositoryProtocol,
        assets: AssetRepositoryProtocol,
        favourites: FavouriteRepositoryProtocol,
    ) -> None:
        self._users = users
        self._assets = assets
        self._favourites = favourites

    async def add(self, *, user_id: uuid.UUID, asset_id: uuid.UUID) -> Favourite:
        """Favourite ``asset_id`` on behalf of ``user_id`` and return the new row."""

        await self._require_user(user_id)
        await self._assets.get(asset_id)

        if await self._favourites.exists(user_id, asset_id):
            raise FavouriteAlreadyExistsError()

        favourite = Favourite(
            id=uuid.uuid4(),
            user_id=user_id,
            asset_id=asset_id,
            created_at=utcnow(),
        )
        created = await self._favourites.create(favourite)
        logger.info(
            "Favourite %s created for user=%s asset=%s", created.id, user_id, asset_id
        )
        return created

    async def remove(self, *, user_id: uuid.UUID, asset_id: uuid.UUID) -> None:
        """Delete the user's favourite of ``asset_id``.

        Not idempotent: removing a pair that is not favourited raises
        :class:`FavouriteNotFoundError`, including on a repeated call.
        """

        await self._favourites.delete(user_id, asset_id)
        logger.info("Favourite removed for user=%s asset=%s", user_id, asset_id)

    async def list_keyset(
        self,
        *,
        user_id: uuid.UUID,
        limit: int | None = None,
        after: str | None = None,
    ) -> FavouritePage:
        """Return one page of the user's favourited assets in ascending order."""

        await self._require_user(user_id)
        page = await self._favourites.list_keyset(user_id, limit=limit, after=after)
        logger.debug(
            "Listed %d favourites for user=%s (has_more=%s)",
            len(page.assets),
            user_id,
            page.next_cursor is not None,
        )
        return page

    async def list_offset(
        self,
        *,
        user_id: uuid.UUID,
        limit: int,
        offset: int = 0,
    ) -> list[Asset]:
        """Return a newest-first window of favourited assets without a cursor."""

        await self._require_user(user_id)
        return await self._favourites.list_offset(user_id, limit=limit, offset=offset)

    async def _require_user(self, user_id: uuid.UUID) -> None:
        if not await self._users.exists(user_id):
            raise UserNotFoundError()


__all__ = ["FavouritesService"]
