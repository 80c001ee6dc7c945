"""Favourite persistence and keyset listing.

Two listing modes live here:

* :meth:`FavouriteRepository.list_keyset` is the canonical mode.  Rows are
  ordered ascending by ``(created_at, id)`` and resumed strictly after the
  position encoded in an opaque cursor, so pages stay stable under concurrent
  inserts and deletes.
* :meth:`FavouriteRepository.list_offset` is a weaker, descending-by-time
  window with no tie-break and no continuation token.  Its results must never
  be combined with keyset cursors.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence

from sqlalchemy import and_, delete, exists, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from assethub.db.models import Asset, Favourite
from assethub.db.repositories.types import FavouritePage, clamp_limit
from assethub.errors import (
    BadCursorError,
    FavouriteAlreadyExistsError,
    FavouriteNotFoundError,
    InvalidInputError,
)
from assethub.utils.cursor import (
    CursorDecodeError,
    KeysetCursor,
    decode_cursor,
    encode_cursor,
)

logger = logging.getLogger(__name__)


class FavouriteRepository:
    """Encapsulates SQLAlchemy operations on the ``favourites`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, favourite: Favourite) -> Favourite:
        """Insert ``favourite``.

        The ``(user_id, asset_id)`` unique constraint is the final word on
        duplicates.  When the insert trips an integrity error and the pair is
        present afterwards, a concurrent request won the race and the caller
        receives :class:`FavouriteAlreadyExistsError`.  Any other integrity
        failure propagates unchanged.
        """

        self._session.add(favourite)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            if await self._pair_exists(favourite.user_id, favourite.asset_id):
                logger.info(
                    "Concurrent favourite insert lost the race for user=%s asset=%s",
                    favourite.user_id,
                    favourite.asset_id,
                )
                raise FavouriteAlreadyExistsError() from exc
            raise
        return favourite

    async def delete(self, user_id: uuid.UUID, asset_id: uuid.UUID) -> None:
        """Delete the favourite for the pair or raise :class:`FavouriteNotFoundError`."""

        result = await self._session.execute(
            delete(Favourite).where(
                Favourite.user_id == user_id,
                Favourite.asset_id == asset_id,
            )
        )
        if not result.rowcount:
            raise FavouriteNotFoundError()

    async def exists(self, user_id: uuid.UUID, asset_id: uuid.UUID) -> bool:
        """Return whether ``user_id`` has already favourited ``asset_id``."""

        return await self._pair_exists(user_id, asset_id)

    async def list_keyset(
        self,
        user_id: uuid.UUID,
        *,
        limit: int | None = None,
        after: str | None = None,
    ) -> FavouritePage:
        """Return the user's favourited assets strictly after ``after``.

        ``limit`` is clamped with :func:`clamp_limit`.  One extra row is fetched
        to detect whether a further page exists; when it does, the cursor points
        at the last row handed back to the caller.
        """

        page_size = clamp_limit(limit)

        query = (
            select(Favourite)
            .options(joinedload(Favourite.asset))
            .where(Favourite.user_id == user_id)
            .order_by(Favourite.created_at.asc(), Favourite.id.asc())
        )

        if after:
            try:
                position = decode_cursor(after)
            except CursorDecodeError as exc:
                raise BadCursorError(f"bad cursor: {exc}") from exc
            query = query.where(
                or_(
                    Favourite.created_at > position.created_at,
                    and_(
                        Favourite.created_at == position.created_at,
                        Favourite.id > position.id,
                    ),
                )
            )

        result = await self._session.execute(query.limit(page_size + 1))
        rows = list(result.scalars().all())

        next_cursor: str | None = None
        if len(rows) > page_size:
            rows = rows[:page_size]
            last = rows[-1]
            next_cursor = encode_cursor(
                KeysetCursor(created_at=last.created_at, id=last.id)
            )

        return FavouritePage(assets=self._resolve_assets(rows), next_cursor=next_cursor)

    async def list_offset(
        self,
        user_id: uuid.UUID,
        *,
        limit: int,
        offset: int = 0,
    ) -> list[Asset]:
        """Return a newest-first window of favourited assets.

        Ordering uses ``created_at`` alone, so rows sharing a timestamp may
        swap between calls.  Prefer :meth:`list_keyset` for anything that needs
        to resume.
        """

        if limit < 0 or offset < 0:
            raise InvalidInputError("limit and offset must be non-negative")

        query = (
            select(Favourite)
            .options(joinedload(Favourite.asset))
            .where(Favourite.user_id == user_id)
            .order_by(Favourite.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(query)
        return self._resolve_assets(result.scalars().all())

    async def _pair_exists(self, user_id: uuid.UUID, asset_id: uuid.UUID) -> bool:
        query = select(
            exists().where(
                Favourite.user_id == user_id,
                Favourite.asset_id == asset_id,
            )
        )
        return bool(await self._session.scalar(query))

    def _resolve_assets(self, rows: Sequence[Favourite]) -> list[Asset]:
        assets: list[Asset] = []
        for favourite in rows:
            if favourite.asset is None:
                logger.warning(
                    "Skipping favourite %s with unresolved asset %s",
                    favourite.id,
                    favourite.asset_id,
                )
                continue
            assets.append(favourite.asset)
        return assets


__all__ = ["FavouriteRepository"]
