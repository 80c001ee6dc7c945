"""Asset persistence."""

from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from assethub.db.models import Asset
from assethub.errors import AssetNotFoundError


class AssetRepository:
    """Load and save assets. Category and creation time are never rewritten."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, asset_id: uuid.UUID) -> Asset:
        """Return the asset or raise :class:`AssetNotFoundError`."""

        asset = await self._session.get(Asset, asset_id)
        if asset is None:
            raise AssetNotFoundError()
        return asset

    async def update(self, asset: Asset) -> Asset:
        """Flush pending description/payload changes for ``asset``."""

        try:
            await self._session.flush()
        except StaleDataError as exc:
            # The row disappeared between load and save.
            raise AssetNotFoundError() from exc
        return asset
