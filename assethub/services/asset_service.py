"""Asset use cases outside the favourites workflow."""

from __future__ import annotations

import logging
import uuid

from assethub.db.models import Asset
from assethub.services.protocols import AssetRepositoryProtocol

logger = logging.getLogger(__name__)


class AssetService:
    """Load -> validate -> save for asset edits."""

    def __init__(self, repository: AssetRepositoryProtocol) -> None:
        self._repository = repository

    async def edit_description(self, *, asset_id: uuid.UUID, description: str) -> Asset:
        """Replace the description of ``asset_id`` and return the updated asset.

        Raises ``AssetNotFoundError`` for unknown assets and
        ``EmptyDescriptionError`` when ``description`` is blank after trimming.
        """

        asset = await self._repository.get(asset_id)
        asset.edit_description(description)
        updated = await self._repository.update(asset)
        logger.info("Asset %s description updated", asset_id)
        return updated


__all__ = ["AssetService"]
